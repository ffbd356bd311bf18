#!/usr/bin/env python3
"""
AWS Lambda entry points, one per job.

Options come from the same environment variables the CLI honours, falling
back to ``commands.<command>`` in the settings file. Errors propagate to the
Lambda runtime so the invocation is marked as failed.
"""

import json
from typing import Any, Dict

from aws_hygiene.core.constants import (
    CREDENTIAL_REPORT_POLL_INTERVAL_MS,
    DEFAULT_MAX_KEY_AGE_DAYS,
    DEFAULT_MAX_SCAN_AGE_HOURS,
    DEFAULT_PACKER_TIME_LIMIT_HOURS,
    DEFAULT_RETENTION_DAYS,
    DEFAULT_SLACK_EMOJI,
)
from aws_hygiene.core.models import ScanTarget
from aws_hygiene.jobs import (
    AMICleanerJob,
    AWSHealthNotifierJob,
    EBSSnapshotCleanerJob,
    ECRScanJob,
    ECSServiceDeployerJob,
    IAMKeysCheckJob,
    PackerJanitorJob,
    RDSCloudWatchLogsJob,
    RDSSnapshotCleanerJob,
    TrustedAdvisorRefreshJob,
)
from aws_hygiene.utils.config import ConfigManager, to_bool


def _options(command: str, sources: Dict[str, tuple]) -> Dict[str, Any]:
    """Read job options: ``{option: (env_var, default)}``."""
    config = ConfigManager()
    return {
        option: config.get_command_option(command, option, default, env_var=env_var)
        for option, (env_var, default) in sources.items()
    }


def ami_cleaner_handler(event, context):
    options = _options("ami-cleaner", {
        "delete": ("DELETE", False),
        "prefix": ("NAME_PREFIX", ""),
        "days": ("RETENTION_DAYS", DEFAULT_RETENTION_DAYS),
        "tag_key": ("TAG_KEY", ""),
        "tag_value": ("TAG_VALUE", ""),
        "invert": ("INVERT", False),
        "unused": ("UNUSED", False),
        "sts_role": ("STS_ROLE", ""),
    })
    for flag in ("delete", "invert", "unused"):
        options[flag] = to_bool(options[flag])
    options["days"] = int(options["days"])
    return AMICleanerJob().execute(**options)


def ebs_snapshot_cleaner_handler(event, context):
    options = _options("ebs-snapshot-cleaner", {
        "dry_run": ("DRY_RUN", False),
        "retention_days": ("RETENTION_DAYS", DEFAULT_RETENTION_DAYS),
        "exclude_tag_key": ("EXCLUDE_TAG_KEY", ""),
        "exclude_tag_value": ("EXCLUDE_TAG_VALUE", ""),
    })
    options["dry_run"] = to_bool(options["dry_run"])
    return EBSSnapshotCleanerJob().execute(**options)


def ecr_scan_handler(event, context):
    """Evaluate the image named in ``{"repository", "imageTag"}``; returns the total as a string."""
    max_scan_age = ConfigManager().get_command_option(
        "ecr-scan", "max_scan_age", DEFAULT_MAX_SCAN_AGE_HOURS, env_var="MAX_SCAN_AGE"
    )
    job = ECRScanJob()
    job.max_scan_age = int(max_scan_age)
    report = job.evaluate(ScanTarget.from_event(event) if event else None)
    return str(report.total_findings)


def ecs_service_deployer_handler(event, context):
    options = _options("ecs-service-deployer", {
        "ecs_cluster_identifier": ("ECS_CLUSTER", ""),
        "ecs_service_identifier": ("ECS_SERVICE", ""),
        "containers": ("CONTAINER_JSON", ""),
        "dry_run": ("DRY_RUN", False),
    })
    options["dry_run"] = to_bool(options["dry_run"])
    if event and "containers" in event:
        options["containers"] = json.dumps({"containers": event["containers"]})
    return ECSServiceDeployerJob().execute(**options)


def iam_keys_check_handler(event, context):
    config = ConfigManager()
    options = _options("iam-keys-check", {
        "days": ("MAX_DAYS", DEFAULT_MAX_KEY_AGE_DAYS),
        "poll_interval": ("POLL_INTERVAL", CREDENTIAL_REPORT_POLL_INTERVAL_MS),
        "slack_webhook_url": ("SLACK_WEBHOOK_URL", ""),
        "ssm_slack_webhook_url": ("SSM_SLACK_WEBHOOK_URL", config.get_ssm_slack_webhook_parameter()),
        "slack_channel": ("SLACK_CHANNEL", config.get_slack_channel()),
    })
    return IAMKeysCheckJob(config_manager=config).execute(**options)


def packer_janitor_handler(event, context):
    options = _options("packer-janitor", {
        "delete": ("DELETE", False),
        "timelimit": ("TIMELIMIT", DEFAULT_PACKER_TIME_LIMIT_HOURS),
    })
    options["delete"] = to_bool(options["delete"])
    return PackerJanitorJob().execute(**options)


def rds_snapshot_cleaner_handler(event, context):
    options = _options("rds-snapshot-cleaner", {
        "db_instance_identifier": ("DB_INSTANCE_IDENTIFIER", ""),
        "retention_days": ("RETENTION_DAYS", DEFAULT_RETENTION_DAYS),
        "max_snapshots": ("MAX_SNAPSHOTS", 0),
        "dry_run": ("DRY_RUN", False),
    })
    options["dry_run"] = to_bool(options["dry_run"])
    return RDSSnapshotCleanerJob().execute(**options)


def rds_cloudwatch_logs_handler(event, context):
    options = _options("rds-cloudwatch-logs", {
        "db_instance_identifier": ("DB_INSTANCE_IDENTIFIER", ""),
        "cloudwatch_logs_group": ("CLOUDWATCH_LOGS_GROUP", ""),
        "start_time": ("START_TIME", "1h"),
    })
    return RDSCloudWatchLogsJob().execute(**options)


def trusted_advisor_refresh_handler(event, context):
    return TrustedAdvisorRefreshJob().execute()


def aws_health_notifier_handler(event, context):
    config = ConfigManager()
    options = _options("aws-health-notifier", {
        "slack_channel": ("SLACK_CHANNEL", config.get_slack_channel()),
        "icon_emoji": ("SLACK_EMOJI", DEFAULT_SLACK_EMOJI),
        "ssm_slack_webhook_url": ("SSM_SLACK_WEBHOOK_URL", config.get_ssm_slack_webhook_parameter()),
    })
    return AWSHealthNotifierJob(config_manager=config).execute(event=event, **options)
