#!/usr/bin/env python3
"""
AWS Hygiene - CLI
Routine AWS account hygiene: expired AMIs and snapshots, stale keys,
abandoned builders, log shipping and notifications
"""

import click

from aws_hygiene import __version__
from aws_hygiene.core.constants import (
    DEFAULT_MAX_KEY_AGE_DAYS,
    DEFAULT_MAX_SCAN_AGE_HOURS,
    DEFAULT_PACKER_TIME_LIMIT_HOURS,
    DEFAULT_RETENTION_DAYS,
    DEFAULT_SLACK_EMOJI,
    CREDENTIAL_REPORT_POLL_INTERVAL_MS,
    START_TIME_WINDOWS,
)
from aws_hygiene.utils.config import ConfigManager
from aws_hygiene.utils.decorators import hygiene_operation, value_output


# Common CLI options
def add_common_options(func):
    func = click.option("--verbose", is_flag=True, help="Enable verbose output")(func)
    func = click.option(
        "--output", type=click.Path(dir_okay=False), help="Write the JSON result to a file"
    )(func)
    return func


def add_confirmation_option(func):
    return click.option(
        "--yes", "-y", is_flag=True, help="Skip confirmation prompts"
    )(func)


@click.group()
@click.option("--region", envvar=["AWS_REGION", "REGION"], help="AWS region")
@click.option("--profile", envvar=["AWS_PROFILE", "PROFILE"], help="AWS profile")
@click.pass_context
def cli(ctx, region, profile):
    """AWS Hygiene - Routine AWS account cleanup and checks"""
    ctx.ensure_object(dict)

    ctx.obj["region"] = region
    ctx.obj["profile"] = profile

    # Per-command defaults from configs/settings.yaml
    if ctx.default_map is None:
        ctx.default_map = ConfigManager().get_command_defaults()


@cli.command()
@click.option("--delete", "-D", is_flag=True, envvar="DELETE",
              help="Actually purge AMIs (runs in dry run mode by default)")
@click.option("--prefix", default="", envvar="NAME_PREFIX",
              help="Name prefix to filter on (not affected by --invert)")
@click.option("--days", type=click.IntRange(min=0), default=DEFAULT_RETENTION_DAYS,
              envvar="RETENTION_DAYS", show_default=True,
              help="Age of AMI in days before it is a candidate for removal")
@click.option("--tag-key", default="", envvar="TAG_KEY",
              help="Key of tag to operate on; requires --tag-value")
@click.option("--tag-value", default="", envvar="TAG_VALUE",
              help="Value of tag to operate on; requires --tag-key")
@click.option("--invert", "-i", is_flag=True, envvar="INVERT",
              help="Only purge AMIs that do NOT match the tag")
@click.option("--unused", is_flag=True, envvar="UNUSED",
              help="Only purge AMIs no running instance was built from")
@click.option("--sts-role", default="", envvar="STS_ROLE",
              help="IAM role name used for the cross-account unused check")
@add_confirmation_option
@add_common_options
@click.pass_context
@hygiene_operation(requires_confirmation=lambda options: options["delete"])
def ami_cleaner(ctx, delete, prefix, days, tag_key, tag_value, invert, unused, sts_role):
    """Deregister expired AMIs and delete their snapshots"""
    # All processing logic is handled by the decorator
    pass


@cli.command()
@click.option("--volume-id", required=True, envvar="VOLUME_ID", help="The EBS volume to delete")
@click.option("--dry-run", is_flag=True, envvar="DRY_RUN",
              help="Don't make any changes and log what would have happened")
@click.option("--force", is_flag=True, envvar="FORCE",
              help="Delete the volume even if it belongs to a CloudFormation stack")
@add_confirmation_option
@add_common_options
@click.pass_context
@hygiene_operation(requires_confirmation=lambda options: not options["dry_run"])
def ebs_delete(ctx, volume_id, dry_run, force):
    """Snapshot an EBS volume, then delete it"""
    pass


@cli.command()
@click.option("--dry-run", is_flag=True, envvar="DRY_RUN",
              help="Don't make any changes and log what would have happened")
@click.option("--retention-days", type=click.IntRange(min=0), default=DEFAULT_RETENTION_DAYS,
              envvar="RETENTION_DAYS", show_default=True,
              help="The maximum retention age in days")
@click.option("--exclude-tag-key", default="", envvar="EXCLUDE_TAG_KEY",
              help="Tag key of snapshots to keep; requires --exclude-tag-value")
@click.option("--exclude-tag-value", default="", envvar="EXCLUDE_TAG_VALUE",
              help="Tag value of snapshots to keep; requires --exclude-tag-key")
@add_confirmation_option
@add_common_options
@click.pass_context
@hygiene_operation(requires_confirmation=lambda options: not options["dry_run"])
def ebs_snapshot_cleaner(ctx, dry_run, retention_days, exclude_tag_key, exclude_tag_value):
    """Delete EBS snapshots past the retention period"""
    pass


@cli.command()
@click.option("--repository", required=True, envvar="REPOSITORY", help="ECR repository name")
@click.option("--tag", required=True, envvar="IMAGE_TAG", help="Image tag")
@click.option("--max-scan-age", type=click.IntRange(min=0), default=DEFAULT_MAX_SCAN_AGE_HOURS,
              envvar="MAX_SCAN_AGE", show_default=True,
              help="Hours after which a completed scan is repeated")
@add_common_options
@click.pass_context
@hygiene_operation(output_handler=value_output("totalFindings"))
def ecr_scan(ctx, repository, tag, max_scan_age):
    """Print the number of vulnerability findings for an ECR image"""
    pass


@cli.command()
@click.option("--ecs-cluster-identifier", required=True, envvar="ECS_CLUSTER",
              help="The ECS cluster identifier")
@click.option("--ecs-service-identifier", required=True, envvar="ECS_SERVICE",
              help="The ECS service identifier")
@click.option("--dry-run", is_flag=True, envvar="DRY_RUN",
              help="Log the image changes without deploying")
@click.argument("containers")
@add_confirmation_option
@add_common_options
@click.pass_context
@hygiene_operation(requires_confirmation=lambda options: not options["dry_run"])
def ecs_service_deployer(ctx, ecs_cluster_identifier, ecs_service_identifier, dry_run, containers):
    """Deploy new container images to an ECS service

    CONTAINERS is a JSON document: {"containers": {"<name>": {"image": "<uri>"}}}
    """
    pass


@cli.command()
@click.option("--days", type=int, default=DEFAULT_MAX_KEY_AGE_DAYS, envvar="MAX_DAYS",
              show_default=True,
              help="Maximum age in days of an active key before alerting")
@click.option("--poll-interval", type=click.IntRange(min=0),
              default=CREDENTIAL_REPORT_POLL_INTERVAL_MS, envvar="POLL_INTERVAL",
              show_default=True,
              help="Milliseconds between credential report checks")
@click.option("--slack-webhook-url", envvar="SLACK_WEBHOOK_URL", help="The Slack webhook URL")
@click.option("--ssm-slack-webhook-url", envvar="SSM_SLACK_WEBHOOK_URL",
              help="Parameter Store key holding the Slack webhook URL")
@click.option("--slack-channel", required=True, envvar="SLACK_CHANNEL", help="The Slack channel")
@add_common_options
@click.pass_context
@hygiene_operation()
def iam_keys_check(ctx, days, poll_interval, slack_webhook_url, ssm_slack_webhook_url,
                   slack_channel):
    """Alert Slack about IAM access keys that need rotating"""
    pass


@cli.command()
@click.option("--delete", "-D", is_flag=True, envvar="DELETE",
              help="Actually purge Packer resources (runs in dry run mode by default)")
@click.option("--timelimit", "-t", type=click.IntRange(min=0),
              default=DEFAULT_PACKER_TIME_LIMIT_HOURS, envvar="TIMELIMIT", show_default=True,
              help="Hours after which Packer resources are considered abandoned")
@add_confirmation_option
@add_common_options
@click.pass_context
@hygiene_operation(requires_confirmation=lambda options: options["delete"])
def packer_janitor(ctx, delete, timelimit):
    """Terminate abandoned Packer builders and their key pairs and security groups"""
    pass


@cli.command()
@click.option("--db-instance-identifier", required=True, envvar="DB_INSTANCE_IDENTIFIER",
              help="The RDS database instance identifier")
@click.option("--retention-days", type=click.IntRange(min=0), default=DEFAULT_RETENTION_DAYS,
              envvar="RETENTION_DAYS", show_default=True,
              help="The maximum retention age in days")
@click.option("--max-snapshots", type=int, default=0, envvar="MAX_SNAPSHOTS", show_default=True,
              help="Maximum number of manual snapshots to keep (0 for no limit)")
@click.option("--dry-run", is_flag=True, envvar="DRY_RUN",
              help="Don't make any changes and log what would have happened")
@add_confirmation_option
@add_common_options
@click.pass_context
@hygiene_operation(requires_confirmation=lambda options: not options["dry_run"])
def rds_snapshot_cleaner(ctx, db_instance_identifier, retention_days, max_snapshots, dry_run):
    """Delete old manual RDS snapshots"""
    pass


@cli.command()
@click.option("--db-instance-identifier", required=True, envvar="DB_INSTANCE_IDENTIFIER",
              help="The RDS database instance identifier")
@click.option("--cloudwatch-logs-group", required=True, envvar="CLOUDWATCH_LOGS_GROUP",
              help="The CloudWatch Logs group name")
@click.option("--start-time", required=True, envvar="START_TIME",
              type=click.Choice(list(START_TIME_WINDOWS)),
              help="Ship log files written in this window")
@add_common_options
@click.pass_context
@hygiene_operation()
def rds_cloudwatch_logs(ctx, db_instance_identifier, cloudwatch_logs_group, start_time):
    """Ship RDS log files to CloudWatch Logs"""
    pass


@cli.command()
@add_common_options
@click.pass_context
@hygiene_operation()
def trusted_advisor_refresh(ctx):
    """Refresh all Trusted Advisor checks"""
    pass


@cli.command()
@click.option("--bucket", required=True, envvar="BUCKET", help="The S3 bucket to size")
@add_common_options
@click.pass_context
@hygiene_operation(output_handler=value_output("size"))
def s3_bucket_size(ctx, bucket):
    """Print the size of an S3 bucket in bytes"""
    pass


@cli.command()
@click.option("--event-file", required=True, type=click.Path(exists=True, dir_okay=False),
              help="JSON file holding the CloudWatch event")
@click.option("--slack-channel", required=True, envvar="SLACK_CHANNEL", help="The Slack channel")
@click.option("--slack-emoji", "icon_emoji", default=DEFAULT_SLACK_EMOJI, envvar="SLACK_EMOJI",
              show_default=True, help="The Slack emoji for the notification")
@click.option("--ssm-slack-webhook-url", envvar="SSM_SLACK_WEBHOOK_URL",
              help="Parameter Store key holding the Slack webhook URL")
@add_common_options
@click.pass_context
@hygiene_operation()
def aws_health_notifier(ctx, event_file, slack_channel, icon_emoji, ssm_slack_webhook_url):
    """Post an AWS Health event to Slack"""
    pass


@cli.command()
def version():
    """Show version information"""
    click.echo(f"AWS Hygiene Tools {__version__}")
    click.echo("Routine AWS account hygiene toolkit")


if __name__ == "__main__":
    cli()
