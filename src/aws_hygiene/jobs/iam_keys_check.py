#!/usr/bin/env python3
"""
IAM Keys Check Job

Reads the IAM credential report and alerts a Slack channel about users
with an active access key older than the allowed number of days.
"""

import csv
import io
import time
from datetime import datetime
from typing import Any, Dict, List

from botocore.exceptions import ClientError

from .base import BaseJob
from aws_hygiene.core.aws import create_ssm_manager
from aws_hygiene.core.constants import (
    AWS_TIMESTAMP_FORMAT,
    CREDENTIAL_REPORT_POLL_INTERVAL_MS,
    CREDENTIAL_REPORT_TRIES,
    DEFAULT_MAX_KEY_AGE_DAYS,
    LIMIT_EXCEEDED,
    REPORT_EXPIRED,
    REPORT_IN_PROGRESS,
    REPORT_NOT_PRESENT,
)
from aws_hygiene.utils.exceptions import CredentialReportError, ValidationError
from aws_hygiene.utils.slack import SlackNotifier, build_attachment

ACCESS_KEYS = ("access_key_1", "access_key_2")


def parse_timestamp(value: str) -> datetime:
    """Parse a credential report timestamp such as ``2018-07-11T19:19:08+00:00``."""
    return datetime.strptime(value, AWS_TIMESTAMP_FORMAT)


def find_stale_users(report_csv: str, generated_time: datetime, max_days: int) -> List[str]:
    """Users with an active access key last rotated over ``max_days`` ago."""
    reader = csv.DictReader(io.StringIO(report_csv))
    stale = set()

    for row in reader:
        row = {key.strip().lower(): value for key, value in row.items() if key}
        user = row.get("user", "")
        for key in ACCESS_KEYS:
            if row.get(f"{key}_active") != "true":
                continue
            last_rotated = parse_timestamp(row[f"{key}_last_rotated"])
            age_days = (generated_time - last_rotated).total_seconds() / 86400
            if age_days > max_days:
                stale.add(user)
                break

    return sorted(stale)


def build_stale_keys_message(channel: str, users: List[str], max_days: int) -> Dict[str, Any]:
    text = (
        f"The following users have an active access key over {max_days} days old: "
        f"{', '.join(users)}"
    )
    return {
        "channel": channel,
        "text": "AWS notification",
        "attachments": [build_attachment("Message", text=text)],
    }


class IAMKeysCheckJob(BaseJob):
    """Job to alert on stale IAM access keys"""

    def __init__(self, *args, **kwargs):
        kwargs.setdefault("job_name", "iam_keys_check")
        super().__init__(*args, **kwargs)
        self.poll_interval = CREDENTIAL_REPORT_POLL_INTERVAL_MS

    def execute(self, **kwargs) -> Dict[str, Any]:
        """
        Check access key ages and notify Slack

        Args:
            **kwargs: days, poll_interval, slack_webhook_url,
                ssm_slack_webhook_url, slack_channel

        Returns:
            Dictionary with the stale users and whether Slack was notified
        """
        max_days = int(kwargs.get("days", DEFAULT_MAX_KEY_AGE_DAYS))
        self.poll_interval = int(kwargs.get("poll_interval", CREDENTIAL_REPORT_POLL_INTERVAL_MS))
        channel = kwargs.get("slack_channel") or ""

        if max_days <= 0:
            raise ValidationError("days must be greater than 0")
        if not channel:
            raise ValidationError("a Slack channel is required")

        webhook_url = self.resolve_webhook_url(
            kwargs.get("slack_webhook_url"), kwargs.get("ssm_slack_webhook_url")
        )

        report = self.get_credential_report()
        content = report["Content"]
        if isinstance(content, bytes):
            content = content.decode("utf-8")

        users = find_stale_users(content, report["GeneratedTime"], max_days)
        if not users:
            self.log(f"No active access keys older than {max_days} days")
            return self.result(message="No stale access keys", users=[], notified=False)

        self.log(f"Users with access keys older than {max_days} days: {', '.join(users)}")
        SlackNotifier(webhook_url).send(build_stale_keys_message(channel, users, max_days))

        return self.result(
            message=f"{len(users)} users have stale access keys",
            users=users,
            notified=True,
        )

    def resolve_webhook_url(self, webhook_url: str = None, ssm_parameter: str = None) -> str:
        """The webhook URL from the option, or decrypted from Parameter Store."""
        if webhook_url:
            return webhook_url
        if ssm_parameter:
            return create_ssm_manager(self.session, self.region).decrypt_value(ssm_parameter)
        raise ValidationError("a Slack webhook URL or a Parameter Store key is required")

    def get_credential_report(self, tries: int = CREDENTIAL_REPORT_TRIES) -> Dict[str, Any]:
        """
        Fetch the credential report, generating it when necessary.

        Raises:
            CredentialReportError: when no report is available after ``tries`` attempts
        """
        iam = self.client("iam")

        for _ in range(tries):
            try:
                return iam.get_credential_report()
            except ClientError as e:
                code = e.response["Error"]["Code"]
                if code in (REPORT_NOT_PRESENT, REPORT_EXPIRED):
                    self.log(f"Credential report unavailable ({code}), generating a new one")
                    self._generate_credential_report(iam)
                elif code == REPORT_IN_PROGRESS:
                    self.log("Credential report generation in progress", level="debug")
                else:
                    raise
            self._sleep()

        raise CredentialReportError(
            f"maximum number of tries ({tries}) to get the credential report reached"
        )

    def _generate_credential_report(self, iam) -> None:
        try:
            iam.generate_credential_report()
        except ClientError as e:
            if e.response["Error"]["Code"] != LIMIT_EXCEEDED:
                raise
            self.log("Credential report generation limit exceeded, waiting", level="warning")

    def _sleep(self) -> None:
        time.sleep(self.poll_interval / 1000.0)
