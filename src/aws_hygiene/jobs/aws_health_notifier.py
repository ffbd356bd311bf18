#!/usr/bin/env python3
"""
AWS Health Notifier Job

Forwards an AWS Health event (delivered as a CloudWatch event) to Slack.
"""

import json
from pathlib import Path
from typing import Any, Dict, Optional

from .base import BaseJob
from aws_hygiene.core.aws import create_ssm_manager
from aws_hygiene.core.constants import DEFAULT_SLACK_EMOJI, PERSONAL_HEALTH_DASHBOARD_URL
from aws_hygiene.core.models import HealthEvent
from aws_hygiene.utils.exceptions import ValidationError
from aws_hygiene.utils.slack import SlackNotifier, build_attachment, build_field


def build_health_message(
    event: HealthEvent, channel: str, icon_emoji: str = DEFAULT_SLACK_EMOJI
) -> Dict[str, Any]:
    """The Slack message for a Health event."""
    fields = [
        build_field("Service", event.service),
        build_field("Description", event.latest_description),
        build_field("EventTypeCode", event.event_type_code),
        build_field("Link", event.health_event_url()),
    ]
    return {
        "channel": channel,
        "icon_emoji": icon_emoji,
        "attachments": [
            build_attachment(
                "AWS Health Notification",
                title_link=PERSONAL_HEALTH_DASHBOARD_URL,
                color="danger",
                fields=fields,
            )
        ],
    }


def load_event_file(path: str) -> Dict[str, Any]:
    try:
        return json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        raise ValidationError(f"could not read event file {path}: {e}") from e


class AWSHealthNotifierJob(BaseJob):
    """Job to post AWS Health events to Slack"""

    def __init__(self, *args, **kwargs):
        kwargs.setdefault("job_name", "aws_health_notifier")
        super().__init__(*args, **kwargs)

    def execute(self, **kwargs) -> Dict[str, Any]:
        """
        Notify Slack about one Health event

        Args:
            **kwargs: event (dict) or event_file, slack_channel,
                ssm_slack_webhook_url, slack_webhook_url, icon_emoji

        Returns:
            Dictionary with the event ARN
        """
        event: Optional[Dict[str, Any]] = kwargs.get("event")
        if event is None and kwargs.get("event_file"):
            event = load_event_file(kwargs["event_file"])
        if not isinstance(event, dict) or "detail" not in event:
            raise ValidationError("a CloudWatch event with a Health detail is required")

        channel = kwargs.get("slack_channel") or self.config_manager.get_slack_channel()
        if not channel:
            raise ValidationError("a Slack channel is required")
        icon_emoji = kwargs.get("icon_emoji") or DEFAULT_SLACK_EMOJI

        try:
            health_event = HealthEvent.from_detail(event["detail"])
        except ValueError as e:
            raise ValidationError(f"invalid Health event detail: {e}") from e

        webhook_url = kwargs.get("slack_webhook_url") or self.decrypt_webhook_url(
            kwargs.get("ssm_slack_webhook_url")
        )

        self.log(f"Sending Health event {health_event.event_arn} to Slack")
        SlackNotifier(webhook_url).send(build_health_message(health_event, channel, icon_emoji))

        return self.result(
            message=f"Notified {channel} of {health_event.event_type_code}",
            event_arn=health_event.event_arn,
        )

    def decrypt_webhook_url(self, parameter: Optional[str] = None) -> str:
        parameter = parameter or self.config_manager.get_ssm_slack_webhook_parameter()
        if not parameter:
            raise ValidationError("a Parameter Store key for the Slack webhook is required")
        return create_ssm_manager(self.session, self.region).decrypt_value(parameter)
