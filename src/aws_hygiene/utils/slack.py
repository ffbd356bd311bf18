"""Slack incoming-webhook client."""

from typing import Any, Dict, List, Optional

import requests

from aws_hygiene.core.constants import SLACK_TIMEOUT_SECONDS
from .exceptions import NotificationError
from .logger import setup_logger

logger = setup_logger(__name__, "slack.log")


def build_attachment(
    title: str,
    text: Optional[str] = None,
    title_link: Optional[str] = None,
    color: Optional[str] = None,
    fields: Optional[List[Dict[str, Any]]] = None,
) -> Dict[str, Any]:
    """Build a Slack message attachment, leaving out unset keys."""
    attachment: Dict[str, Any] = {"title": title}
    if text is not None:
        attachment["text"] = text
    if title_link:
        attachment["title_link"] = title_link
    if color:
        attachment["color"] = color
    if fields:
        attachment["fields"] = fields
    return attachment


def build_field(title: str, value: str, short: bool = False) -> Dict[str, Any]:
    return {"title": title, "value": value, "short": short}


class SlackNotifier:
    """Posts JSON payloads to a Slack incoming webhook."""

    def __init__(self, webhook_url: str, timeout: int = SLACK_TIMEOUT_SECONDS):
        if not webhook_url:
            raise NotificationError("Slack webhook URL is required")
        self.webhook_url = webhook_url
        self.timeout = timeout

    def send(self, payload: Dict[str, Any]) -> None:
        """Send a message payload; raises NotificationError on failure."""
        try:
            response = requests.post(self.webhook_url, json=payload, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            raise NotificationError(f"Failed to send Slack message: {e}") from e

        logger.info(f"Sent Slack message to channel {payload.get('channel', 'default')}")
