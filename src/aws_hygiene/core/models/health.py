"""Data model for AWS Personal Health events."""

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Union

from aws_hygiene.core.constants import PERSONAL_HEALTH_DASHBOARD_URL


@dataclass
class EventDescription:
    language: str = ""
    latest: str = ""


@dataclass
class HealthEvent:
    """Relevant fields of the ``detail`` payload of an AWS Health event."""
    event_arn: str = ""
    service: str = ""
    event_type_code: str = ""
    event_type_category: str = ""
    descriptions: List[EventDescription] = field(default_factory=list)

    @property
    def latest_description(self) -> str:
        return self.descriptions[0].latest if self.descriptions else ""

    def health_event_url(self) -> str:
        """The (unescaped) dashboard URL for this event."""
        return (
            f"{PERSONAL_HEALTH_DASHBOARD_URL}#/dashboard/open-issues"
            f"?eventID={self.event_arn}&eventTab=details&layout=horizontal"
        )

    @classmethod
    def from_detail(cls, detail: Union[str, Dict[str, Any]]) -> "HealthEvent":
        """Create a HealthEvent from the event detail (dict or JSON string).

        Raises ValueError when the detail is not a JSON object.
        """
        if isinstance(detail, (str, bytes)):
            detail = json.loads(detail)
        if not isinstance(detail, dict):
            raise ValueError("health event detail must be a JSON object")

        return cls(
            event_arn=detail.get("eventArn", ""),
            service=detail.get("service", ""),
            event_type_code=detail.get("eventTypeCode", ""),
            event_type_category=detail.get("eventTypeCategory", ""),
            descriptions=[
                EventDescription(
                    language=item.get("language", ""),
                    latest=item.get("latestDescription", ""),
                )
                for item in detail.get("eventDescription", [])
            ],
        )
