"""Data models for ECR image scan evaluation."""

from dataclasses import dataclass
from typing import Dict, Any


@dataclass
class ScanTarget:
    """The ECR image to retrieve scan findings for."""
    repository: str = ""
    image_tag: str = ""

    @property
    def is_valid(self) -> bool:
        return bool(self.repository) and bool(self.image_tag)

    @property
    def image_id(self) -> Dict[str, str]:
        return {"imageTag": self.image_tag}

    @classmethod
    def from_event(cls, event: Dict[str, Any]) -> "ScanTarget":
        """Create a target from a Lambda event ``{"repository", "imageTag"}``."""
        event = event or {}
        return cls(
            repository=event.get("repository", ""),
            image_tag=event.get("imageTag", ""),
        )


@dataclass
class ScanReport:
    """Scan finding information returned to the caller."""
    total_findings: int

    def to_dict(self) -> Dict[str, int]:
        return {"totalFindings": self.total_findings}
