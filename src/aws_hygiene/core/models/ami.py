"""Simple data models for AWS AMI management."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, List, Optional, Any

from aws_hygiene.core.constants import AMI_CREATION_DATE_FORMAT, EBS_ROOT_DEVICE
from .tags import tags_to_dict


def parse_creation_date(value: Optional[str]) -> Optional[datetime]:
    """Parse an AMI CreationDate such as ``2019-03-31T21:04:57.000Z``."""
    if not value:
        return None
    return datetime.strptime(value, AMI_CREATION_DATE_FORMAT).replace(tzinfo=timezone.utc)


@dataclass
class AMIInfo:
    """Simple AMI information model."""
    image_id: str
    name: str = ""
    creation_date: Optional[datetime] = None
    owner_id: str = ""
    root_device_type: str = EBS_ROOT_DEVICE
    state: str = "available"
    snapshot_ids: List[str] = field(default_factory=list)
    tags: Dict[str, str] = field(default_factory=dict)

    @property
    def is_ebs_backed(self) -> bool:
        return self.root_device_type == EBS_ROOT_DEVICE

    def get_tag(self, key: str, default: str = "") -> str:
        return self.tags.get(key, default)

    @classmethod
    def from_aws_image(cls, image: Dict[str, Any]) -> "AMIInfo":
        """Create AMIInfo from AWS image data."""
        snapshot_ids = [
            mapping["Ebs"]["SnapshotId"]
            for mapping in image.get("BlockDeviceMappings", [])
            if mapping.get("Ebs", {}).get("SnapshotId")
        ]

        return cls(
            image_id=image["ImageId"],
            name=image.get("Name", ""),
            creation_date=parse_creation_date(image.get("CreationDate")),
            owner_id=image.get("OwnerId", ""),
            root_device_type=image.get("RootDeviceType", ""),
            state=image.get("State", "available"),
            snapshot_ids=snapshot_ids,
            tags=tags_to_dict(image.get("Tags")),
        )
