"""Simple data models for EBS and RDS snapshot management."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Optional, Any

from .tags import tags_to_dict


@dataclass
class SnapshotInfo:
    """Simple EBS snapshot information model."""
    snapshot_id: str
    start_time: datetime
    volume_id: str = ""
    volume_size: int = 0
    state: str = "completed"
    description: str = ""
    tags: Dict[str, str] = field(default_factory=dict)

    def get_tag(self, key: str, default: str = "") -> str:
        return self.tags.get(key, default)

    @classmethod
    def from_aws_snapshot(cls, snapshot: Dict[str, Any]) -> "SnapshotInfo":
        """Create SnapshotInfo from AWS snapshot data."""
        return cls(
            snapshot_id=snapshot["SnapshotId"],
            start_time=snapshot["StartTime"],
            volume_id=snapshot.get("VolumeId", ""),
            volume_size=snapshot.get("VolumeSize", 0),
            state=snapshot.get("State", "completed"),
            description=snapshot.get("Description", ""),
            tags=tags_to_dict(snapshot.get("Tags")),
        )


@dataclass
class DBSnapshotInfo:
    """Manual RDS snapshot information model."""
    identifier: str
    create_time: datetime
    instance_identifier: str = ""
    status: str = "available"

    @classmethod
    def from_aws_db_snapshot(cls, snapshot: Dict[str, Any]) -> Optional["DBSnapshotInfo"]:
        """Create DBSnapshotInfo, or None for snapshots still being created."""
        if not snapshot.get("SnapshotCreateTime"):
            return None
        return cls(
            identifier=snapshot["DBSnapshotIdentifier"],
            create_time=snapshot["SnapshotCreateTime"],
            instance_identifier=snapshot.get("DBInstanceIdentifier", ""),
            status=snapshot.get("Status", ""),
        )
