"""Simple data models for EC2 instances."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional, Any

from .tags import tags_to_dict


class InstanceState(Enum):
    """EC2 instance states."""
    PENDING = "pending"
    RUNNING = "running"
    STOPPING = "stopping"
    STOPPED = "stopped"
    SHUTTING_DOWN = "shutting-down"
    TERMINATED = "terminated"


@dataclass
class InstanceInfo:
    """Simple EC2 instance information model."""
    instance_id: str
    launch_time: datetime
    state: str = InstanceState.RUNNING.value
    key_name: Optional[str] = None
    security_group_ids: List[str] = field(default_factory=list)
    tags: Dict[str, str] = field(default_factory=dict)

    @property
    def name(self) -> str:
        return self.tags.get("Name", "")

    @property
    def security_group_id(self) -> Optional[str]:
        """The first security group; Packer builders only ever get one."""
        return self.security_group_ids[0] if self.security_group_ids else None

    @classmethod
    def from_aws_instance(cls, instance: Dict[str, Any]) -> "InstanceInfo":
        """Create InstanceInfo from AWS instance data."""
        return cls(
            instance_id=instance["InstanceId"],
            launch_time=instance["LaunchTime"],
            state=instance.get("State", {}).get("Name", InstanceState.RUNNING.value),
            key_name=instance.get("KeyName"),
            security_group_ids=[
                group["GroupId"] for group in instance.get("SecurityGroups", [])
            ],
            tags=tags_to_dict(instance.get("Tags")),
        )
