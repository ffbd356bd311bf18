"""Simple data models for AWS resources."""

# AMI models
from .ami import (
    AMIInfo,
    parse_creation_date,
)

# Snapshot models
from .snapshot import (
    SnapshotInfo,
    DBSnapshotInfo,
)

# Instance models
from .instance import (
    InstanceState,
    InstanceInfo,
)

# Tag models
from .tags import (
    TagFilter,
    copy_tags,
    tags_to_dict,
)

# ECR and Health models
from .ecr import ScanTarget, ScanReport
from .health import EventDescription, HealthEvent

__all__ = [
    # AMI models
    "AMIInfo",
    "parse_creation_date",
    # Snapshot models
    "SnapshotInfo",
    "DBSnapshotInfo",
    # Instance models
    "InstanceState",
    "InstanceInfo",
    # Tag models
    "TagFilter",
    "copy_tags",
    "tags_to_dict",
    # ECR models
    "ScanTarget",
    "ScanReport",
    # Health models
    "EventDescription",
    "HealthEvent",
]
