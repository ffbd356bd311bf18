#!/usr/bin/env python3
"""
EBS Delete Job

Snapshots an EBS volume, copies the volume's tags onto the snapshot and
deletes the volume once the snapshot has completed. Volumes that belong to a
CloudFormation stack are left alone unless ``force`` is given, since the
stack should be deleted instead.
"""

from typing import Any, Dict, List, Tuple

from .base import BaseJob
from aws_hygiene.core.constants import CLOUDFORMATION_STACK_TAG
from aws_hygiene.core.models import copy_tags, tags_to_dict
from aws_hygiene.utils.exceptions import ResourceNotFoundError, ValidationError


class EBSDeleteJob(BaseJob):
    """Job to snapshot and delete a single EBS volume"""

    def __init__(self, *args, **kwargs):
        kwargs.setdefault("job_name", "ebs_delete")
        super().__init__(*args, **kwargs)

    def execute(self, **kwargs) -> Dict[str, Any]:
        """
        Snapshot and delete a volume

        Args:
            **kwargs: volume_id, force, dry_run

        Returns:
            Dictionary with the volume and snapshot IDs
        """
        volume_id = kwargs.get("volume_id")
        force = kwargs.get("force", False)
        dry_run = kwargs.get("dry_run", False)

        if not volume_id:
            raise ValidationError("volume ID is required")

        volume = self.find_volume(volume_id)
        tags = volume.get("Tags") or []

        cloudformed, stack_name = self.is_cloudformed(volume)
        if cloudformed and not force:
            self.log(
                f"Volume {volume_id} is managed by CloudFormation stack {stack_name}. "
                f"Delete stack {stack_name} instead, or use force",
                level="warning",
            )
            return self.result(
                status="skipped",
                message=f"Delete stack {stack_name}",
                volume_id=volume_id,
                stack_name=stack_name,
            )

        if dry_run:
            self.log(f"Would snapshot and delete volume {volume_id}")
            return self.result(
                message=f"DRY RUN: Would snapshot and delete volume {volume_id}",
                dry_run=True,
                volume_id=volume_id,
            )

        snapshot_id = self.snapshot_volume(volume_id, tags)
        self.delete_volume(volume_id)

        return self.result(
            message=f"Deleted volume {volume_id}, snapshot {snapshot_id}",
            volume_id=volume_id,
            snapshot_id=snapshot_id,
        )

    def find_volume(self, volume_id: str) -> Dict[str, Any]:
        response = self.client("ec2").describe_volumes(
            Filters=[{"Name": "volume-id", "Values": [volume_id]}]
        )
        volumes = response.get("Volumes", [])
        if len(volumes) != 1:
            raise ResourceNotFoundError(
                f"expected to find one volume {volume_id}, found {len(volumes)}"
            )
        return volumes[0]

    @staticmethod
    def is_cloudformed(volume: Dict[str, Any]) -> Tuple[bool, str]:
        """Whether the volume belongs to a CloudFormation stack, and which one."""
        stack_name = tags_to_dict(volume.get("Tags")).get(CLOUDFORMATION_STACK_TAG, "")
        return bool(stack_name), stack_name

    def snapshot_volume(self, volume_id: str, tags: List[Dict[str, str]]) -> str:
        """Create a snapshot of the volume and wait until it has completed."""
        ec2 = self.client("ec2")

        self.log(f"Creating snapshot of {volume_id}")
        snapshot = ec2.create_snapshot(VolumeId=volume_id, Description=volume_id)
        snapshot_id = snapshot["SnapshotId"]

        if tags:
            ec2.create_tags(Resources=[snapshot_id], Tags=copy_tags(tags))

        self.log(f"Waiting for snapshot {snapshot_id} to complete")
        ec2.get_waiter("snapshot_completed").wait(SnapshotIds=[snapshot_id])
        self.log(f"Snapshot {snapshot_id} of {volume_id} completed")
        return snapshot_id

    def delete_volume(self, volume_id: str) -> None:
        self.log(f"Deleting volume {volume_id}")
        self.client("ec2").delete_volume(VolumeId=volume_id)
