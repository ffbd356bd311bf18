#!/usr/bin/env python3
"""
EBS Snapshot Cleaner Job

Deletes EBS snapshots owned by the account that are older than the
retention period. Snapshots carrying the exclude tag are kept, and so are
snapshots still referenced by an AMI (AWS refuses to delete those).
"""

from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from botocore.exceptions import ClientError

from .base import BaseJob
from aws_hygiene.core.constants import DEFAULT_RETENTION_DAYS, SNAPSHOT_IN_USE
from aws_hygiene.core.models import SnapshotInfo, TagFilter
from aws_hygiene.utils.exceptions import ValidationError, ValidationRules


class EBSSnapshotCleanerJob(BaseJob):
    """Job to cleanup old EBS snapshots"""

    def __init__(self, *args, **kwargs):
        kwargs.setdefault("job_name", "ebs_snapshot_cleaner")
        super().__init__(*args, **kwargs)
        self.dry_run = False
        self.exclude = TagFilter()
        self.expiration_date: Optional[datetime] = None

    def execute(self, **kwargs) -> Dict[str, Any]:
        """
        Cleanup old snapshots

        Args:
            **kwargs: retention_days, exclude_tag_key, exclude_tag_value, dry_run

        Returns:
            Dictionary with cleanup results
        """
        retention_days = int(kwargs.get("retention_days", DEFAULT_RETENTION_DAYS))
        tag_key = kwargs.get("exclude_tag_key") or ""
        tag_value = kwargs.get("exclude_tag_value") or ""
        self.dry_run = kwargs.get("dry_run", False)

        if not ValidationRules.validate_paired(tag_key, tag_value):
            raise ValidationError("must specify both an exclude tag key and value")

        self.exclude = TagFilter(key=tag_key, value=tag_value)
        self.expiration_date = self.utc_now() - timedelta(days=retention_days)

        candidates = [s for s in self.get_ebs_snapshots() if self.check_ebs_snapshot(s)]
        self.log(
            f"Found {len(candidates)} snapshots older than {self.expiration_date.isoformat()}"
        )

        deleted = []
        for snapshot in candidates:
            if self.delete_ebs_snapshot(snapshot.snapshot_id):
                deleted.append(snapshot.snapshot_id)

        action = "DRY RUN: Would delete" if self.dry_run else "Deleted"
        return self.result(
            message=f"{action} {len(deleted)} snapshots",
            dry_run=self.dry_run,
            snapshots=deleted,
            skipped=[s.snapshot_id for s in candidates if s.snapshot_id not in deleted],
            total_size_gb=sum(s.volume_size for s in candidates if s.snapshot_id in deleted),
        )

    def get_ebs_snapshots(self) -> List[SnapshotInfo]:
        """All snapshots owned by the account."""
        paginator = self.client("ec2").get_paginator("describe_snapshots")
        snapshots = []
        for page in paginator.paginate(OwnerIds=["self"]):
            snapshots.extend(
                SnapshotInfo.from_aws_snapshot(item) for item in page.get("Snapshots", [])
            )
        return snapshots

    def check_ebs_snapshot(self, snapshot: SnapshotInfo) -> bool:
        """True when the snapshot is expired and not excluded by tag."""
        if snapshot.start_time > self.expiration_date:
            return False
        if not self.exclude.is_empty and self.exclude.has_tag(snapshot.tags):
            self.log(f"Snapshot {snapshot.snapshot_id} is excluded by tag", level="debug")
            return False
        return True

    def delete_ebs_snapshot(self, snapshot_id: str) -> bool:
        """Delete a snapshot; returns False when it was in use and skipped."""
        if self.dry_run:
            self.log(f"Would delete snapshot {snapshot_id}")
            return True

        try:
            self.client("ec2").delete_snapshot(SnapshotId=snapshot_id)
        except ClientError as e:
            if e.response["Error"]["Code"] == SNAPSHOT_IN_USE:
                self.log(f"Snapshot {snapshot_id} is in use, skipping: {e}", level="warning")
                return False
            self.log(f"Failed to delete snapshot {snapshot_id}: {e}", level="error")
            raise

        self.log(f"Deleted snapshot {snapshot_id}")
        return True
