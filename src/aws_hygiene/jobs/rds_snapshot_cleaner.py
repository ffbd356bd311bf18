#!/usr/bin/env python3
"""
RDS Snapshot Cleaner Job

Deletes manual RDS snapshots of a DB instance that are older than the
retention period, or that exceed the maximum number of snapshots to keep.
"""

from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from .base import BaseJob
from aws_hygiene.core.constants import DEFAULT_RETENTION_DAYS
from aws_hygiene.core.models import DBSnapshotInfo
from aws_hygiene.utils.exceptions import ValidationError


def sort_db_snapshots(snapshots: List[DBSnapshotInfo]) -> List[DBSnapshotInfo]:
    """Newest snapshot first."""
    return sorted(snapshots, key=lambda snapshot: snapshot.create_time, reverse=True)


def find_db_snapshots_to_delete(
    snapshots: List[DBSnapshotInfo], expiration_date: datetime, max_snapshots: int = 0
) -> List[DBSnapshotInfo]:
    """Expired snapshots plus everything past the newest ``max_snapshots``.

    ``max_snapshots`` of 0 means no limit on the count.
    """
    to_delete = []
    for position, snapshot in enumerate(sort_db_snapshots(snapshots), start=1):
        if snapshot.create_time < expiration_date:
            to_delete.append(snapshot)
        elif max_snapshots and position > max_snapshots:
            to_delete.append(snapshot)
    return to_delete


class RDSSnapshotCleanerJob(BaseJob):
    """Job to cleanup manual RDS snapshots"""

    def __init__(self, *args, **kwargs):
        kwargs.setdefault("job_name", "rds_snapshot_cleaner")
        super().__init__(*args, **kwargs)
        self.db_instance_identifier = ""
        self.max_snapshots = 0
        self.dry_run = False
        self.expiration_date: Optional[datetime] = None

    def execute(self, **kwargs) -> Dict[str, Any]:
        """
        Cleanup manual snapshots of one DB instance

        Args:
            **kwargs: db_instance_identifier, retention_days, max_snapshots, dry_run

        Returns:
            Dictionary with the deleted snapshot identifiers
        """
        self.db_instance_identifier = kwargs.get("db_instance_identifier") or ""
        retention_days = int(kwargs.get("retention_days", DEFAULT_RETENTION_DAYS))
        self.max_snapshots = int(kwargs.get("max_snapshots", 0) or 0)
        self.dry_run = kwargs.get("dry_run", False)

        if not self.db_instance_identifier:
            raise ValidationError("a DB instance identifier is required")
        if self.max_snapshots < 0:
            raise ValidationError("max snapshots must be 0 or greater")

        self.expiration_date = self.utc_now() - timedelta(days=retention_days)

        snapshots = self.find_manual_db_snapshots()
        to_delete = self.find_db_snapshots_to_delete(snapshots)
        self.delete_db_snapshots(to_delete)

        action = "DRY RUN: Would delete" if self.dry_run else "Deleted"
        return self.result(
            message=f"{action} {len(to_delete)} of {len(snapshots)} manual snapshots "
            f"of {self.db_instance_identifier}",
            dry_run=self.dry_run,
            snapshots=[snapshot.identifier for snapshot in to_delete],
        )

    def find_manual_db_snapshots(self) -> List[DBSnapshotInfo]:
        paginator = self.client("rds").get_paginator("describe_db_snapshots")
        pages = paginator.paginate(
            DBInstanceIdentifier=self.db_instance_identifier,
            SnapshotType="manual",
            IncludePublic=False,
            IncludeShared=False,
        )

        snapshots = []
        for page in pages:
            for item in page.get("DBSnapshots", []):
                # Snapshots still being created have no create time yet
                snapshot = DBSnapshotInfo.from_aws_db_snapshot(item)
                if snapshot is not None:
                    snapshots.append(snapshot)
        return snapshots

    def find_db_snapshots_to_delete(
        self, snapshots: List[DBSnapshotInfo]
    ) -> List[DBSnapshotInfo]:
        return find_db_snapshots_to_delete(snapshots, self.expiration_date, self.max_snapshots)

    def delete_db_snapshots(self, snapshots: List[DBSnapshotInfo]) -> None:
        for snapshot in snapshots:
            if self.dry_run:
                self.log(f"Would delete DB snapshot {snapshot.identifier}")
                continue
            self.delete_db_snapshot(snapshot.identifier)

    def delete_db_snapshot(self, identifier: str) -> None:
        rds = self.client("rds")
        self.log(f"Deleting DB snapshot {identifier}")
        rds.delete_db_snapshot(DBSnapshotIdentifier=identifier)
        rds.get_waiter("db_snapshot_deleted").wait(DBSnapshotIdentifier=identifier)
        self.log(f"Deleted DB snapshot {identifier}")
