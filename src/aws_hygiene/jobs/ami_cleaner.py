#!/usr/bin/env python3
"""
AMI Cleaner Job

Deregisters expired AMIs owned by the account and deletes their EBS
snapshots. Images are selected by name prefix, age, tag (optionally
inverted) and, optionally, by not being used by any instance in the owner
account or in any account the image is shared with.

Runs in dry-run mode unless ``delete`` is set.
"""

from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from botocore.exceptions import ClientError

from .base import BaseJob
from aws_hygiene.core.constants import DEFAULT_RETENTION_DAYS
from aws_hygiene.core.models import AMIInfo, TagFilter
from aws_hygiene.utils.exceptions import AWSHygieneError, ValidationError, ValidationRules
from aws_hygiene.utils.session import SessionManager


def match_tags(image: AMIInfo, tag_filter: TagFilter):
    """See whether an image carries the tag we are looking for."""
    return tag_filter.match(image.tags)


class AMICleanerJob(BaseJob):
    """Job to purge expired AMIs and their snapshots"""

    def __init__(self, *args, **kwargs):
        kwargs.setdefault("job_name", "ami_cleaner")
        super().__init__(*args, **kwargs)
        self.name_prefix = ""
        self.tag_filter = TagFilter()
        self.invert = False
        self.unused = False
        self.role = ""
        self.delete = False
        self.expiration_date: Optional[datetime] = None

    def configure(
        self,
        prefix: str = "",
        days: int = DEFAULT_RETENTION_DAYS,
        tag_key: str = "",
        tag_value: str = "",
        invert: bool = False,
        unused: bool = False,
        sts_role: str = "",
        delete: bool = False,
        now: Optional[datetime] = None,
    ) -> None:
        """Set the purge criteria."""
        if not ValidationRules.validate_paired(tag_key, tag_value):
            raise ValidationError("must specify both a tag Key and tag Value")

        self.name_prefix = prefix or ""
        self.tag_filter = TagFilter(key=tag_key or "", value=tag_value or "")
        self.invert = invert
        self.unused = unused
        self.role = sts_role or ""
        self.delete = delete
        self.expiration_date = (now or self.utc_now()) - timedelta(days=int(days))

    def execute(self, **kwargs) -> Dict[str, Any]:
        """
        Purge the AMIs matching the criteria

        Args:
            **kwargs: prefix, days, tag_key, tag_value, invert, unused,
                sts_role, delete

        Returns:
            Dictionary with the purged (or would-be purged) AMIs and snapshots
        """
        self.configure(**kwargs)

        purged_images = []
        deleted_snapshots = []
        skipped_images = []

        for image in self.get_images():
            if not self.check_image(image):
                continue

            try:
                purged = self.purge_image(image)
            except ClientError as e:
                self.log(
                    f"Failed to purge image {image.image_id} ({image.name}): {e}",
                    level="error",
                )
                raise

            if not purged:
                skipped_images.append(image.image_id)
                continue

            purged_images.append(image.image_id)
            deleted_snapshots.extend(image.snapshot_ids)
            if self.delete:
                self.log(f"Successfully purged image {image.image_id} ({image.name})")
            else:
                self.log(f"Would have purged image {image.image_id} ({image.name})")

        action = "Purged" if self.delete else "DRY RUN: Would purge"
        return self.result(
            message=f"{action} {len(purged_images)} AMIs",
            dry_run=not self.delete,
            images=purged_images,
            snapshots=deleted_snapshots,
            skipped_images=skipped_images,
        )

    def get_images(self) -> List[AMIInfo]:
        """Get all the AMIs owned by the account.

        The API cannot filter on creation date or on the absence of a tag, so
        every image is fetched and filtered client-side.
        """
        response = self.client("ec2").describe_images(Owners=["self"])
        return [AMIInfo.from_aws_image(image) for image in response.get("Images", [])]

    def check_image(self, image: AMIInfo) -> bool:
        """Compare an image to the purge criteria"""
        if not image.name.startswith(self.name_prefix):
            return False

        if image.creation_date is None or image.creation_date > self.expiration_date:
            return False

        if self.unused:
            try:
                unused = self.check_unused(image)
            except (ClientError, AWSHygieneError) as e:
                # Bail out for safety
                self.log(
                    f"Could not check for image in use {image.image_id} ({image.name}): {e}",
                    level="error",
                )
                return False
            if not unused:
                return False

        match, (tag_key, tag_value) = match_tags(image, self.tag_filter)
        # Invert differs from match exactly when the image must go
        if self.invert != match:
            self.log(
                f"AMI {image.image_id} ({image.name}) matched selection criteria: "
                f"tag {tag_key}={tag_value}, created {image.creation_date.isoformat()}",
                level="debug",
            )
            return True

        return False

    def check_unused(self, image: AMIInfo) -> bool:
        """
        Check that no running instance was launched from the image.

        Without a cross-account role only the current account is checked.
        With a role, the owner account and every account in the image's
        launch permissions are checked through that role.

        Returns:
            True if the image is not in use
        """
        if not self.role:
            return self._check_account_unused(self.client("ec2"), image.owner_id, image)

        account_ids = [image.owner_id] + [
            account_id
            for account_id in self.get_image_launch_permissions(image)
            if account_id != image.owner_id
        ]

        for account_id in account_ids:
            session = SessionManager.get_role_session(
                account_id=account_id,
                role=self.role,
                role_session_name=f"ami-cleaner-{self.name_prefix}",
                region=self.region,
                base_session=self.session,
            )
            ec2_client = session.client("ec2", region_name=self.region)
            if not self._check_account_unused(ec2_client, account_id, image):
                return False

        return True

    def get_image_launch_permissions(self, image: AMIInfo) -> List[str]:
        """Account IDs the image is explicitly shared with."""
        response = self.client("ec2").describe_image_attribute(
            Attribute="launchPermission", ImageId=image.image_id
        )
        return [
            permission["UserId"]
            for permission in response.get("LaunchPermissions", [])
            if permission.get("UserId")
        ]

    def _check_account_unused(self, ec2_client, account_id: str, image: AMIInfo) -> bool:
        response = ec2_client.describe_instances(
            Filters=[{"Name": "image-id", "Values": [image.image_id]}]
        )
        if response.get("Reservations"):
            self.log(
                f"Found image {image.image_id} ({image.name}) running an instance "
                f"in account {account_id}"
            )
            return False
        return True

    def purge_image(self, image: AMIInfo) -> bool:
        """
        Deregister a single image and delete its snapshots

        Returns:
            True if the image was purged (or would be, in dry run)
        """
        # Instance-store backed AMIs have no snapshots to clean up
        if not image.is_ebs_backed:
            self.log(f"Image {image.image_id} ({image.name}) root device not EBS; will not purge")
            return False

        ec2 = self.client("ec2")
        if self.delete:
            self.log(f"Deregistering AMI {image.image_id} ({image.name})")
            ec2.deregister_image(ImageId=image.image_id)
        else:
            self.log(f"Would deregister AMI {image.image_id} ({image.name})")

        for snapshot_id in image.snapshot_ids:
            if self.delete:
                self.log(f"Deleting snapshot {snapshot_id}")
                ec2.delete_snapshot(SnapshotId=snapshot_id)
            else:
                self.log(f"Would delete snapshot {snapshot_id}")

        return True
