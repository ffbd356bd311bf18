"""Tests for the EBS delete and EBS snapshot cleaner jobs."""

from datetime import datetime, timedelta, timezone

import pytest
from botocore.exceptions import ClientError

from aws_hygiene.jobs.ebs_delete import EBSDeleteJob
from aws_hygiene.jobs.ebs_snapshot_cleaner import EBSSnapshotCleanerJob
from aws_hygiene.utils.exceptions import ResourceNotFoundError, ValidationError

VOLUME_ID = "vol-0123456789abcdef0"


def volume(tags=None):
    return {"VolumeId": VOLUME_ID, "Size": 8, "Tags": tags or []}


class TestEBSDelete:
    @pytest.fixture
    def job(self, make_job):
        return make_job(EBSDeleteJob)

    def stub_volume(self, aws, *volumes):
        aws.stub("ec2").add_response(
            "describe_volumes", {"Volumes": list(volumes)},
            {"Filters": [{"Name": "volume-id", "Values": [VOLUME_ID]}]},
        )

    def test_snapshots_copies_tags_then_deletes(self, aws, job):
        self.stub_volume(aws, volume([
            {"Key": "Name", "Value": "data"},
            {"Key": "aws:backup:source", "Value": "plan"},
        ]))
        ec2 = aws.stub("ec2")
        ec2.add_response(
            "create_snapshot",
            {"SnapshotId": "snap-1", "VolumeId": VOLUME_ID, "State": "pending"},
            {"VolumeId": VOLUME_ID, "Description": VOLUME_ID},
        )
        ec2.add_response(
            "create_tags",
            {},
            {
                "Resources": ["snap-1"],
                "Tags": [
                    {"Key": "Name", "Value": "data"},
                    {"Key": "X-aws:backup:source", "Value": "plan"},
                ],
            },
        )
        ec2.add_response(
            "describe_snapshots",
            {"Snapshots": [{"SnapshotId": "snap-1", "State": "completed"}]},
            {"SnapshotIds": ["snap-1"]},
        )
        ec2.add_response("delete_volume", {}, {"VolumeId": VOLUME_ID})

        result = job.execute(volume_id=VOLUME_ID)

        assert result["status"] == "success"
        assert result["snapshot_id"] == "snap-1"

    def test_untagged_volume_skips_tag_copy(self, aws, job):
        self.stub_volume(aws, volume())
        ec2 = aws.stub("ec2")
        ec2.add_response("create_snapshot", {"SnapshotId": "snap-2"})
        ec2.add_response(
            "describe_snapshots", {"Snapshots": [{"SnapshotId": "snap-2", "State": "completed"}]}
        )
        ec2.add_response("delete_volume", {}, {"VolumeId": VOLUME_ID})

        assert job.execute(volume_id=VOLUME_ID)["snapshot_id"] == "snap-2"

    def test_cloudformation_volume_is_left_alone(self, aws, job):
        self.stub_volume(aws, volume([{"Key": "aws:cloudformation:stack-name", "Value": "db"}]))

        result = job.execute(volume_id=VOLUME_ID)

        assert result["status"] == "skipped"
        assert result["message"] == "Delete stack db"

    def test_force_deletes_cloudformation_volume(self, aws, job):
        self.stub_volume(aws, volume([{"Key": "aws:cloudformation:stack-name", "Value": "db"}]))
        ec2 = aws.stub("ec2")
        ec2.add_response("create_snapshot", {"SnapshotId": "snap-3"})
        ec2.add_response(
            "create_tags",
            {},
            {
                "Resources": ["snap-3"],
                "Tags": [{"Key": "X-aws:cloudformation:stack-name", "Value": "db"}],
            },
        )
        ec2.add_response(
            "describe_snapshots", {"Snapshots": [{"SnapshotId": "snap-3", "State": "completed"}]}
        )
        ec2.add_response("delete_volume", {})

        assert job.execute(volume_id=VOLUME_ID, force=True)["status"] == "success"

    def test_dry_run_makes_no_changes(self, aws, job):
        self.stub_volume(aws, volume())

        result = job.execute(volume_id=VOLUME_ID, dry_run=True)

        assert result["dry_run"] is True

    def test_missing_volume(self, aws, job):
        self.stub_volume(aws)

        with pytest.raises(ResourceNotFoundError):
            job.execute(volume_id=VOLUME_ID)

    def test_is_cloudformed(self):
        assert EBSDeleteJob.is_cloudformed(volume()) == (False, "")
        assert EBSDeleteJob.is_cloudformed(
            volume([{"Key": "aws:cloudformation:stack-name", "Value": "s"}])
        ) == (True, "s")


class TestEBSSnapshotCleaner:
    @pytest.fixture
    def job(self, make_job):
        return make_job(EBSSnapshotCleanerJob)

    @staticmethod
    def snapshot(snapshot_id, days_ago, tags=None):
        return {
            "SnapshotId": snapshot_id,
            "StartTime": datetime.now(timezone.utc) - timedelta(days=days_ago),
            "VolumeId": VOLUME_ID,
            "VolumeSize": 10,
            "State": "completed",
            "Tags": tags or [],
        }

    def stub_snapshots(self, aws, *snapshots):
        aws.stub("ec2").add_response(
            "describe_snapshots", {"Snapshots": list(snapshots)}, {"OwnerIds": ["self"]}
        )

    def test_dry_run_lists_expired_snapshots(self, aws, job):
        self.stub_snapshots(
            aws,
            self.snapshot("snap-old", 40),
            self.snapshot("snap-new", 2),
            self.snapshot("snap-kept", 40, tags=[{"Key": "Retain", "Value": "yes"}]),
        )

        result = job.execute(
            retention_days=30, exclude_tag_key="Retain", exclude_tag_value="yes", dry_run=True
        )

        assert result["snapshots"] == ["snap-old"]
        assert result["dry_run"] is True

    def test_snapshots_in_use_are_skipped(self, aws, job):
        self.stub_snapshots(aws, self.snapshot("snap-ami", 40), self.snapshot("snap-old", 40))
        ec2 = aws.stub("ec2")
        ec2.add_client_error(
            "delete_snapshot",
            service_error_code="InvalidSnapshot.InUse",
            expected_params={"SnapshotId": "snap-ami"},
        )
        ec2.add_response("delete_snapshot", {}, {"SnapshotId": "snap-old"})

        result = job.execute(retention_days=30)

        assert result["snapshots"] == ["snap-old"]
        assert result["skipped"] == ["snap-ami"]

    def test_other_delete_errors_are_fatal(self, aws, job):
        self.stub_snapshots(aws, self.snapshot("snap-old", 40))
        aws.stub("ec2").add_client_error("delete_snapshot", service_error_code="UnauthorizedOperation")

        with pytest.raises(ClientError):
            job.execute(retention_days=30)

    def test_exclude_tag_needs_key_and_value(self, job):
        with pytest.raises(ValidationError):
            job.execute(exclude_tag_value="yes")
