"""AWS hygiene jobs package."""

from .base import BaseJob
from .ami_cleaner import AMICleanerJob
from .aws_health_notifier import AWSHealthNotifierJob
from .ebs_delete import EBSDeleteJob
from .ebs_snapshot_cleaner import EBSSnapshotCleanerJob
from .ecr_scan import ECRScanJob
from .ecs_service_deployer import ECSServiceDeployerJob
from .iam_keys_check import IAMKeysCheckJob
from .packer_janitor import PackerJanitorJob
from .rds_cloudwatch_logs import RDSCloudWatchLogsJob
from .rds_snapshot_cleaner import RDSSnapshotCleanerJob
from .s3_bucket_size import S3BucketSizeJob
from .trusted_advisor_refresh import TrustedAdvisorRefreshJob

__all__ = [
    "BaseJob",
    "AMICleanerJob",
    "AWSHealthNotifierJob",
    "EBSDeleteJob",
    "EBSSnapshotCleanerJob",
    "ECRScanJob",
    "ECSServiceDeployerJob",
    "IAMKeysCheckJob",
    "PackerJanitorJob",
    "RDSCloudWatchLogsJob",
    "RDSSnapshotCleanerJob",
    "S3BucketSizeJob",
    "TrustedAdvisorRefreshJob",
]
