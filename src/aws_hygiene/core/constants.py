#!/usr/bin/env python3
"""Core constants for AWS hygiene operations."""

# Timestamp formats
AMI_CREATION_DATE_FORMAT = "%Y-%m-%dT%H:%M:%S.%fZ"
AWS_TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%S%z"

# AWS error codes handled by the jobs
DRY_RUN_OPERATION = "DryRunOperation"
SNAPSHOT_IN_USE = "InvalidSnapshot.InUse"
RESOURCE_ALREADY_EXISTS = "ResourceAlreadyExistsException"
SCAN_NOT_FOUND = "ScanNotFoundException"
REPORT_NOT_PRESENT = "ReportNotPresent"
REPORT_EXPIRED = "ReportExpired"
REPORT_IN_PROGRESS = "ReportInProgress"
LIMIT_EXCEEDED = "LimitExceeded"

# Tags
CLOUDFORMATION_STACK_TAG = "aws:cloudformation:stack-name"
AWS_RESERVED_TAG_PREFIX = "aws:"
COPIED_TAG_PREFIX = "X-"
PACKER_BUILDER_NAME = "Packer Builder"
TAG_NOT_FOUND = "not found"

# AMI cleaner
DEFAULT_RETENTION_DAYS = 30
EBS_ROOT_DEVICE = "ebs"

# ECR scan evaluation
DEFAULT_MAX_SCAN_AGE_HOURS = 24
SCAN_POLL_ATTEMPTS = 10
SCAN_POLL_DELAY_SECONDS = 15
SCAN_STATUS_COMPLETE = ("COMPLETE", "ACTIVE")
SCAN_STATUS_PENDING = ("IN_PROGRESS", "PENDING")
SCAN_STATUS_FAILED = ("FAILED", "UNSUPPORTED_IMAGE", "FINDINGS_UNAVAILABLE")

# IAM keys check
DEFAULT_MAX_KEY_AGE_DAYS = 90
CREDENTIAL_REPORT_POLL_INTERVAL_MS = 5000
CREDENTIAL_REPORT_TRIES = 5

# Packer janitor
DEFAULT_PACKER_TIME_LIMIT_HOURS = 4
LIVE_INSTANCE_STATES = ["pending", "running", "stopping", "stopped"]

# RDS CloudWatch logs
LOG_FILE_PORTION_LINES = 10000
START_TIME_WINDOWS = {"1h": 1, "1d": 24}
CLOUDWATCH_MAX_BATCH_EVENTS = 10000
CLOUDWATCH_MAX_BATCH_BYTES = 1048576
CLOUDWATCH_EVENT_OVERHEAD_BYTES = 26
CLOUDWATCH_MAX_EVENT_BYTES = 262144 - CLOUDWATCH_EVENT_OVERHEAD_BYTES

# Trusted Advisor only lives in us-east-1
TRUSTED_ADVISOR_REGION = "us-east-1"
UNREFRESHABLE_CHECKS = (
    "AWS Direct Connect Connection Redundancy",
    "AWS Direct Connect Location Redundancy",
    "AWS Direct Connect Virtual Interface Redundancy",
    "PV Driver Version for EC2 Windows Instances",
    "EC2Config Service for EC2 Windows Instances",
    "Amazon EBS Public Snapshots",
    "Amazon RDS Public Snapshots",
)

# S3 bucket size
DEFAULT_S3_REGION = "us-east-1"
S3_STORAGE_TYPES = ("StandardStorage", "StandardIAStorage", "ReducedRedundancyStorage")
BUCKET_SIZE_PERIOD_SECONDS = 86400
BUCKET_SIZE_LOOKBACK_SECONDS = 86400 * 3

# AWS Health
PERSONAL_HEALTH_DASHBOARD_URL = "https://phd.aws.amazon.com/phd/home"
DEFAULT_SLACK_EMOJI = ":boom:"

# HTTP
SLACK_TIMEOUT_SECONDS = 10

# Logging
LOG_ROTATION_MAX_BYTES = 10 * 1024 * 1024  # 10MB
LOG_BACKUP_COUNT = 5
