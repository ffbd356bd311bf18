#!/usr/bin/env python3
"""
S3 Bucket Size Job

Reports the size of a bucket in bytes from the daily CloudWatch
``BucketSizeBytes`` metric, summed over the storage classes.
"""

from datetime import timedelta
from typing import Any, Dict

from .base import BaseJob
from aws_hygiene.core.constants import (
    BUCKET_SIZE_LOOKBACK_SECONDS,
    BUCKET_SIZE_PERIOD_SECONDS,
    DEFAULT_S3_REGION,
    S3_STORAGE_TYPES,
)
from aws_hygiene.utils.exceptions import ValidationError

# GetBucketLocation returns legacy names for these regions
LEGACY_LOCATIONS = {"": DEFAULT_S3_REGION, "EU": "eu-west-1"}


class S3BucketSizeJob(BaseJob):
    """Job to report the size of an S3 bucket"""

    def __init__(self, *args, **kwargs):
        kwargs.setdefault("job_name", "s3_bucket_size")
        super().__init__(*args, **kwargs)
        self.region = self.region or DEFAULT_S3_REGION

    def execute(self, **kwargs) -> Dict[str, Any]:
        bucket = kwargs.get("bucket")
        if not bucket:
            raise ValidationError("a bucket name is required")

        size = self.get_bucket_size(bucket)
        return self.result(message=f"{bucket} is {size} bytes", bucket=bucket, size=size)

    def get_bucket_region(self, bucket: str) -> str:
        response = self.client("s3").get_bucket_location(Bucket=bucket)
        location = response.get("LocationConstraint") or ""
        return LEGACY_LOCATIONS.get(location, location)

    def get_bucket_size(self, bucket: str) -> int:
        """Sum of the latest average size of each storage type, in bytes."""
        region = self.get_bucket_region(bucket)
        cloudwatch = self.client("cloudwatch", region=region)
        end_time = self.utc_now()
        start_time = end_time - timedelta(seconds=BUCKET_SIZE_LOOKBACK_SECONDS)

        total = 0
        for storage_type in S3_STORAGE_TYPES:
            response = cloudwatch.get_metric_statistics(
                Namespace="AWS/S3",
                MetricName="BucketSizeBytes",
                Dimensions=[
                    {"Name": "BucketName", "Value": bucket},
                    {"Name": "StorageType", "Value": storage_type},
                ],
                StartTime=start_time,
                EndTime=end_time,
                Period=BUCKET_SIZE_PERIOD_SECONDS,
                Statistics=["Average"],
            )
            datapoints = response.get("Datapoints", [])
            if not datapoints:
                self.log(f"No {storage_type} datapoints for {bucket}", level="debug")
                continue
            latest = max(datapoints, key=lambda point: point["Timestamp"])
            total += int(latest["Average"])

        self.log(f"Bucket {bucket} in {region} is {total} bytes")
        return total
