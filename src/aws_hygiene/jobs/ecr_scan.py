#!/usr/bin/env python3
"""
ECR Scan Job

Evaluates the vulnerability scan of an ECR image. A scan that is missing or
older than ``max_scan_age`` hours is (re)started and polled until it
completes, then the total number of findings is reported.
"""

import time
from datetime import datetime
from typing import Any, Dict, Optional

from botocore.exceptions import ClientError

from .base import BaseJob
from aws_hygiene.core.constants import (
    DEFAULT_MAX_SCAN_AGE_HOURS,
    SCAN_NOT_FOUND,
    SCAN_POLL_ATTEMPTS,
    SCAN_POLL_DELAY_SECONDS,
    SCAN_STATUS_COMPLETE,
    SCAN_STATUS_FAILED,
    SCAN_STATUS_PENDING,
)
from aws_hygiene.core.models import ScanReport, ScanTarget
from aws_hygiene.utils.exceptions import ScanEvaluationError


class ECRScanJob(BaseJob):
    """Job to retrieve (and refresh) ECR image scan findings"""

    def __init__(self, *args, **kwargs):
        kwargs.setdefault("job_name", "ecr_scan")
        super().__init__(*args, **kwargs)
        self.max_scan_age = DEFAULT_MAX_SCAN_AGE_HOURS
        self.attempts = SCAN_POLL_ATTEMPTS
        self.delay = SCAN_POLL_DELAY_SECONDS

    def execute(self, **kwargs) -> Dict[str, Any]:
        """
        Evaluate the scan of one image

        Args:
            **kwargs: repository, tag (or a ScanTarget as target), max_scan_age

        Returns:
            Dictionary with the target and total_findings
        """
        target = kwargs.get("target")
        if target is None and (kwargs.get("repository") or kwargs.get("tag")):
            target = ScanTarget(
                repository=kwargs.get("repository") or "",
                image_tag=kwargs.get("tag") or "",
            )
        self.max_scan_age = int(kwargs.get("max_scan_age", DEFAULT_MAX_SCAN_AGE_HOURS))

        report = self.evaluate(target)
        return self.result(
            message=f"{report.total_findings} findings for {target.repository}:{target.image_tag}",
            repository=target.repository,
            image_tag=target.image_tag,
            **report.to_dict(),
        )

    def evaluate(self, target: Optional[ScanTarget]) -> ScanReport:
        if target is None or not target.is_valid:
            raise ScanEvaluationError("Invalid target")

        findings = self.get_image_findings(target)
        if self.is_old_scan(findings):
            self.log(
                f"Scan of {target.repository}:{target.image_tag} is older than "
                f"{self.max_scan_age} hours, starting a new scan"
            )
            self.start_scan(target)
            findings = self.get_image_findings(target)

        counts = findings.get("imageScanFindings", {}).get("findingSeverityCounts", {})
        # The findings list is paginated; the severity counts cover every finding
        return ScanReport(total_findings=sum(counts.values()))

    def is_old_scan(self, findings: Dict[str, Any]) -> bool:
        completed_at = findings.get("imageScanFindings", {}).get("imageScanCompletedAt")
        if not completed_at:
            return False
        age = datetime.now(completed_at.tzinfo) - completed_at
        return age.total_seconds() / 3600 > self.max_scan_age

    def start_scan(self, target: ScanTarget) -> None:
        self.client("ecr").start_image_scan(
            repositoryName=target.repository, imageId=target.image_id
        )

    def get_image_findings(self, target: ScanTarget) -> Dict[str, Any]:
        """
        Poll DescribeImageScanFindings until the scan is complete.

        A missing scan is started; pending scans are retried after a fixed
        delay. Failed scans and unexpected AWS errors stop the polling.

        Raises:
            ScanEvaluationError: when no completed scan could be retrieved
        """
        ecr = self.client("ecr")

        for attempt in range(1, self.attempts + 1):
            try:
                response = ecr.describe_image_scan_findings(
                    repositoryName=target.repository, imageId=target.image_id
                )
            except ClientError as e:
                if e.response["Error"]["Code"] != SCAN_NOT_FOUND:
                    self.log(f"Error describing image scan findings: {e}", level="error")
                    break
                self.log(f"No scan found for {target.repository}:{target.image_tag}, starting one")
                try:
                    self.start_scan(target)
                except ClientError as scan_error:
                    self.log(f"Error starting image scan: {scan_error}", level="error")
                    break
                self._wait(attempt)
                continue

            status = response.get("imageScanStatus", {}).get("status", "")
            if status in SCAN_STATUS_COMPLETE:
                return response
            if status in SCAN_STATUS_FAILED:
                self.log(
                    f"Image scan failed with status {status}: "
                    f"{response.get('imageScanStatus', {}).get('description', '')}",
                    level="error",
                )
                break
            if status not in SCAN_STATUS_PENDING:
                self.log(f"Unexpected image scan status {status!r}", level="error")
                break

            self._wait(attempt)

        raise ScanEvaluationError("Unable to retrieve scan findings")

    def _wait(self, attempt: int) -> None:
        if attempt >= self.attempts:
            return
        self.log("Retry describe image scan findings")
        time.sleep(self.delay)
