#!/usr/bin/env python3
"""
RDS CloudWatch Logs Job

Copies RDS log files written since a start time into CloudWatch Logs, one
log stream per file. The file currently being written is skipped; it is
picked up by a later run once RDS rotates it.
"""

from datetime import timedelta
from typing import Any, Dict, List

from botocore.exceptions import ClientError

from .base import BaseJob
from aws_hygiene.core.aws import CloudWatchLogsWriter
from aws_hygiene.core.constants import (
    LOG_FILE_PORTION_LINES,
    RESOURCE_ALREADY_EXISTS,
    START_TIME_WINDOWS,
)
from aws_hygiene.utils.exceptions import ResourceNotFoundError, ValidationError


class RDSCloudWatchLogsJob(BaseJob):
    """Job to ship RDS log files to CloudWatch Logs"""

    def __init__(self, *args, **kwargs):
        kwargs.setdefault("job_name", "rds_cloudwatch_logs")
        super().__init__(*args, **kwargs)
        self.db_instance_identifier = ""
        self.log_group = ""

    def execute(self, **kwargs) -> Dict[str, Any]:
        """
        Ship log files written since the start time

        Args:
            **kwargs: db_instance_identifier, cloudwatch_logs_group, start_time

        Returns:
            Dictionary with the sent, skipped and failed log files
        """
        self.db_instance_identifier = kwargs.get("db_instance_identifier") or ""
        self.log_group = kwargs.get("cloudwatch_logs_group") or ""
        start_time = kwargs.get("start_time") or "1h"

        if not self.db_instance_identifier or not self.log_group:
            raise ValidationError("DB instance identifier and CloudWatch Logs group are required")
        if start_time not in START_TIME_WINDOWS:
            raise ValidationError(
                f"start time must be one of {', '.join(START_TIME_WINDOWS)}, got {start_time}"
            )

        since = self.utc_now() - timedelta(hours=START_TIME_WINDOWS[start_time])
        since_ms = int(since.timestamp() * 1000)

        log_files = self.get_log_files_since(since_ms)
        most_recent = self.get_most_recent_log_file()

        sent, skipped, failed = [], [], {}
        for log_file in log_files:
            name = log_file["LogFileName"]
            if name == most_recent["LogFileName"]:
                self.log(f"Skipping {name}, it is still being written", level="debug")
                continue
            try:
                if self.send_rds_log_file(name):
                    sent.append(name)
                else:
                    skipped.append(name)
            except ClientError as e:
                self.log(f"Failed to send log file {name}: {e}", level="error")
                failed[name] = str(e)

        return self.result(
            status="error" if failed else "success",
            message=f"Sent {len(sent)} log files to {self.log_group}",
            sent=sent,
            skipped=skipped,
            failed=failed,
        )

    def get_log_files_since(self, since_ms: int) -> List[Dict[str, Any]]:
        paginator = self.client("rds").get_paginator("describe_db_log_files")
        log_files = []
        for page in paginator.paginate(
            DBInstanceIdentifier=self.db_instance_identifier, FileLastWritten=since_ms
        ):
            log_files.extend(page.get("DescribeDBLogFiles", []))
        return log_files

    def get_most_recent_log_file(self) -> Dict[str, Any]:
        log_files = self.get_log_files_since(0)
        if not log_files:
            raise ResourceNotFoundError(
                f"no log files found for DB instance {self.db_instance_identifier}"
            )
        return max(log_files, key=lambda log_file: log_file.get("LastWritten", 0))

    def download_db_log_file(self, writer, log_file_name: str) -> int:
        """Stream a log file into ``writer`` portion by portion; returns the portion count."""
        rds = self.client("rds")
        marker = "0"
        portions = 0
        while True:
            response = rds.download_db_log_file_portion(
                DBInstanceIdentifier=self.db_instance_identifier,
                LogFileName=log_file_name,
                Marker=marker,
                NumberOfLines=LOG_FILE_PORTION_LINES,
            )
            writer.write(response.get("LogFileData") or "")
            portions += 1
            marker = response.get("Marker", marker)
            if not response.get("AdditionalDataPending"):
                return portions

    def send_rds_log_file(self, log_file_name: str) -> bool:
        """
        Send one log file to a stream named after it.

        Returns:
            False when the stream already exists (the file was sent before)
        """
        logs = self.client("logs")
        try:
            logs.create_log_stream(logGroupName=self.log_group, logStreamName=log_file_name)
        except ClientError as e:
            if e.response["Error"]["Code"] == RESOURCE_ALREADY_EXISTS:
                self.log(
                    f"Log stream {log_file_name} already exists in {self.log_group}, skipping",
                    level="warning",
                )
                return False
            raise

        writer = CloudWatchLogsWriter(logs, self.log_group, log_file_name)
        try:
            self.download_db_log_file(writer, log_file_name)
        finally:
            writer.flush()

        self.log(f"Sent {writer.events_sent} events from {log_file_name} to {self.log_group}")
        return True
