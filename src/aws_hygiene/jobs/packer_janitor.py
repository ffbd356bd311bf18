#!/usr/bin/env python3
"""
Packer Janitor Job

Terminates Packer builder instances left running past a time limit, along
with the temporary key pair and security group Packer created for them.

Without ``delete`` every call is issued with ``DryRun=True`` so AWS checks
permissions without changing anything.
"""

from datetime import timedelta
from typing import Any, Callable, Dict, List

from botocore.exceptions import ClientError

from .base import BaseJob
from aws_hygiene.core.constants import (
    DEFAULT_PACKER_TIME_LIMIT_HOURS,
    DRY_RUN_OPERATION,
    LIVE_INSTANCE_STATES,
    PACKER_BUILDER_NAME,
)
from aws_hygiene.core.models import InstanceInfo


class PackerJanitorJob(BaseJob):
    """Job to purge abandoned Packer builders"""

    def __init__(self, *args, **kwargs):
        kwargs.setdefault("job_name", "packer_janitor")
        super().__init__(*args, **kwargs)
        self.delete = False
        self.timelimit = DEFAULT_PACKER_TIME_LIMIT_HOURS

    def execute(self, **kwargs) -> Dict[str, Any]:
        """
        Purge Packer builders older than the time limit

        Args:
            **kwargs: delete, timelimit (hours)

        Returns:
            Dictionary with the purged instance IDs
        """
        self.delete = kwargs.get("delete", False)
        self.timelimit = int(kwargs.get("timelimit", DEFAULT_PACKER_TIME_LIMIT_HOURS))

        purged = []
        for instance in self.get_packer_instances():
            self.purge_packer_resource(instance)
            purged.append(instance.instance_id)

        action = "Purged" if self.delete else "DRY RUN: Would purge"
        return self.result(
            message=f"{action} {len(purged)} Packer instances",
            dry_run=not self.delete,
            instances=purged,
        )

    def get_packer_instances(self) -> List[InstanceInfo]:
        """Live Packer builders launched before the time limit."""
        cutoff = self.utc_now() - timedelta(hours=self.timelimit)
        paginator = self.client("ec2").get_paginator("describe_instances")
        pages = paginator.paginate(
            Filters=[
                {"Name": "tag:Name", "Values": [PACKER_BUILDER_NAME]},
                {"Name": "instance-state-name", "Values": list(LIVE_INSTANCE_STATES)},
            ]
        )

        instances = []
        for page in pages:
            for reservation in page.get("Reservations", []):
                for item in reservation.get("Instances", []):
                    instance = InstanceInfo.from_aws_instance(item)
                    if instance.launch_time < cutoff:
                        instances.append(instance)

        self.log(f"Found {len(instances)} Packer instances older than {self.timelimit} hours")
        return instances

    def _dry_run_aware(self, description: str, call: Callable[..., Any], **params) -> None:
        """Issue a mutating call, treating DryRunOperation as success."""
        try:
            call(DryRun=not self.delete, **params)
        except ClientError as e:
            if e.response["Error"]["Code"] == DRY_RUN_OPERATION:
                self.log(f"Dry run: {description} would have succeeded")
                return
            self.log(f"Failed to {description}: {e}", level="error")
            raise
        self.log(f"{description} succeeded")

    def clean_terminate_instance(self, instance: InstanceInfo) -> None:
        ec2 = self.client("ec2")
        self._dry_run_aware(
            f"terminate instance {instance.instance_id}",
            ec2.terminate_instances,
            InstanceIds=[instance.instance_id],
        )

        if not self.delete:
            return

        # Key pair and security group stay in use until the instance is gone
        self.log(f"Waiting for instance {instance.instance_id} to terminate")
        ec2.get_waiter("instance_terminated").wait(InstanceIds=[instance.instance_id])

    def purge_packer_resource(self, instance: InstanceInfo) -> None:
        """Terminate the instance, then delete its key pair and security group."""
        self.clean_terminate_instance(instance)
        ec2 = self.client("ec2")

        if instance.key_name:
            self._dry_run_aware(
                f"delete key pair {instance.key_name}",
                ec2.delete_key_pair,
                KeyName=instance.key_name,
            )

        if instance.security_group_id:
            self._dry_run_aware(
                f"delete security group {instance.security_group_id}",
                ec2.delete_security_group,
                GroupId=instance.security_group_id,
            )
