#!/usr/bin/env python3
"""
Trusted Advisor Refresh Job

Requests a refresh of every refreshable Trusted Advisor check. The Support
API is only available in us-east-1.
"""

from typing import Any, Dict, List

from botocore.exceptions import ClientError

from .base import BaseJob
from aws_hygiene.core.constants import TRUSTED_ADVISOR_REGION, UNREFRESHABLE_CHECKS
from aws_hygiene.utils.exceptions import TrustedAdvisorRefreshError


def is_refreshable(check: Dict[str, Any]) -> bool:
    return check.get("name") not in UNREFRESHABLE_CHECKS


class TrustedAdvisorRefreshJob(BaseJob):
    """Job to refresh Trusted Advisor checks"""

    def __init__(self, *args, **kwargs):
        kwargs.setdefault("job_name", "trusted_advisor_refresh")
        super().__init__(*args, **kwargs)

    def support_client(self):
        return self.client("support", region=TRUSTED_ADVISOR_REGION)

    def get_checks(self) -> List[Dict[str, Any]]:
        response = self.support_client().describe_trusted_advisor_checks(language="en")
        return response.get("checks", [])

    def execute(self, **kwargs) -> Dict[str, Any]:
        """Refresh all checks; raises TrustedAdvisorRefreshError if any refresh failed."""
        refreshed, skipped, failed = [], [], {}

        for check in self.get_checks():
            if not is_refreshable(check):
                self.log(f"Skipping unrefreshable check {check['name']}", level="debug")
                skipped.append(check["id"])
                continue
            try:
                self.support_client().refresh_trusted_advisor_check(checkId=check["id"])
            except ClientError as e:
                self.log(
                    f"Failed to refresh check {check['id']} ({check.get('name')}): {e}",
                    level="error",
                )
                failed[check["id"]] = str(e)
                continue
            refreshed.append(check["id"])

        self.log(f"Refreshed {len(refreshed)} checks, skipped {len(skipped)}")
        if failed:
            raise TrustedAdvisorRefreshError(
                f"failed to refresh {len(failed)} Trusted Advisor checks: {', '.join(failed)}"
            )

        return self.result(
            message=f"Refreshed {len(refreshed)} Trusted Advisor checks",
            refreshed=refreshed,
            skipped=skipped,
        )
