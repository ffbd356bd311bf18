#!/usr/bin/env python3
"""
utils/session.py

Session management utilities for AWS interactions.

Provides functions and classes to handle AWS session creation and role assumption.
"""

import boto3
from typing import Any, Dict, Optional
from botocore.exceptions import BotoCoreError, ClientError
from .exceptions import SessionError, ValidationRules
from .logger import setup_logger

logger = setup_logger(__name__, "session.log")


def make_session(region: Optional[str] = None, profile: Optional[str] = None) -> boto3.Session:
    """Create a boto3 Session from the shared config and credentials files.

    Empty region or profile values fall back to the SDK defaults.
    """
    try:
        return boto3.Session(profile_name=profile or None, region_name=region or None)
    except BotoCoreError as e:
        raise SessionError(f"Failed to create AWS session (profile={profile!r}): {e}") from e


def session_from_credentials(
    credentials: Dict[str, Any], region: Optional[str] = None
) -> boto3.Session:
    """Create a boto3 Session from an STS ``Credentials`` block."""
    return boto3.Session(
        aws_access_key_id=credentials["AccessKeyId"],
        aws_secret_access_key=credentials["SecretAccessKey"],
        aws_session_token=credentials["SessionToken"],
        region_name=region or None,
    )


def assume_role(
    account_id: str,
    role: str,
    role_session_name: str,
    region: Optional[str] = None,
    base_session: Optional[boto3.Session] = None,
) -> boto3.Session:
    """Assumes a specified role in an AWS account and returns a boto3 Session."""
    if not ValidationRules.validate_aws_account_id(account_id):
        raise SessionError(f"Invalid AWS account ID: {account_id}. Must be 12 digits.")

    role_arn = f"arn:aws:iam::{account_id}:role/{role}"
    base_session = base_session or make_session(region)

    try:
        sts_client = base_session.client("sts", region_name=region or None)
        response = sts_client.assume_role(
            RoleArn=role_arn, RoleSessionName=role_session_name
        )
    except ClientError as e:
        error_code = e.response["Error"]["Code"]
        raise SessionError(f"Failed to assume role {role_arn}: {error_code} - {e}") from e

    logger.debug(f"Assumed role {role_arn} as {role_session_name}")
    return session_from_credentials(response["Credentials"], region)


class SessionManager:
    """Manages AWS sessions for role assumption and credential handling."""

    @classmethod
    def get_session(
        cls, region: Optional[str] = None, profile: Optional[str] = None
    ) -> boto3.Session:
        """Create a boto3 Session for the given region and profile."""
        return make_session(region, profile)

    @classmethod
    def get_role_session(
        cls,
        account_id: str,
        role: str,
        role_session_name: str,
        region: Optional[str] = None,
        base_session: Optional[boto3.Session] = None,
    ) -> boto3.Session:
        """Create a boto3 Session for a role in another account."""
        return assume_role(account_id, role, role_session_name, region, base_session)
