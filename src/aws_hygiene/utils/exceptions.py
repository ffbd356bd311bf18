"""Exception classes and validation utilities for AWS hygiene operations.

This module contains the exception hierarchy raised by the jobs and the
validation rules shared by the CLI and the Lambda handlers.
"""

import re


class AWSHygieneError(Exception):
    """Base class for every error raised by the toolkit."""

    pass


class CLIError(AWSHygieneError):
    """Custom exception for CLI-related errors."""

    pass


class ValidationError(CLIError):
    """Raised when options or inputs are inconsistent."""

    pass


class SessionError(AWSHygieneError):
    """Raised when an AWS session or role assumption cannot be created."""

    pass


class ParameterStoreError(AWSHygieneError):
    """Raised when a Parameter Store value cannot be decrypted."""

    pass


class ResourceNotFoundError(AWSHygieneError):
    """Raised when an expected AWS resource does not exist."""

    pass


class ScanEvaluationError(AWSHygieneError):
    pass


class CredentialReportError(AWSHygieneError):
    pass


class DeploymentError(AWSHygieneError):
    pass


class NotificationError(AWSHygieneError):
    pass


class TrustedAdvisorRefreshError(AWSHygieneError):
    pass


class ValidationRules:
    """Validation utilities for AWS resources."""

    @staticmethod
    def validate_aws_account_id(account_id: str) -> bool:
        """Validate AWS account ID format (12 digits)."""
        return bool(re.match(r"^\d{12}$", str(account_id)))

    @staticmethod
    def validate_paired(first: str, second: str) -> bool:
        """Two options that must be given together (or not at all)."""
        return bool(first) == bool(second)
