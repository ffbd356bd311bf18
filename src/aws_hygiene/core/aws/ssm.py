"""Simple SSM Parameter Store manager for AWS hygiene operations."""

from typing import Optional
import boto3
from botocore.exceptions import ClientError
from aws_hygiene.utils.exceptions import ParameterStoreError
from aws_hygiene.utils.logger import setup_logger

INVALID_KEY_ERRORS = ("InvalidKeyId", "ParameterNotFound", "ParameterVersionNotFound")


class SSMManager:
    """Simple AWS SSM resource manager."""

    def __init__(self, session: boto3.Session, region: Optional[str] = None):
        """Initialize SSMManager."""
        self.session = session
        self.region = region
        self.ssm_client = session.client("ssm", region_name=region or None)
        self.logger = setup_logger(__name__, "ssm_manager.log")

    def decrypt_value(self, name: str) -> str:
        """Return the decrypted value of a Parameter Store key."""
        try:
            response = self.ssm_client.get_parameter(Name=name, WithDecryption=True)
        except ClientError as e:
            error_code = e.response["Error"]["Code"]
            self.logger.error(f"Error getting parameter {name}: {e}")
            if error_code == "InternalServerError":
                raise ParameterStoreError("ssm appeared to have an internal error") from e
            if error_code in INVALID_KEY_ERRORS:
                raise ParameterStoreError(
                    f"the provided parameter store key appears to be invalid: {name}"
                ) from e
            raise ParameterStoreError(f"unknown AWS error: {error_code}") from e

        value = response.get("Parameter", {}).get("Value")
        if not value:
            raise ParameterStoreError(f"ssm parameter value is empty: {name}")
        return value


def create_ssm_manager(session: boto3.Session, region: Optional[str] = None) -> SSMManager:
    """Create SSMManager instance."""
    return SSMManager(session, region)
