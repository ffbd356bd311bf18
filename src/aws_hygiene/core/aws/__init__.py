"""AWS core modules."""

from .ssm import SSMManager, create_ssm_manager
from .cloudwatch_logs import CloudWatchLogsWriter

__all__ = [
    "SSMManager",
    "create_ssm_manager",
    "CloudWatchLogsWriter",
]
