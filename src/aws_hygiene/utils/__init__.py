# utils/__init__.py

from .config import ConfigManager, to_bool
from .session import SessionManager, assume_role, make_session, session_from_credentials
from .logger import setup_logger
from .slack import SlackNotifier
from .exceptions import (
    AWSHygieneError,
    CLIError,
    ValidationError,
    ValidationRules,
)

__all__ = [
    "ConfigManager",
    "to_bool",
    "SessionManager",
    "assume_role",
    "make_session",
    "session_from_credentials",
    "setup_logger",
    "SlackNotifier",
    "AWSHygieneError",
    "CLIError",
    "ValidationError",
    "ValidationRules",
]
