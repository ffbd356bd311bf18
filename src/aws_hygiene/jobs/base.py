"""Base job class for AWS hygiene operations."""

from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Dict, Optional
import boto3
import uuid
from aws_hygiene.utils.logger import setup_logger
from aws_hygiene.utils.config import ConfigManager
from aws_hygiene.utils.session import SessionManager


class BaseJob(ABC):
    """Base class for all AWS hygiene jobs."""

    # Class-level configuration cache
    _config_manager: Optional[ConfigManager] = None

    def __init__(
        self,
        config_manager: Optional[ConfigManager] = None,
        job_name: str = None,
        session: Optional[boto3.Session] = None,
        region: Optional[str] = None,
        profile: Optional[str] = None,
    ):
        """Initialize the job with configuration."""
        if config_manager is not None:
            self.config_manager = config_manager
        else:
            self.config_manager = self._get_or_create_config_manager()

        self.job_name = job_name or self.__class__.__name__.lower().replace("job", "")
        self.correlation_id = str(uuid.uuid4())[:8]  # Short correlation ID for tracking
        self.region = region or self.config_manager.get_aws_region() or None
        self.profile = profile or self.config_manager.get_aws_profile() or None
        self._session = session
        self._clients: Dict[Any, Any] = {}

        self.logger = setup_logger(
            name=self.__class__.__module__,
            log_file=f"{self.job_name}.log",
            level=self.config_manager.get_logging_level(),
            log_dir=self.config_manager.get_logging_path(),
        )

    @classmethod
    def _get_or_create_config_manager(cls) -> ConfigManager:
        """Get or create a cached ConfigManager instance."""
        if BaseJob._config_manager is None:
            BaseJob._config_manager = ConfigManager()
        return BaseJob._config_manager

    @classmethod
    def reload_config(cls) -> None:
        """Force reload of configuration from file."""
        if BaseJob._config_manager is not None:
            BaseJob._config_manager.reload_config()

    @property
    def session(self) -> boto3.Session:
        if self._session is None:
            self._session = self.create_aws_session()
        return self._session

    def create_aws_session(self) -> boto3.Session:
        """Create the AWS session for this job from the configured region and profile."""
        self.log(
            f"Creating AWS session (profile={self.profile or 'default'}, "
            f"region={self.region or 'default'})",
            level="debug",
        )
        return SessionManager.get_session(self.region, self.profile)

    def client(self, service_name: str, region: Optional[str] = None):
        """Return a cached boto3 client for the service and region."""
        region = region or self.region
        key = (service_name, region)
        if key not in self._clients:
            self._clients[key] = self.session.client(service_name, region_name=region)
        return self._clients[key]

    def log(self, message: str, level: str = "info") -> None:
        """Log a message tagged with the job's correlation ID."""
        getattr(self.logger, level)(f"[{self.correlation_id}] {message}")

    @staticmethod
    def utc_now() -> datetime:
        return datetime.now(timezone.utc)

    @staticmethod
    def result(status: str = "success", message: str = "", **data) -> Dict[str, Any]:
        """Build the standard job result dictionary."""
        return {"status": status, "message": message, **data}

    @abstractmethod
    def execute(self, **kwargs) -> Dict[str, Any]:
        """Execute the job with given parameters."""
        pass
