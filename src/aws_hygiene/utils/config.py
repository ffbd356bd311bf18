#!/usr/bin/env python3
"""
utils/config.py

Settings for the hygiene tools: configs/settings.yaml, overridden per value
by the environment variables the CLI and the Lambda handlers read.
"""

import os
import yaml
from pathlib import Path
from typing import Dict, Any, Optional
from aws_hygiene.utils.logger import setup_logger

logger = setup_logger(__name__, "config.log")

CONFIG_DIR_ENV = "AWS_HYGIENE_CONFIG_DIR"

_TRUE_VALUES = ("1", "true", "yes", "on")


def to_bool(value: Any) -> bool:
    """Interpret a config or environment value as a boolean."""
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    return str(value).strip().lower() in _TRUE_VALUES


class ConfigManager:
    """Reads settings.yaml once and answers dotted-path lookups.

    An environment variable, when named and set, wins over the file. The
    ``commands`` section holds per-command option defaults.
    """

    def __init__(self, config_dir: Optional[Path] = None):
        """
        Initialize ConfigManager.

        Args:
            config_dir: Custom config directory path (defaults to
                $AWS_HYGIENE_CONFIG_DIR, then PROJECT_ROOT/configs)
        """
        self.project_root = Path(__file__).parent.parent.parent.parent
        if config_dir is None and os.environ.get(CONFIG_DIR_ENV):
            config_dir = Path(os.environ[CONFIG_DIR_ENV])
        self.config_dir = Path(config_dir) if config_dir else (self.project_root / "configs")

        # settings.yml is accepted as well as settings.yaml
        candidates = [self.config_dir / name for name in ("settings.yml", "settings.yaml")]
        self.settings_file = next((path for path in candidates if path.exists()), candidates[-1])

    def _load_yaml_file(self, file_path: Path) -> Dict[str, Any]:
        """Parse a YAML mapping; a missing or unreadable file counts as empty."""
        if not file_path.exists():
            logger.debug(f"Config file not found: {file_path}")
            return {}

        try:
            with open(file_path, "r", encoding="utf-8") as f:
                content = yaml.safe_load(f)
                return content or {}
        except (OSError, yaml.YAMLError) as e:
            logger.error(f"Error loading {file_path}: {e}")
            return {}

    def load_settings(self) -> Dict[str, Any]:
        """Read settings.yaml from disk, bypassing the cache."""
        return self._load_yaml_file(self.settings_file)

    def get_value(
        self, key_path: str, default: Any = None, env_var: Optional[str] = None
    ) -> Any:
        """Look up ``a.b.c`` in the settings; ``env_var`` (when set) takes precedence."""
        if env_var and env_var in os.environ:
            return os.environ[env_var]

        current = self.config
        try:
            for key in key_path.split("."):
                current = current[key]
            return current
        except (KeyError, TypeError):
            return default

    def get_aws_region(self) -> str:
        """Get AWS region with environment variable override support."""
        return self.get_value("aws.region", "", env_var="AWS_REGION")

    def get_aws_profile(self) -> str:
        """Get AWS profile with environment variable override support."""
        return self.get_value("aws.profile", "", env_var="AWS_PROFILE")

    def get_logging_level(self) -> str:
        """Get logging level."""
        return self.get_value("logging.level", "INFO", env_var="LOG_LEVEL")

    def get_logging_path(self) -> str:
        """Get logging file path."""
        return self.get_value("logging.path", "logs", env_var="LOG_PATH")

    def get_slack_channel(self) -> str:
        return self.get_value("slack.channel", "", env_var="SLACK_CHANNEL")

    def get_ssm_slack_webhook_parameter(self) -> str:
        return self.get_value(
            "slack.ssm_webhook_parameter", "", env_var="SSM_SLACK_WEBHOOK_URL"
        )

    def get_command_defaults(self) -> Dict[str, Dict[str, Any]]:
        """Get per-command option defaults, keyed by CLI command name.

        The result is handed to click as ``default_map``; option names use the
        Python parameter name (``retention_days``, not ``--retention-days``).
        """
        commands = self.get_value("commands", {}) or {}
        return {
            name: dict(options or {})
            for name, options in commands.items()
            if isinstance(options, dict) or options is None
        }

    def get_command_option(
        self, command: str, option: str, default: Any = None, env_var: Optional[str] = None
    ) -> Any:
        """Get a single command option, environment first, then settings file."""
        return self.get_value(f"commands.{command}.{option}", default, env_var=env_var)

    @property
    def config(self) -> Dict[str, Any]:
        """Get the full configuration as a cached property."""
        if not hasattr(self, "_cached_config"):
            self._cached_config = self.load_settings()
        return self._cached_config

    def reload_config(self) -> None:
        """Force reload of configuration from file."""
        if hasattr(self, "_cached_config"):
            delattr(self, "_cached_config")
