"""Configuration loading and saving."""

import logging
import os
import secrets
import shutil
from typing import Any

import yaml
from pydantic import ValidationError

from speciescatalog.config.models import SpeciesCatalogConfig
from speciescatalog.system.path_resolver import PathResolver

logger = logging.getLogger(__name__)


class ConfigManager:
    """Manages configuration loading, saving and validation."""

    SESSION_SECRET_ENV = "SPECIESCATALOG_SESSION_SECRET"

    def __init__(self, path_resolver: PathResolver | None = None):
        """Initialize ConfigManager.

        Args:
            path_resolver: Optional PathResolver instance. If None, creates a new one.
        """
        self.path_resolver = path_resolver or PathResolver()
        self.config_path = self.path_resolver.get_config_path()

    def load(self) -> SpeciesCatalogConfig:
        """Load configuration with defaults and validation.

        Returns:
            SpeciesCatalogConfig: Loaded and validated configuration

        Raises:
            ValueError: If the configuration file does not validate
        """
        self._ensure_config_exists()

        raw_config = self._read_yaml()

        # Environment overrides the file so secrets can stay out of it
        env_secret = os.getenv(self.SESSION_SECRET_ENV)
        if env_secret:
            raw_config["session_secret"] = env_secret

        expected_fields = set(SpeciesCatalogConfig.model_fields.keys())
        unexpected_fields = set(raw_config.keys()) - expected_fields
        if unexpected_fields:
            logger.warning("Ignoring unknown config fields: %s", sorted(unexpected_fields))

        try:
            config = SpeciesCatalogConfig(
                **{k: v for k, v in raw_config.items() if k in expected_fields}
            )
        except ValidationError as e:
            raise ValueError(f"Configuration validation failed: {e}") from e

        if not config.session_secret:
            raise ValueError("Configuration validation failed: session_secret is empty")

        return config

    def save(self, config: SpeciesCatalogConfig) -> None:
        """Save configuration to file with backup.

        Args:
            config: Configuration to save

        Raises:
            PermissionError: If config file cannot be written
        """
        self.config_path.parent.mkdir(parents=True, exist_ok=True)

        if self.config_path.exists():
            backup_path = self.config_path.with_suffix(".yaml.backup")
            try:
                shutil.copy2(self.config_path, backup_path)
            except PermissionError:
                logger.warning("Could not create backup at %s", backup_path)

        config_yaml = yaml.dump(config.model_dump(), default_flow_style=False, sort_keys=False)
        self.config_path.write_text(config_yaml)
        logger.info("Configuration saved successfully to %s", self.config_path)

    def _ensure_config_exists(self) -> None:
        """Ensure config file exists, create it from defaults if needed."""
        if self.config_path.exists():
            return

        self.config_path.parent.mkdir(parents=True, exist_ok=True)

        defaults = SpeciesCatalogConfig(session_secret=secrets.token_urlsafe(32))
        config_yaml = yaml.dump(defaults.model_dump(), default_flow_style=False, sort_keys=False)
        self.config_path.write_text(config_yaml)
        self.config_path.chmod(0o600)
        logger.info("Created default configuration at %s", self.config_path)

    def _read_yaml(self) -> dict[str, Any]:
        """Read YAML config file.

        Returns:
            dict: Raw configuration dictionary
        """
        config_text = self.config_path.read_text()
        try:
            data = yaml.safe_load(config_text) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Configuration file {self.config_path} is not valid YAML: {e}") from e
        if not isinstance(data, dict):
            raise ValueError(f"Configuration file {self.config_path} must contain a mapping")
        return data
