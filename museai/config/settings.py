"""Configuration management for museai."""

import logging
import os
from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, Field

API_KEY_ENV = "MUSEAI_API_KEY"

logger = logging.getLogger(__name__)


class APIConfig(BaseModel):
    """API configuration."""
    model_config = ConfigDict(frozen=True)

    api_key: str = ""
    base_url: str = "https://muse.ai/api/"
    cdn_url: str = "https://cdn.muse.ai/"
    connect_timeout: float = Field(default=0.5, gt=0.0)
    timeout: float = Field(default=300.0, gt=0.0)
    verify_tls: bool = True


class MuseConfig(BaseModel):
    """Main museai configuration."""
    model_config = ConfigDict(frozen=True)

    api: APIConfig = Field(default_factory=APIConfig)

    # Logging
    log_level: str = "INFO"
    log_file: str | None = None


class ConfigManager:
    """Manages configuration loading and saving."""

    DEFAULT_CONFIG_NAME = "museai.yaml"

    def __init__(self, config_path: Path | None = None):
        """Initialize config manager."""
        self.config_path = config_path or self._get_default_config_path()
        self._config: MuseConfig | None = None

    def load(self) -> MuseConfig:
        """Load configuration from file or create default."""
        if self.config_path.exists():
            try:
                with open(self.config_path, encoding='utf-8') as f:
                    data = yaml.safe_load(f) or {}
                    self._config = MuseConfig(**data)
            except Exception as e:
                logger.warning(f"Error loading config from {self.config_path}: {e}")
                logger.warning("Using default configuration")
                self._config = MuseConfig()
        else:
            logger.info(f"Config file not found at {self.config_path}")
            logger.info("Creating default configuration")
            self._config = MuseConfig()
            self.save()

        self._config = self._apply_env(self._config)
        return self._config

    def save(self, config: MuseConfig | None = None) -> None:
        """Save configuration to file."""
        config_to_save = config or self._config
        if config_to_save is None:
            raise ValueError("No configuration to save")

        self.config_path.parent.mkdir(parents=True, exist_ok=True)

        data = config_to_save.model_dump()
        with open(self.config_path, 'w', encoding='utf-8') as f:
            yaml.dump(data, f, default_flow_style=False, indent=2)

        logger.info(f"Configuration saved to {self.config_path}")

    def get_config(self) -> MuseConfig:
        """Get current configuration, loading if necessary."""
        if self._config is None:
            self.load()
        return self._config

    def update_config(self, **kwargs) -> MuseConfig:
        """Replace top-level configuration values and save the result."""
        if self._config is None:
            self.load()

        updates = {key: value for key, value in kwargs.items()
                   if key in MuseConfig.model_fields}
        self._config = self._config.model_copy(update=updates)

        self.save()
        return self._config

    def _apply_env(self, config: MuseConfig) -> MuseConfig:
        """Let MUSEAI_API_KEY override the key stored on disk."""
        api_key = os.environ.get(API_KEY_ENV)
        if not api_key:
            return config
        return config.model_copy(
            update={"api": config.api.model_copy(update={"api_key": api_key})}
        )

    def _get_default_config_path(self) -> Path:
        """Get default configuration file path."""
        current_dir = Path.cwd() / self.DEFAULT_CONFIG_NAME
        if current_dir.exists():
            return current_dir

        config_dir = Path.home() / ".config" / "museai"
        return config_dir / self.DEFAULT_CONFIG_NAME

    def create_sample_config(self, output_path: Path | None = None) -> None:
        """Create a sample configuration file with comments."""
        output_path = output_path or (Path.cwd() / "museai_sample.yaml")

        sample_yaml = """# museai Configuration File
# Edit this file to customize the muse.ai client

# API settings
api:
  api_key: ""                         # Or set MUSEAI_API_KEY in the environment
  base_url: "https://muse.ai/api/"
  cdn_url: "https://cdn.muse.ai/"     # Used for thumbnail URLs
  connect_timeout: 0.5                # Seconds to establish a connection
  timeout: 300.0                      # Seconds per read, write or pool wait (not the whole request)
  verify_tls: true                    # Only disable against a trusted proxy

# Logging
log_level: "INFO"
log_file: null  # Set to file path for file logging
"""

        output_path.parent.mkdir(parents=True, exist_ok=True)
        with open(output_path, 'w', encoding='utf-8') as f:
            f.write(sample_yaml)

        logger.info(f"Sample configuration created at {output_path}")


def load_config(config_path: Path | None = None) -> MuseConfig:
    """Load configuration from a specific path or the default location."""
    return ConfigManager(config_path).load()
