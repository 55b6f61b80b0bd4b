"""
Configuration for the PurpleAir client.

Settings are pydantic models loaded from a YAML file. Access keys may be
kept in the file; they are redacted whenever a configuration is saved.
"""

import logging
import yaml
from pathlib import Path
from typing import Any, Dict, Optional, Tuple
from pydantic import BaseModel, Field, field_validator
from pydantic import ValidationError as PydanticValidationError


DEFAULT_BASE_URL = "https://api.purpleair.com/v1"
CONFIG_FILENAME = "purpleair_config.yaml"
REDACTED = "***REDACTED***"

# Checked in order by load_config when no path is given
SEARCH_PATHS: Tuple[Path, ...] = (
    Path(CONFIG_FILENAME),
    Path("config") / CONFIG_FILENAME,
    Path("..") / "config" / CONFIG_FILENAME,
)

LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')


class APISettings(BaseModel):
    """PurpleAir endpoint and access keys."""
    base_url: str = Field(default=DEFAULT_BASE_URL, description="Base URL for the PurpleAir API")
    timeout: int = Field(default=30, gt=0, description="Request timeout in seconds")
    read_key: Optional[str] = Field(default=None, description="API read key")
    write_key: Optional[str] = Field(default=None, description="API write key")

    @field_validator('base_url')
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Normalize base URL so paths can be appended."""
        return v.rstrip('/')


class LoggingSettings(BaseModel):
    """Root logger level, format and optional log file."""
    level: str = Field(default="INFO")
    format: str = Field(default="%(asctime)s %(levelname)s [%(name)s] %(message)s")
    file: Optional[str] = Field(default=None, description="Also log to this file")

    @field_validator('level')
    @classmethod
    def normalize_level(cls, v: str) -> str:
        """Accept level names in any case."""
        level = v.upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"Unknown log level {v!r}, expected one of {', '.join(LOG_LEVELS)}")
        return level


class ClientConfig(BaseModel):
    """Client configuration: API settings and logging."""
    api: APISettings = Field(default_factory=APISettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    @classmethod
    def from_yaml(cls, path: str | Path) -> 'ClientConfig':
        """
        Read a configuration file. An empty file gives the defaults.

        Args:
            path: YAML file to read

        Returns:
            ClientConfig instance

        Raises:
            FileNotFoundError: If the file does not exist
            ValueError: If the file is not valid YAML or has invalid settings
        """
        path = Path(path)
        if not path.is_file():
            raise FileNotFoundError(f"No configuration file at {path}")

        try:
            with path.open() as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"{path} is not valid YAML: {e}")

        if not isinstance(data, dict):
            raise ValueError(f"{path} must contain a mapping, got {type(data).__name__}")

        try:
            return cls.model_validate(data)
        except PydanticValidationError as e:
            raise ValueError(f"Invalid settings in {path}: {e}")

    def redacted(self) -> Dict[str, Any]:
        """Settings as plain data with any access keys masked."""
        data = self.model_dump()
        for slot in ('read_key', 'write_key'):
            if data['api'][slot]:
                data['api'][slot] = REDACTED
        return data

    def save_yaml(self, path: str | Path) -> None:
        """
        Write the configuration with access keys redacted.

        Args:
            path: Destination file; parent directories are created
        """
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open('w') as f:
            yaml.safe_dump(self.redacted(), f, default_flow_style=False, sort_keys=False)


def configure_logging(settings: Optional[LoggingSettings] = None) -> None:
    """
    Apply logging settings to the root logger.

    Args:
        settings: Logging settings (defaults if None)
    """
    settings = settings or LoggingSettings()

    handlers = [logging.StreamHandler()]
    if settings.file:
        log_path = Path(settings.file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_path))

    logging.basicConfig(
        level=getattr(logging, settings.level),
        format=settings.format,
        handlers=handlers,
        force=True
    )


def load_config(path: Optional[str | Path] = None) -> ClientConfig:
    """
    Load the given configuration file, or the first one found on
    SEARCH_PATHS, or the defaults if there is none.
    """
    if path is not None:
        return ClientConfig.from_yaml(path)

    found = next((p for p in SEARCH_PATHS if p.is_file()), None)
    return ClientConfig.from_yaml(found) if found else ClientConfig()
