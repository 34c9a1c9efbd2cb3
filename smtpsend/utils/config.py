"""Configuration models and loader for optional JSON settings."""

import json
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator

from .errors import (
    ConfigurationError,
    FileSystemError,
    InvalidConfigError,
    SmtpSendError,
)
from .logging import get_logger, log_call
from .paths import CONFIG_PATH

logger = get_logger(__name__)

DEFAULT_SMTP_PORT = 25


class SendConfig(BaseModel):
    """Pydantic model for the SMTP server a message is sent through."""

    server: str = ""
    port: int = DEFAULT_SMTP_PORT
    use_tls: bool = False
    timeout: float = 60.0  # in seconds, per protocol step
    local_hostname: Optional[str] = None

    @field_validator("port")
    @classmethod
    def _check_port(cls, value: int) -> int:
        if not 0 < value < 65536:
            raise ValueError(f"port must be between 1 and 65535, got {value}")
        return value

    @field_validator("timeout")
    @classmethod
    def _check_timeout(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("timeout must be positive")
        return value

    @property
    def address(self) -> str:
        return f"{self.server}:{self.port}"


class LoggingConfig(BaseModel):
    """Pydantic model for logging settings."""

    log_level: str = "WARNING"
    log_to_file: bool = False
    max_file_size: int = 5_242_880  # 5 MB
    backup_count: int = 5


class AppConfig(BaseModel):
    """Pydantic model for overall application configuration."""

    smtp: SendConfig = Field(default_factory=SendConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


class ConfigManager:
    """Loads configuration from an optional JSON file.

    A missing file is not an error: the defaults are used and nothing is
    written back. Command-line options are layered on top with
    ``with_overrides``.
    """

    def __init__(self, config_path: Optional[Path] = None):
        self.path = Path(config_path) if config_path else CONFIG_PATH
        self.config = self._load_config()

    def _load_config(self) -> AppConfig:
        """Load configuration from file, or defaults if not present."""

        if not self.path.exists():
            logger.debug(f"No config file at {self.path}, using defaults")
            return AppConfig()

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
            config = AppConfig(**data)
            logger.debug(f"Configuration loaded from {self.path}")
            return config

        except json.JSONDecodeError as e:
            logger.debug(f"Failed to parse config file: {e}")
            raise InvalidConfigError(
                f"Configuration file is not valid JSON: {str(e)}",
                details={"path": str(self.path)},
            ) from e
        except ValidationError as e:
            logger.debug(f"Failed to validate config file: {e}")
            raise InvalidConfigError(
                f"Configuration data does not match expected schema: {str(e)}",
                details={"path": str(self.path)},
            ) from e
        except OSError as e:
            raise FileSystemError(
                f"Failed to read configuration file: {str(e)}",
                details={"path": str(self.path)},
            ) from e
        except TypeError as e:
            raise InvalidConfigError(
                "Configuration file must contain a JSON object",
                details={"path": str(self.path)},
            ) from e
        except SmtpSendError:
            raise
        except Exception as e:
            raise ConfigurationError(f"Failed to load configuration: {str(e)}") from e

    @log_call
    def with_overrides(self, **overrides: Any) -> SendConfig:
        """Return the SMTP settings with non-None overrides applied."""

        values: Dict[str, Any] = self.config.smtp.model_dump()
        values.update({k: v for k, v in overrides.items() if v is not None})

        try:
            return SendConfig(**values)
        except ValidationError as e:
            raise InvalidConfigError(f"Invalid SMTP settings: {str(e)}") from e
