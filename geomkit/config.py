"""
Configuration settings for geomkit.

Values can be overridden through environment variables prefixed with
``GEOMKIT_`` (for example ``GEOMKIT_PRECISION=1e-9``) or a local ``.env`` file.
"""
import logging
import math
from typing import Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings

# Same console format the editor application used
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
LOG_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

DEFAULT_PRECISION = 1e-6


class GeometrySettings(BaseSettings):
    # Tolerance used by every approximate comparison until changed at runtime
    precision: float = DEFAULT_PRECISION

    # Application
    log_level: str = "WARNING"

    model_config = {
        "env_prefix": "GEOMKIT_",
        "env_file": ".env",
        "case_sensitive": False,
        "extra": "ignore",
    }

    @field_validator("precision")
    @classmethod
    def validate_precision(cls, value: float) -> float:
        """Precision must be a positive, finite number."""
        if not math.isfinite(value) or value <= 0:
            raise ValueError(f"Precision must be a positive finite number, got {value}")
        return value

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        level = value.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {value}")
        return level


# Global settings instance
settings = GeometrySettings()


def configure_logging(level: Optional[str] = None) -> None:
    """
    Configure console logging for scripts using geomkit.

    The library itself never calls this; it only emits records through
    module-level loggers.

    Args:
        level: Threshold level name; defaults to ``settings.log_level``
    """
    logging.basicConfig(
        level=(level or settings.log_level).upper(),
        format=LOG_FORMAT,
        datefmt=LOG_DATE_FORMAT,
    )
