import logging
import os
from dataclasses import dataclass

from .errors import ConfigurationError

_LOG_FORMATS = ("json", "text")


@dataclass(frozen=True)
class Config:
    max_size: int = 100
    log_format: str = "text"
    log_level: int = logging.WARNING

    def __post_init__(self) -> None:
        if self.max_size < 0:
            raise ConfigurationError(f"max_size must be non-negative, got {self.max_size}")
        if self.log_format not in _LOG_FORMATS:
            raise ConfigurationError(f"log_format must be one of {_LOG_FORMATS}, got {self.log_format!r}")

    @classmethod
    def from_env(cls) -> "Config":
        raw_size = os.environ.get("GENCHECK_MAX_SIZE", "100")
        try:
            max_size = int(raw_size)
        except ValueError as exc:
            raise ConfigurationError(f"GENCHECK_MAX_SIZE must be an integer, got {raw_size!r}") from exc

        level_name = os.environ.get("GENCHECK_LOG_LEVEL", "WARNING").upper()
        level = logging.getLevelName(level_name)
        if not isinstance(level, int):
            raise ConfigurationError(f"GENCHECK_LOG_LEVEL is not a logging level: {level_name!r}")

        return cls(
            max_size=max_size,
            log_format=os.environ.get("GENCHECK_LOG_FORMAT", "text"),
            log_level=level,
        )
