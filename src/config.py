"""Configuration for the ledger engine."""

import logging
import os
from dataclasses import dataclass

from errors import ConfigurationError

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class EngineConfig:
    """Engine configuration.

    num_workers: 1 processes in the calling thread, more shards clients across worker threads.
    amount_scale: maximum number of decimal places accepted in an input amount.
    """

    num_workers: int = 1
    amount_scale: int = 4
    log_level: str = "WARNING"

    def validate(self) -> "EngineConfig":
        if self.num_workers < 1:
            raise ConfigurationError(f"num_workers must be at least 1, got {self.num_workers}")
        if self.amount_scale < 0:
            raise ConfigurationError(f"amount_scale must not be negative, got {self.amount_scale}")
        if self.log_level.upper() not in LOG_LEVELS:
            raise ConfigurationError(f"unknown log level {self.log_level!r}")
        return self

    @property
    def logging_level(self) -> int:
        return getattr(logging, self.log_level.upper())

    @classmethod
    def from_env(cls) -> "EngineConfig":
        """Create config from environment variables."""
        try:
            config = cls(
                num_workers=int(os.getenv("LEDGER_NUM_WORKERS", "1")),
                amount_scale=int(os.getenv("LEDGER_AMOUNT_SCALE", "4")),
                log_level=os.getenv("LEDGER_LOG_LEVEL", "WARNING"),
            )
        except ValueError as e:
            raise ConfigurationError(f"invalid environment value: {e}") from e
        return config.validate()
