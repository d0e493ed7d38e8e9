"""Runtime settings, read from the environment (and a ``.env`` file)."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass

from dotenv import find_dotenv, load_dotenv

from .store import DEFAULT_MEMORY_CAPACITY

ENV_MEMORY_CAPACITY = "ROLLING_BAYES_MEMORY_CAPACITY"
ENV_LOG_LEVEL = "ROLLING_BAYES_LOG_LEVEL"


@dataclass(frozen=True)
class Settings:
    """Settings for the command line tools.

    Attributes:
        memory_capacity: Training records a new model remembers.
        log_level: Name of the logging level (``"DEBUG"``, ``"INFO"``, ...).
    """

    memory_capacity: int = DEFAULT_MEMORY_CAPACITY
    log_level: str = "WARNING"


def load_settings(dotenv: bool = True) -> Settings:
    """Build :class:`Settings` from environment variables.

    Raises:
        ValueError: If a variable holds an invalid value.
    """
    if dotenv:
        load_dotenv(find_dotenv(usecwd=True))

    raw_capacity = os.getenv(ENV_MEMORY_CAPACITY)
    if raw_capacity is None or not raw_capacity.strip():
        capacity = DEFAULT_MEMORY_CAPACITY
    else:
        try:
            capacity = int(raw_capacity)
        except ValueError:
            raise ValueError(f"{ENV_MEMORY_CAPACITY} must be an integer, got {raw_capacity!r}") from None
        if capacity < 0:
            raise ValueError(f"{ENV_MEMORY_CAPACITY} must be non-negative, got {capacity}")

    log_level = (os.getenv(ENV_LOG_LEVEL) or "WARNING").strip().upper()
    if not isinstance(logging.getLevelName(log_level), int):
        raise ValueError(f"{ENV_LOG_LEVEL} is not a logging level: {log_level!r}")

    return Settings(memory_capacity=capacity, log_level=log_level)
