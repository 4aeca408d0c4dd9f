"""
config.py

Runtime settings and logging setup.

Every field can be overridden from the environment with a `PWGRAM_` prefix,
e.g. `PWGRAM_MIN_ENTROPY=64` or `PWGRAM_SEED=1234`. CLI flags take
precedence over both.
"""

from __future__ import annotations

from functools import lru_cache
import sys
from typing import Literal, Optional, Tuple

from loguru import logger
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="PWGRAM_")

    min_entropy: float = 90.0
    # Newline always breaks the chain so passwords never span lines.
    delimiters: Tuple[str, ...] = ("\n", "\r\n")
    multigraphs: Tuple[str, ...] = ()
    collision: Literal["overwrite", "reserve"] = "overwrite"
    seed: Optional[int] = None
    quantum: bool = False
    refill_size: int = 4096
    max_tokens: int = 10_000
    log_level: str = "WARNING"


@lru_cache
def get_settings() -> Settings:
    return Settings()


def configure_logging(level: Optional[str] = None) -> None:
    """Route loguru output to stderr at `level` (defaults to settings)."""
    level = (level or get_settings().log_level).upper()
    logger.remove()
    logger.enable("pwgram")
    logger.add(
        sys.stderr,
        level=level,
        backtrace=False,
        diagnose=False,
        format="<level>{level: <8}</level> | {name}:{function} - {message}",
    )


__all__ = ["Settings", "configure_logging", "get_settings"]
