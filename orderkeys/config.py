from __future__ import annotations

import logging
import os
from dataclasses import dataclass

from .errors import InvalidArgument

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


@dataclass(frozen=True)
class Settings:
    database_url: str
    # width of the padded binary column holding keys, 0 for variable length
    key_width: int
    log_level: str


def get_settings() -> Settings:
    raw_width = os.getenv("ORDERKEYS_KEY_WIDTH", "0")
    try:
        key_width = int(raw_width)
    except ValueError as exc:
        raise InvalidArgument(f"ORDERKEYS_KEY_WIDTH must be an integer, got {raw_width!r}") from exc
    if key_width < 0:
        raise InvalidArgument("ORDERKEYS_KEY_WIDTH must not be negative")
    return Settings(
        database_url=os.getenv("DATABASE_URL", "sqlite:///./orderkeys.db"),
        key_width=key_width,
        log_level=os.getenv("ORDERKEYS_LOG_LEVEL", "WARNING").upper(),
    )


def configure_logging(level: str) -> None:
    logging.basicConfig(level=level, format=LOG_FORMAT)
