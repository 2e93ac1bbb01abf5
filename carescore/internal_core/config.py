from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Optional


def _getenv_str(name: str, default: str) -> str:
    value = os.getenv(name)
    return default if value is None else value


def _getenv_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    return int(value)


def _getenv_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    return value.strip().lower() in {"1", "true", "t", "yes", "y", "on"}


@dataclass(frozen=True)
class CarescoreConfig:
    CARESCORE_LOG_LEVEL: str
    CARESCORE_FACILITY_NAME: str
    CARESCORE_AUDIT_ENABLED: bool
    CARESCORE_AUDIT_DETAIL_MAX_CHARS: int

    def log_level_value(self) -> int:
        level = logging.getLevelName(self.CARESCORE_LOG_LEVEL.strip().upper())
        # getLevelName returns "Level X" strings for unknown names.
        return level if isinstance(level, int) else logging.INFO


def load_config() -> CarescoreConfig:
    return CarescoreConfig(
        CARESCORE_LOG_LEVEL=_getenv_str("CARESCORE_LOG_LEVEL", "INFO"),
        CARESCORE_FACILITY_NAME=_getenv_str("CARESCORE_FACILITY_NAME", "Healthcare Facility"),
        CARESCORE_AUDIT_ENABLED=_getenv_bool("CARESCORE_AUDIT_ENABLED", True),
        CARESCORE_AUDIT_DETAIL_MAX_CHARS=max(
            16, _getenv_int("CARESCORE_AUDIT_DETAIL_MAX_CHARS", 200)
        ),
    )


def configure_logging(config: Optional[CarescoreConfig] = None) -> None:
    cfg = config or load_config()
    logging.basicConfig(
        level=cfg.log_level_value(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
