"""Runtime settings read from the environment."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional


logger = logging.getLogger(__name__)

_DB_PATH_ENV = "CRICFANTASY_DB_PATH"
_SEED_ENV = "CRICFANTASY_SEED"
_STARTING_BALANCE_ENV = "CRICFANTASY_STARTING_BALANCE"
_LOG_LEVEL_ENV = "CRICFANTASY_LOG_LEVEL"

_STARTING_BALANCE_DEFAULT = 500.0


def _env_float(env: Mapping[str, str], name: str, default: float, *, clamp_min: float | None = None) -> float:
    raw = env.get(name)
    if raw is None or raw == "":
        return default
    try:
        value = float(raw)
    except ValueError:
        logger.warning("Invalid float for %s: %s; using default %.2f", name, raw, default)
        return default
    if clamp_min is not None:
        value = max(clamp_min, value)
    return value


def _env_flag(env: Mapping[str, str], name: str, default: bool) -> bool:
    raw = env.get(name)
    if raw is None or raw == "":
        return default
    lowered = raw.strip().lower()
    if lowered in {"1", "true", "yes", "on"}:
        return True
    if lowered in {"0", "false", "no", "off"}:
        return False
    logger.warning("Invalid flag for %s: %s; using default %s", name, raw, default)
    return default


@dataclass(frozen=True)
class Settings:
    db_path: Optional[str] = None
    seed_demo_data: bool = True
    starting_balance: float = _STARTING_BALANCE_DEFAULT
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> "Settings":
        env = os.environ if env is None else env
        log_level = (env.get(_LOG_LEVEL_ENV) or "INFO").upper()
        if not isinstance(logging.getLevelName(log_level), int):
            logger.warning("Invalid log level %s; using INFO", log_level)
            log_level = "INFO"
        return cls(
            db_path=env.get(_DB_PATH_ENV) or None,
            seed_demo_data=_env_flag(env, _SEED_ENV, True),
            starting_balance=_env_float(env, _STARTING_BALANCE_ENV, _STARTING_BALANCE_DEFAULT, clamp_min=0.0),
            log_level=log_level,
        )
