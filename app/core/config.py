"""Environment-driven settings for learning-analytics-service.

  APP_ENV       dev | test | prod                  (default dev)
  LOG_LEVEL     debug | info | warning | error     (default info)
  LOG_JSON      1/true/yes/on or 0/false/no/off    (default false)
  PORT          1-65535                            (default 8000)
  CORS_ORIGINS  comma-separated dashboard origins  (default the Vite dev server)

Values are trimmed and (except CORS_ORIGINS) lower-cased before checking.
A bad value fails at import with a ValueError naming the variable.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Literal

AppEnv = Literal["dev", "test", "prod"]
LogLevel = Literal["debug", "info", "warning", "error"]

_APP_ENVS: tuple[AppEnv, ...] = ("dev", "test", "prod")
_LOG_LEVELS: tuple[LogLevel, ...] = ("debug", "info", "warning", "error")
_BOOL_WORDS = {
    "1": True,
    "true": True,
    "yes": True,
    "on": True,
    "": False,
    "0": False,
    "false": False,
    "no": False,
    "off": False,
}
_DEFAULT_CORS_ORIGIN = "http://localhost:5173"


@dataclass(frozen=True)
class Settings:
    app_env: AppEnv
    log_level: LogLevel
    log_json: bool
    port: int
    cors_origins: tuple[str, ...] = (_DEFAULT_CORS_ORIGIN,)

    @property
    def is_dev(self) -> bool:
        return self.app_env == "dev"

    @property
    def is_test(self) -> bool:
        return self.app_env == "test"

    @property
    def is_prod(self) -> bool:
        return self.app_env == "prod"

    @property
    def expose_error_details(self) -> bool:
        # Internal fault messages never reach end users in prod.
        return not self.is_prod


def _raw(name: str, default: str) -> str:
    return os.environ.get(name, default).strip()


def _choice(name: str, default: str, allowed: tuple[str, ...]) -> str:
    value = _raw(name, default).lower()
    if value not in allowed:
        raise ValueError(f"{name} must be {'|'.join(allowed)} (got {value!r})")
    return value


def _flag(name: str, default: str) -> bool:
    value = _raw(name, default).lower()
    if value not in _BOOL_WORDS:
        raise ValueError(f"{name} must be a boolean (got {value!r})")
    return _BOOL_WORDS[value]


def _port(name: str, default: str) -> int:
    value = _raw(name, default)
    try:
        port = int(value)
    except ValueError:
        raise ValueError(f"{name} must be an integer (got {value!r})") from None
    if not 0 < port < 65536:
        raise ValueError(f"{name} must be between 1 and 65535 (got {port})")
    return port


def _origins(name: str, default: str) -> tuple[str, ...]:
    return tuple(o.strip() for o in _raw(name, default).split(",") if o.strip())


def load_settings() -> Settings:
    return Settings(  # type: ignore[arg-type]
        app_env=_choice("APP_ENV", "dev", _APP_ENVS),
        log_level=_choice("LOG_LEVEL", "info", _LOG_LEVELS),
        log_json=_flag("LOG_JSON", "false"),
        port=_port("PORT", "8000"),
        cors_origins=_origins("CORS_ORIGINS", _DEFAULT_CORS_ORIGIN),
    )


SETTINGS = load_settings()
