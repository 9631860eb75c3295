"""Process configuration read from the environment (and an optional .env file)."""

import logging
import os
from dataclasses import dataclass, field
from typing import List, Mapping, Optional

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

DEFAULT_DB_PATH = os.path.join("data", "lobby.db")
DEFAULT_OPENAI_MODEL = "gpt-4o-mini"
DEFAULT_ASSISTANT_TIMEOUT = 30.0
DEFAULT_PORT = 3001


@dataclass
class Settings:
    host: str = "0.0.0.0"
    port: int = DEFAULT_PORT
    db_path: str = DEFAULT_DB_PATH
    default_credential: Optional[str] = field(default=None, repr=False)
    openai_model: str = DEFAULT_OPENAI_MODEL
    assistant_timeout: float = DEFAULT_ASSISTANT_TIMEOUT
    cors_origins: List[str] = field(default_factory=lambda: ["*"])
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None, dotenv: bool = True) -> "Settings":
        if environ is None:
            if dotenv:
                load_dotenv()
            environ = os.environ
        origins = [
            origin.strip()
            for origin in environ.get("LOBBYCHAT_CORS_ORIGINS", "*").split(",")
            if origin.strip()
        ]
        return cls(
            host=environ.get("LOBBYCHAT_HOST", "0.0.0.0"),
            port=_int_setting(environ, "PORT", DEFAULT_PORT),
            db_path=environ.get("LOBBYCHAT_DB_PATH", DEFAULT_DB_PATH),
            default_credential=environ.get("OPENAI_API_KEY") or None,
            openai_model=environ.get("LOBBYCHAT_OPENAI_MODEL", DEFAULT_OPENAI_MODEL),
            assistant_timeout=_float_setting(
                environ, "LOBBYCHAT_ASSISTANT_TIMEOUT", DEFAULT_ASSISTANT_TIMEOUT
            ),
            cors_origins=origins or ["*"],
            log_level=environ.get("LOBBYCHAT_LOG_LEVEL", "INFO").upper(),
        )


def _int_setting(environ: Mapping[str, str], name: str, default: int) -> int:
    raw = environ.get(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning("Ignoring invalid %s=%r, using %s", name, raw, default)
        return default


def _float_setting(environ: Mapping[str, str], name: str, default: float) -> float:
    raw = environ.get(name)
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        logger.warning("Ignoring invalid %s=%r, using %s", name, raw, default)
        return default
    if value <= 0:
        logger.warning("%s must be positive, using %s", name, default)
        return default
    return value
