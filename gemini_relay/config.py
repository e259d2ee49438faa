"""
Relay configuration.
Built once at startup from the environment (and an optional .env file),
then handed to the app factory.
"""

import os
from dataclasses import dataclass
from typing import Optional, Mapping
from dotenv import load_dotenv

DEFAULT_PORT = 3000
DEFAULT_HOST = "0.0.0.0"
DEFAULT_MODEL = "gemini-2.5-flash-preview-09-2025"
DEFAULT_API_BASE = "https://generativelanguage.googleapis.com/v1beta"
UPSTREAM_TIMEOUT_SECONDS = 30
LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


@dataclass(frozen=True)
class RelayConfig:
    """
    Read-only process configuration shared by every request.

    Attributes:
        port (int): Listen port.
        host (str): Listen address.
        gemini_api_key (str, optional): Upstream credential. May be None;
            requests then fail with MissingCredential.
        gemini_model (str): Upstream model identifier.
        gemini_api_base (str): Base URL of the Generative Language API.
        upstream_timeout (float): Deadline in seconds for the upstream call.
        log_level (str): Root logging level name.
    """
    port: int = DEFAULT_PORT
    host: str = DEFAULT_HOST
    gemini_api_key: Optional[str] = None
    gemini_model: str = DEFAULT_MODEL
    gemini_api_base: str = DEFAULT_API_BASE
    upstream_timeout: float = UPSTREAM_TIMEOUT_SECONDS
    log_level: str = "INFO"

    @property
    def has_credential(self) -> bool:
        return bool(self.gemini_api_key)


def _parse_port(raw: Optional[str]) -> int:
    if not raw:
        return DEFAULT_PORT
    try:
        port = int(raw)
    except ValueError:
        raise ValueError(f"PORT must be an integer, got {raw!r}")
    if not 0 < port < 65536:
        raise ValueError(f"PORT out of range: {port}")
    return port


def _parse_log_level(raw: Optional[str]) -> str:
    level = (raw or "INFO").upper()
    if level not in LOG_LEVELS:
        raise ValueError(f"LOG_LEVEL must be one of {', '.join(LOG_LEVELS)}, got {raw!r}")
    return level


def config_from_env(environ: Mapping[str, str]) -> RelayConfig:
    """
    Build a RelayConfig from a mapping of environment variables.

    Empty values are treated as unset.

    Raises:
        ValueError: If PORT is not a valid port number or LOG_LEVEL is
            not a known level name.
    """
    return RelayConfig(
        port=_parse_port(environ.get("PORT")),
        host=environ.get("HOST") or DEFAULT_HOST,
        gemini_api_key=environ.get("GEMINI_API_KEY") or None,
        gemini_model=environ.get("GEMINI_MODEL") or DEFAULT_MODEL,
        gemini_api_base=(environ.get("GEMINI_API_BASE") or DEFAULT_API_BASE).rstrip("/"),
        log_level=_parse_log_level(environ.get("LOG_LEVEL")),
    )


def load_config(env_file: Optional[str] = None) -> RelayConfig:
    """
    Load .env (without overriding variables already set) and read the
    process environment.

    Args:
        env_file (str, optional): Path to the .env file. Defaults to
            python-dotenv's lookup from the current directory.

    Returns:
        RelayConfig: The configuration for this process.
    """
    # Variables already exported by the shell take precedence
    load_dotenv(dotenv_path=env_file, override=False)
    return config_from_env(os.environ)
