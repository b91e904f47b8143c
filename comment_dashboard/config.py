"""Runtime configuration for the comment dashboard.

Values come from environment variables first and fall back to a ``.env`` file
in the working directory:

- FIGMA_API_BASE: Base URL of the REST API (default: https://api.figma.com)
- FIGMA_TOKEN: Optional access token applied to new sessions
- FIGMA_FILE_KEY: Key of the file the session is attached to
- FIGMA_DOCUMENT_PATH: JSON export of the document tree (``{"document": ...}``)
- FIGMA_REQUEST_TIMEOUT: Request timeout in seconds (default: no timeout)
- LOG_DIR / LOG_FILENAME / LOG_LEVEL: Logging destination and level
- CORS_ORIGINS: Comma-separated origins allowed to call the HTTP bridge
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Mapping, Optional

DEFAULT_API_BASE = "https://api.figma.com"

_ENV_KEYS = (
    "FIGMA_API_BASE",
    "FIGMA_TOKEN",
    "FIGMA_FILE_KEY",
    "FIGMA_DOCUMENT_PATH",
    "FIGMA_REQUEST_TIMEOUT",
    "LOG_DIR",
    "LOG_FILENAME",
    "LOG_LEVEL",
    "CORS_ORIGINS",
)


@dataclass(frozen=True)
class Settings:
    """Resolved configuration for one plugin process."""
    api_base: str = DEFAULT_API_BASE
    token: Optional[str] = None
    file_key: Optional[str] = None
    document_path: Optional[str] = None
    request_timeout: Optional[float] = None
    log_dir: str = "logs"
    log_filename: str = "plugin.log"
    log_level: str = "INFO"
    cors_origins: List[str] = field(default_factory=lambda: ["http://localhost:5173"])


def read_env_file(path: Path) -> Dict[str, str]:
    """Parse KEY=VALUE lines from a .env file, ignoring comments and blanks."""
    values: Dict[str, str] = {}
    if not path.exists():
        return values

    with open(path, "r", encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue
            key, value = line.split("=", 1)
            values[key.strip()] = value.strip().strip('"').strip("'")

    return values


def _parse_timeout(raw: Optional[str]) -> Optional[float]:
    if raw is None or raw == "":
        return None
    try:
        timeout = float(raw)
    except ValueError:
        raise ValueError(f"FIGMA_REQUEST_TIMEOUT must be a number of seconds, got {raw!r}")
    if timeout <= 0:
        raise ValueError(f"FIGMA_REQUEST_TIMEOUT must be positive, got {raw!r}")
    return timeout


def load_settings(
    env: Optional[Mapping[str, str]] = None,
    env_file: Optional[Path] = None,
) -> Settings:
    """Build Settings from the environment (or ``env``) plus an optional .env file.

    Environment values win over .env values; empty strings count as unset.

    Raises:
        ValueError: If FIGMA_REQUEST_TIMEOUT is not a positive number
    """
    source = os.environ if env is None else env
    file_values = read_env_file(env_file if env_file is not None else Path.cwd() / ".env")

    values: Dict[str, Optional[str]] = {}
    for key in _ENV_KEYS:
        value = (source.get(key) or "").strip()
        if not value:
            value = file_values.get(key, "").strip()
        values[key] = value or None

    cors = values["CORS_ORIGINS"]
    defaults = Settings()

    return Settings(
        api_base=(values["FIGMA_API_BASE"] or DEFAULT_API_BASE).rstrip("/"),
        token=values["FIGMA_TOKEN"],
        file_key=values["FIGMA_FILE_KEY"],
        document_path=values["FIGMA_DOCUMENT_PATH"],
        request_timeout=_parse_timeout(values["FIGMA_REQUEST_TIMEOUT"]),
        log_dir=values["LOG_DIR"] or defaults.log_dir,
        log_filename=values["LOG_FILENAME"] or defaults.log_filename,
        log_level=(values["LOG_LEVEL"] or defaults.log_level).upper(),
        cors_origins=[o.strip() for o in cors.split(",") if o.strip()] if cors else defaults.cors_origins,
    )
