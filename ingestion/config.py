"""Environment-driven settings for the ingest and migration scripts."""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

from dotenv import load_dotenv

from ingestion.errors import ConfigError
from ingestion.schema import DEFAULT_BUFFER_SIZE, DEFAULT_CSV_PATH

logger = logging.getLogger(__name__)

SUPPORTED_SCHEMES = ("postgres://", "postgresql://", "sqlite")


@dataclass(frozen=True)
class Settings:
    database_url: str
    csv_path: Path = Path(DEFAULT_CSV_PATH)
    buffer_size: int = DEFAULT_BUFFER_SIZE
    pool_size: int = 4
    migrations_dir: Path = Path("./migrations")


def _positive_int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from None
    if value < 1:
        raise ConfigError(f"{name} must be positive, got {value}")
    return value


def load_settings(
    env_file: str | Path | None = ".env",
    environ: Mapping[str, str] | None = None,
    **overrides,
) -> Settings:
    """Build Settings from the environment.

    An optional .env file is loaded first without overriding variables that
    are already set. Keyword overrides (command-line flags) win over both;
    None values are ignored.
    """
    if env_file is not None and Path(env_file).is_file():
        load_dotenv(env_file, override=False)
        logger.debug("Loaded environment from %s", env_file)
    env = os.environ if environ is None else environ

    values = {
        "database_url": env.get("POSTGRES_URI", "").strip(),
        "csv_path": Path(env.get("CSV_PATH") or DEFAULT_CSV_PATH),
        "buffer_size": _positive_int(env, "INGEST_BUFFER_SIZE", DEFAULT_BUFFER_SIZE),
        "pool_size": _positive_int(env, "DB_POOL_SIZE", 4),
        "migrations_dir": Path(env.get("MIGRATIONS_DIR") or "./migrations"),
    }
    for key, value in overrides.items():
        if key not in values:
            raise TypeError(f"Unknown setting: {key}")
        if value is not None:
            values[key] = value

    if not values["database_url"]:
        raise ConfigError("POSTGRES_URI is not set")
    if not values["database_url"].startswith(SUPPORTED_SCHEMES):
        raise ConfigError("POSTGRES_URI must be a postgres:// or postgresql:// URL")
    for key in ("buffer_size", "pool_size"):
        if int(values[key]) < 1:
            raise ConfigError(f"{key} must be positive, got {values[key]}")

    values["csv_path"] = Path(values["csv_path"])
    values["migrations_dir"] = Path(values["migrations_dir"])
    return Settings(**values)
