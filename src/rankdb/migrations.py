"""Schema migrations, run programmatically through Alembic.

The migrations directory is an Alembic script location: an env.py plus a
versions/ directory of revisions with a linear history. Applied state lives
in Alembic's alembic_version table.
"""

import logging
from pathlib import Path

from alembic import command
from alembic.config import Config
from alembic.runtime.migration import MigrationContext
from alembic.script import ScriptDirectory
from sqlalchemy import create_engine, pool

logger = logging.getLogger(__name__)


class MigrationError(Exception):
    """Raised when the migrations directory is missing or not an Alembic script location."""


def sqlalchemy_url(db_url: str) -> str:
    """Map a libpq-style URL onto SQLAlchemy's psycopg2 dialect."""
    if db_url.startswith("postgres://"):
        return db_url.replace("postgres://", "postgresql+psycopg2://", 1)
    if db_url.startswith("postgresql://"):
        return db_url.replace("postgresql://", "postgresql+psycopg2://", 1)
    return db_url


def alembic_config(db_url: str, directory: str | Path) -> Config:
    directory = Path(directory)
    if not (directory / "env.py").is_file():
        raise MigrationError(f"Migrations directory not found: {directory}")
    cfg = Config()
    cfg.set_main_option("script_location", str(directory))
    # ConfigParser treats % as interpolation; escape to preserve URL encoding.
    cfg.set_main_option("sqlalchemy.url", sqlalchemy_url(db_url).replace("%", "%%"))
    return cfg


class Migrator:
    """Upgrade and downgrade one database against one migrations directory."""

    def __init__(self, db_url: str, directory: str | Path):
        self._url = sqlalchemy_url(db_url)
        self._config = alembic_config(db_url, directory)
        self._script = ScriptDirectory.from_config(self._config)

    def current(self) -> str | None:
        engine = create_engine(self._url, poolclass=pool.NullPool)
        try:
            with engine.connect() as conn:
                return MigrationContext.configure(conn).get_current_revision()
        finally:
            engine.dispose()

    def applied(self) -> list[str]:
        """Applied revision ids, oldest first."""
        revisions = []
        rev = self.current()
        while rev is not None:
            revisions.append(rev)
            rev = self._script.get_revision(rev).down_revision
        revisions.reverse()
        return revisions

    def up(self) -> list[str]:
        """Upgrade to head; returns the revisions applied."""
        before = set(self.applied())
        command.upgrade(self._config, "head")
        done = [rev for rev in self.applied() if rev not in before]
        if not done:
            logger.info("No pending migrations")
        return done

    def down(self, steps: int | None = 1) -> list[str]:
        """Revert the newest applied revisions, newest first; steps=None reverts all."""
        applied = self.applied()
        count = len(applied) if steps is None else min(steps, len(applied))
        if count == 0:
            logger.info("No migrations to revert")
            return []
        remaining = applied[: len(applied) - count]
        command.downgrade(self._config, remaining[-1] if remaining else "base")
        return applied[len(remaining):][::-1]

    def reset(self) -> tuple[list[str], list[str]]:
        """Revert everything, then re-apply everything."""
        reverted = self.down(steps=None)
        applied = self.up()
        return reverted, applied
