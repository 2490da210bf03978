# src/storefront_gate/scripts/migrate.py
"""Apply Alembic migrations up to head against the configured database."""
from __future__ import annotations

import os

from alembic import command
from alembic.config import Config

from storefront_gate.core.settings import settings

_PROJECT_ROOT = os.path.join(os.path.dirname(__file__), "..", "..", "..")


def run_upgrade_head() -> None:
    cfg = Config(os.path.join(_PROJECT_ROOT, "migrations", "alembic.ini"))
    # Alembic needs a synchronous driver
    cfg.set_main_option("sqlalchemy.url", settings.database_url_sync)
    script_location = os.path.join(_PROJECT_ROOT, "migrations")
    cfg.set_main_option("script_location", os.path.abspath(script_location))
    command.upgrade(cfg, "head")


if __name__ == "__main__":
    run_upgrade_head()
