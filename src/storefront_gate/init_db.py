# src/storefront_gate/init_db.py
"""Create the service's tables on the configured database."""

from storefront_gate.db.session import create_tables


def init_db() -> None:
    """Initialize the database by creating all tables."""
    create_tables()


if __name__ == "__main__":
    init_db()
    print("Database initialized.")
