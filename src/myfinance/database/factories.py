"""Build database instances from arguments or the environment."""

import os
from pathlib import Path
from typing import Optional

from myfinance.database.sqlalchemy_db import SQLAlchemyDatabase

DB_PATH_ENV = "MYFINANCE_DB_PATH"
DATABASE_URL_ENV = "MYFINANCE_DATABASE_URL"
DEFAULT_DB_FILE = Path.home() / ".myfinance" / "myfinance.db"


def create_sqlite_database(database_path: Optional[str] = None) -> SQLAlchemyDatabase:
    """Open a SQLite-backed store.

    The file is ``database_path``, else $MYFINANCE_DB_PATH, else
    ~/.myfinance/myfinance.db. The parent directory is created if needed.
    """
    path = Path(database_path or os.environ.get(DB_PATH_ENV) or DEFAULT_DB_FILE).expanduser()
    path.parent.mkdir(parents=True, exist_ok=True)
    return SQLAlchemyDatabase(f"sqlite:///{path}")


def create_database(database_url: Optional[str] = None, database_path: Optional[str] = None) -> SQLAlchemyDatabase:
    """Create a database instance from a URL, falling back to SQLite.

    Args:
        database_url: SQLAlchemy URL. If None, checks MYFINANCE_DATABASE_URL.
        database_path: SQLite file used when no URL is configured.
    """
    database_url = database_url or os.environ.get(DATABASE_URL_ENV)
    if database_url:
        return SQLAlchemyDatabase(database_url)
    return create_sqlite_database(database_path)
