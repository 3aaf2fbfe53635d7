import os
import sqlite3
from datetime import datetime, timezone

from flask_sqlalchemy import SQLAlchemy

# Shared ORM handle; bound to the app by Bulletin.init_app
db = SQLAlchemy()


def utcnow():
    """Naive UTC timestamp, the form SQLite hands back."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Database:
    """Raw sqlite3 access for side stores that live outside the ORM (app logs)."""

    @staticmethod
    def connect(path):
        db_dir = os.path.dirname(path)
        if db_dir:
            os.makedirs(db_dir, exist_ok=True)
        conn = sqlite3.connect(path)
        conn.row_factory = sqlite3.Row
        return conn

    @staticmethod
    def sqlite_path(uri):
        """
        Filesystem path of a sqlite:/// URI, or None for other databases
        and in-memory sqlite.
        """
        prefix = 'sqlite:///'
        if not uri or not uri.startswith(prefix):
            return None
        path = uri[len(prefix):]
        return path or None

    @staticmethod
    def ensure_dir_for(uri):
        path = Database.sqlite_path(uri)
        if path:
            db_dir = os.path.dirname(path)
            if db_dir:
                os.makedirs(db_dir, exist_ok=True)
        return path
