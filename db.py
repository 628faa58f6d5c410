"""
db.py
SQLite helpers + initialization (creates DB/tables).

Driver errors never leave this module raw: they are re-raised as StorageError
(IntegrityViolation for constraint failures) with the original chained.
"""

from __future__ import annotations

import logging
import sqlite3
from contextlib import contextmanager
from pathlib import Path

from config import Settings
from errors import IntegrityViolation, StorageError

logger = logging.getLogger("gym_app.db")

SCHEMA = (
    """
    CREATE TABLE IF NOT EXISTS users (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        username TEXT NOT NULL UNIQUE,
        password_hash TEXT NOT NULL,
        email TEXT,
        phone TEXT,
        address TEXT,
        role TEXT NOT NULL CHECK(role IN ('admin','trainer','member'))
    )
    """,
    # owner_id / holder_id are plain columns: deleting a user does not cascade
    """
    CREATE TABLE IF NOT EXISTS workout_classes (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        class_type TEXT NOT NULL,
        description TEXT,
        owner_id INTEGER NOT NULL,
        scheduled_at TEXT NOT NULL,
        capacity INTEGER NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS memberships (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        membership_type TEXT NOT NULL,
        description TEXT,
        cost TEXT,
        holder_id INTEGER NOT NULL,
        start_date TEXT NOT NULL,
        end_date TEXT,
        CHECK(end_date IS NULL OR end_date >= start_date)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS merch_items (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        name TEXT NOT NULL,
        item_type TEXT NOT NULL,
        unit_price TEXT NOT NULL,
        quantity_in_stock INTEGER NOT NULL,
        CHECK(CAST(unit_price AS REAL) >= 0 AND quantity_in_stock >= 0)
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_classes_owner ON workout_classes(owner_id, scheduled_at)",
    "CREATE INDEX IF NOT EXISTS idx_memberships_holder ON memberships(holder_id, start_date)",
)


class Database:
    """One connection per call; commit on success, rollback on any error."""

    def __init__(self, path: str | Path, timeout: float = 5.0):
        self.path = Path(path)
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        return cls(settings.db_file, timeout=settings.db_timeout)

    @contextmanager
    def get_conn(self):
        try:
            conn = sqlite3.connect(self.path, timeout=self.timeout, check_same_thread=False)
        except sqlite3.Error as exc:
            logger.exception("Cannot open database %s", self.path)
            raise StorageError(f"Cannot open database {self.path}: {exc}") from exc
        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        except sqlite3.IntegrityError as exc:
            conn.rollback()
            logger.warning("Constraint failed on %s: %s", self.path, exc)
            raise IntegrityViolation(str(exc)) from exc
        except sqlite3.Error as exc:
            conn.rollback()
            logger.exception("Storage failure on %s", self.path)
            raise StorageError(str(exc)) from exc
        except BaseException:
            conn.rollback()
            raise
        finally:
            conn.close()

    def execute(self, sql: str, params: tuple = ()) -> int:
        """Run a write statement and return the new row id."""
        with self.get_conn() as conn:
            cur = conn.execute(sql, params)
            return cur.lastrowid

    def execute_count(self, sql: str, params: tuple = ()) -> int:
        """Run a write statement and return the number of affected rows."""
        with self.get_conn() as conn:
            cur = conn.execute(sql, params)
            return cur.rowcount

    def fetch_one(self, sql: str, params: tuple = ()) -> sqlite3.Row | None:
        with self.get_conn() as conn:
            cur = conn.execute(sql, params)
            return cur.fetchone()

    def fetch_all(self, sql: str, params: tuple = ()) -> list[sqlite3.Row]:
        with self.get_conn() as conn:
            cur = conn.execute(sql, params)
            return cur.fetchall()

    def init_db(self) -> None:
        """Create the database file and all tables if they do not exist yet."""
        with self.get_conn() as conn:
            for statement in SCHEMA:
                conn.execute(statement)
        logger.info("Database ready at %s", self.path)
