"""
directory.py
User Directory: raw persistence of identities (the users table).
"""

from __future__ import annotations

import logging
import sqlite3
from dataclasses import replace

from db import Database
from errors import Conflict, IntegrityViolation
from models import Identity, Role

_PUBLIC_COLUMNS = "id, username, email, phone, address, role"


def _row_to_identity(row: sqlite3.Row) -> Identity:
    return Identity(
        id=row["id"],
        username=row["username"],
        email=row["email"],
        phone=row["phone"],
        address=row["address"],
        role=Role(row["role"]),
    )


class UserDirectory:
    def __init__(self, database: Database, logger: logging.Logger | None = None):
        self.db = database
        self.log = logger or logging.getLogger("gym_app.directory")

    def create(self, identity: Identity, password_hash: str) -> Identity:
        """
        Insert a new identity and return it with its generated id.
        The UNIQUE constraint on username is authoritative: a collision raises Conflict.
        """
        try:
            new_id = self.db.execute(
                """
                INSERT INTO users(username, password_hash, email, phone, address, role)
                VALUES(?,?,?,?,?,?)
                """,
                (
                    identity.username,
                    password_hash,
                    identity.email,
                    identity.phone,
                    identity.address,
                    identity.role.value,
                ),
            )
        except IntegrityViolation as exc:
            if "users.username" in str(exc):
                raise Conflict(f"username '{identity.username}' already exists") from exc
            self.log.exception("Unexpected constraint failure creating user %s", identity.username)
            raise
        self.log.info("Created user %s with role %s", identity.username, identity.role.value)
        return replace(identity, id=new_id)

    def find_by_username(self, username: str) -> Identity | None:
        row = self.db.fetch_one(f"SELECT {_PUBLIC_COLUMNS} FROM users WHERE username = ?", (username,))
        return _row_to_identity(row) if row else None

    def find_by_id(self, user_id: int) -> Identity | None:
        row = self.db.fetch_one(f"SELECT {_PUBLIC_COLUMNS} FROM users WHERE id = ?", (user_id,))
        return _row_to_identity(row) if row else None

    def find_credentials(self, username: str) -> tuple[Identity, str] | None:
        """Identity plus stored hash; only login should need this."""
        row = self.db.fetch_one(
            f"SELECT {_PUBLIC_COLUMNS}, password_hash FROM users WHERE username = ?", (username,)
        )
        if not row:
            return None
        return _row_to_identity(row), row["password_hash"]

    def find_all(self) -> list[Identity]:
        rows = self.db.fetch_all(f"SELECT {_PUBLIC_COLUMNS} FROM users ORDER BY id ASC")
        return [_row_to_identity(r) for r in rows]

    def find_by_role(self, role: Role | str) -> list[Identity]:
        rows = self.db.fetch_all(
            f"SELECT {_PUBLIC_COLUMNS} FROM users WHERE role = ? ORDER BY id ASC", (Role(role).value,)
        )
        return [_row_to_identity(r) for r in rows]

    def delete_by_id(self, user_id: int) -> bool:
        deleted = self.db.execute_count("DELETE FROM users WHERE id = ?", (user_id,)) > 0
        if deleted:
            self.log.info("Deleted user with id %s", user_id)
        return deleted
