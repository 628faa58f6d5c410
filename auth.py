"""
auth.py
Authentication utilities (bcrypt hashing, verify) and the registration/login service.

Uses the bcrypt package directly rather than passlib's bcrypt backend auto-detection.
"""

from __future__ import annotations

import logging

import bcrypt

from directory import UserDirectory
from errors import Conflict, DuplicateUsername, InvalidCredentials
from models import Identity, Role

DEFAULT_ROUNDS = 12


def _to_bcrypt_secret(password: str) -> bytes:
    """
    bcrypt only uses the first 72 BYTES of the password.
    We truncate to 72 bytes to avoid ValueError and to make behavior explicit.
    """
    pw = password.encode("utf-8")
    if len(pw) > 72:
        pw = pw[:72]
    return pw


def hash_password(password: str, rounds: int = DEFAULT_ROUNDS) -> str:
    """
    Returns a salted bcrypt hash as a UTF-8 string (stored in SQLite).
    """
    secret = _to_bcrypt_secret(password)
    salt = bcrypt.gensalt(rounds=rounds)
    hashed = bcrypt.hashpw(secret, salt)
    return hashed.decode("utf-8")


def verify_password(password: str, password_hash: str | None) -> bool:
    """
    Verify password against stored bcrypt hash.
    A missing or malformed hash is a failed verification, never an error.
    """
    if not password_hash:
        return False
    secret = _to_bcrypt_secret(password)
    try:
        stored = password_hash.encode("utf-8")
        return bcrypt.checkpw(secret, stored)
    except (ValueError, TypeError, UnicodeEncodeError):
        return False


class AuthService:
    """Registration and login on top of the user directory."""

    def __init__(
        self,
        directory: UserDirectory,
        rounds: int = DEFAULT_ROUNDS,
        logger: logging.Logger | None = None,
    ):
        self.directory = directory
        self.rounds = rounds
        self.log = logger or logging.getLogger("gym_app.auth")
        self._dummy_hash: str | None = None

    def register(
        self,
        username: str,
        password: str,
        email: str | None,
        phone: str | None,
        address: str | None,
        role: Role,
    ) -> Identity:
        if self.directory.find_by_username(username) is not None:
            self.log.warning("Registration failed: username already exists (%s)", username)
            raise DuplicateUsername(username)

        identity = Identity(
            id=None,
            username=username,
            email=email,
            phone=phone,
            address=address,
            role=Role(role),
        )
        try:
            created = self.directory.create(identity, hash_password(password, self.rounds))
        except Conflict as exc:
            # Lost the race between the lookup above and the insert.
            self.log.warning("Registration failed at insert: username already exists (%s)", username)
            raise DuplicateUsername(username) from exc

        self.log.info("User registered: %s (%s)", username, created.role.value)
        return created

    def login(self, username: str, password: str) -> Identity:
        found = self.directory.find_credentials(username)
        if found is None:
            # Burn one verification so unknown users cost the same as wrong passwords.
            verify_password(password, self._get_dummy_hash())
            self.log.warning("Login failed for username: %s", username)
            raise InvalidCredentials()

        identity, password_hash = found
        if not verify_password(password, password_hash):
            self.log.warning("Login failed for username: %s", username)
            raise InvalidCredentials()

        self.log.info("User logged in: %s (%s)", username, identity.role.value)
        return identity

    def get(self, user_id: int) -> Identity | None:
        return self.directory.find_by_id(user_id)

    def list_all(self) -> list[Identity]:
        return self.directory.find_all()

    def list_by_role(self, role: Role | str) -> list[Identity]:
        return self.directory.find_by_role(role)

    def delete(self, user_id: int) -> bool:
        deleted = self.directory.delete_by_id(user_id)
        if not deleted:
            self.log.warning("Delete requested for unknown user id %s", user_id)
        return deleted

    def _get_dummy_hash(self) -> str:
        if self._dummy_hash is None:
            self._dummy_hash = hash_password("not-a-real-password", self.rounds)
        return self._dummy_hash
