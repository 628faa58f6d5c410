"""
errors.py
Exception taxonomy shared by the store and the services.

Absence ("not found", "not yours") is reported with None / [] / False, not raised.
"""

from __future__ import annotations


class GymError(Exception):
    """Base class for every error raised by this application."""


class StorageError(GymError):
    """The store failed in a way callers did not anticipate (I/O, schema, driver)."""


class IntegrityViolation(StorageError):
    """A constraint in the store rejected the statement."""


class Conflict(GymError):
    """An insert collided with a uniqueness constraint."""


class DuplicateUsername(Conflict):
    def __init__(self, username: str):
        super().__init__(f"Username '{username}' is already taken.")
        self.username = username


class InvalidCredentials(GymError):
    def __init__(self):
        # Same message for unknown user and wrong password.
        super().__init__("Invalid username or password.")


class PermissionDenied(GymError):
    pass
