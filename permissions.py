"""
permissions.py
Role gate for the front-end. The services themselves do not check roles.

Admin only: user listing, user deletion.
Trainer only: class create/update/delete (update/delete only on own classes).
Everything else: any logged-in identity.
"""

from __future__ import annotations

from errors import PermissionDenied
from models import Identity, Role, WorkoutClass


def require_login(identity: Identity | None) -> Identity:
    if identity is None or identity.id is None:
        raise PermissionDenied("You must be logged in.")
    return identity


def require_role(identity: Identity | None, *roles: Role) -> Identity:
    identity = require_login(identity)
    if identity.role not in roles:
        allowed = ", ".join(r.label for r in roles)
        raise PermissionDenied(f"This action requires role: {allowed}.")
    return identity


def can_manage_class(identity: Identity | None, workout_class: WorkoutClass) -> bool:
    return (
        identity is not None
        and identity.role is Role.TRAINER
        and identity.id is not None
        and identity.id == workout_class.owner_id
    )


def refresh_identity(auth, identity: Identity | None) -> Identity | None:
    """Re-read a session identity; None once the account has been deleted."""
    if identity is None or identity.id is None:
        return None
    return auth.get(identity.id)
