"""
Tests for permissions.py (role gate used by the front-end).
"""

from datetime import datetime

import pytest

from errors import PermissionDenied
from models import Identity, Role, WorkoutClass
from permissions import can_manage_class, refresh_identity, require_login, require_role


def person(role, id=1):
    return Identity(id=id, username=f"{role.value}{id}", email=None, phone=None, address=None, role=role)


def a_class(owner_id):
    return WorkoutClass(id=5, class_type="Yoga", description=None, owner_id=owner_id,
                        scheduled_at=datetime(2025, 6, 1, 9), capacity=10)


class TestRequireRole:
    def test_allowed_role_passes_through(self):
        admin = person(Role.ADMIN)
        assert require_role(admin, Role.ADMIN) is admin

    def test_any_of_several_roles(self):
        assert require_role(person(Role.MEMBER), Role.TRAINER, Role.MEMBER)

    @pytest.mark.parametrize("role", [Role.TRAINER, Role.MEMBER])
    def test_admin_only(self, role):
        with pytest.raises(PermissionDenied, match="Admin"):
            require_role(person(role), Role.ADMIN)

    def test_anonymous_rejected(self):
        with pytest.raises(PermissionDenied):
            require_role(None, Role.MEMBER)
        with pytest.raises(PermissionDenied):
            require_login(None)

    def test_unsaved_identity_rejected(self):
        with pytest.raises(PermissionDenied):
            require_login(person(Role.ADMIN, id=None))


class TestCanManageClass:
    def test_owner_trainer(self):
        assert can_manage_class(person(Role.TRAINER, id=3), a_class(owner_id=3))

    def test_other_trainer(self):
        assert not can_manage_class(person(Role.TRAINER, id=4), a_class(owner_id=3))

    def test_admin_does_not_own_classes(self):
        assert not can_manage_class(person(Role.ADMIN, id=3), a_class(owner_id=3))

    def test_nobody(self):
        assert not can_manage_class(None, a_class(owner_id=3))


class TestRefreshIdentity:
    def test_live_account_is_reloaded(self, auth):
        me = auth.register("tess", "pass-word-1", None, None, None, Role.TRAINER)
        assert refresh_identity(auth, me) == me

    def test_deleted_account_loses_session(self, auth):
        """An identity kept from login is dropped once an admin deletes the account."""
        auth.register("tess", "pass-word-1", None, None, None, Role.TRAINER)
        me = auth.login("tess", "pass-word-1")
        assert auth.delete(me.id)
        assert refresh_identity(auth, me) is None

    def test_no_session(self, auth):
        assert refresh_identity(auth, None) is None
        assert refresh_identity(auth, person(Role.MEMBER, id=None)) is None
