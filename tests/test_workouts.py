"""
Tests for workouts.py: ownership-scoped updates/deletes and schedule ordering.
"""

from dataclasses import replace
from datetime import datetime, timezone

import pytest

from errors import PermissionDenied
from models import Role
from permissions import can_manage_class, require_role

JUNE_1_9AM = datetime(2025, 6, 1, 9, 0)


@pytest.fixture
def trainers(auth):
    a = auth.register("trainer_a", "password-a", None, None, None, Role.TRAINER)
    b = auth.register("trainer_b", "password-b", None, None, None, Role.TRAINER)
    return a, b


class TestCreateAndList:
    def test_create_returns_persisted_class(self, workouts, trainers):
        a, _ = trainers
        c = workouts.create(a.id, "Yoga", "Morning flow", JUNE_1_9AM, 10)
        assert c.id is not None
        assert workouts.get(c.id) == c

    def test_no_validation_on_capacity_or_time(self, workouts, trainers):
        """Values are stored exactly as given."""
        a, _ = trainers
        past = datetime(2001, 1, 1, 6, 30)
        c = workouts.create(a.id, "Odd", None, past, 0)
        assert workouts.get(c.id).capacity == 0
        assert workouts.get(c.id).scheduled_at == past

    def test_lists_are_ordered_by_schedule(self, workouts, trainers):
        a, b = trainers
        late = workouts.create(a.id, "Late", None, datetime(2025, 6, 3, 18, 0), 10)
        early = workouts.create(b.id, "Early", None, datetime(2025, 6, 1, 7, 0), 10)
        mid = workouts.create(a.id, "Mid", None, datetime(2025, 6, 2, 12, 0), 10)
        assert [c.id for c in workouts.list_all()] == [early.id, mid.id, late.id]
        assert [c.id for c in workouts.list_by_owner(a.id)] == [mid.id, late.id]
        assert workouts.list_by_owner(9999) == []

    def test_get_missing(self, workouts):
        assert workouts.get(42) is None


class TestOwnership:
    def test_other_trainer_cannot_update_or_delete(self, workouts, trainers):
        a, b = trainers
        c = workouts.create(a.id, "HIIT", "Intervals", JUNE_1_9AM, 12)

        hijack = replace(c, owner_id=b.id, class_type="Hijacked", capacity=99)
        assert workouts.update(hijack) is False
        assert workouts.delete(c.id, b.id) is False
        assert workouts.get(c.id) == c

    def test_owner_can_update(self, workouts, trainers):
        a, _ = trainers
        c = workouts.create(a.id, "HIIT", "Intervals", JUNE_1_9AM, 12)
        changed = replace(c, class_type="HIIT+", description=None, scheduled_at=datetime(2025, 6, 2, 10, 0), capacity=8)
        assert workouts.update(changed) is True
        assert workouts.get(c.id) == changed

    def test_update_unknown_id(self, workouts, trainers):
        a, _ = trainers
        c = workouts.create(a.id, "HIIT", None, JUNE_1_9AM, 12)
        assert workouts.update(replace(c, id=c.id + 100)) is False

    def test_owner_can_delete(self, workouts, trainers):
        a, _ = trainers
        c = workouts.create(a.id, "HIIT", None, JUNE_1_9AM, 12)
        assert workouts.delete(c.id, a.id) is True
        assert workouts.delete(c.id, a.id) is False
        assert workouts.get(c.id) is None

    def test_deleting_trainer_leaves_classes(self, auth, workouts, trainers):
        """No cascade: the class keeps its (now dangling) owner id."""
        a, _ = trainers
        c = workouts.create(a.id, "HIIT", None, JUNE_1_9AM, 12)
        assert auth.delete(a.id)
        assert workouts.list_by_owner(a.id) == [c]


class TestTrainerScenario:
    def test_register_login_create_delete(self, auth, workouts):
        trainer = auth.register("tess", "pass-word-1", "t@example.com", None, None, Role.TRAINER)
        other = auth.register("otto", "pass-word-2", None, None, None, Role.TRAINER)

        me = auth.login("tess", "pass-word-1")
        require_role(me, Role.TRAINER)
        assert me.id == trainer.id

        c = workouts.create(me.id, "Spin", "Hill climb", JUNE_1_9AM, 10)
        assert workouts.list_by_owner(me.id) == [c]
        assert can_manage_class(me, c)
        assert not can_manage_class(other, c)

        assert workouts.delete(c.id, other.id) is False
        assert workouts.delete(c.id, me.id) is True
        assert workouts.list_by_owner(me.id) == []

    def test_member_is_not_allowed_to_create(self, auth):
        member = auth.register("max", "pass-word-3", None, None, None, Role.MEMBER)
        with pytest.raises(PermissionDenied):
            require_role(auth.login("max", "pass-word-3"), Role.TRAINER)
        assert member.role is Role.MEMBER


class TestScheduleNormalization:
    def test_created_class_equals_stored_class(self, workouts, trainers):
        """Sub-second precision is dropped before storing, so create() matches get()."""
        a, _ = trainers
        c = workouts.create(a.id, "Yoga", None, datetime(2025, 6, 1, 9, 0, 0, 500), 10)
        assert c.scheduled_at == JUNE_1_9AM
        assert workouts.get(c.id) == c

    def test_update_normalizes_too(self, workouts, trainers):
        a, _ = trainers
        c = workouts.create(a.id, "Yoga", None, JUNE_1_9AM, 10)
        assert workouts.update(replace(c, scheduled_at=datetime(2025, 6, 2, 10, 30, 15, 999)))
        assert workouts.get(c.id).scheduled_at == datetime(2025, 6, 2, 10, 30, 15)

    def test_timezone_aware_times_rejected(self, workouts, trainers):
        a, _ = trainers
        aware = datetime(2025, 6, 1, 9, 0, tzinfo=timezone.utc)
        with pytest.raises(ValueError):
            workouts.create(a.id, "Yoga", None, aware, 10)
        assert workouts.list_all() == []
