"""
Shared fixtures: a throwaway SQLite file per test, services wired on top of it,
and a clock that can be set by the test.
"""

from datetime import date

import pytest

from auth import AuthService
from config import Settings
from db import Database
from directory import UserDirectory
from memberships import MembershipService, MembershipStore
from merch import MerchService, MerchStore
from workouts import WorkoutClassService, WorkoutClassStore

TEST_ROUNDS = 10


class FixedClock:
    def __init__(self, today: date):
        self.current = today

    def __call__(self) -> date:
        return self.current


@pytest.fixture
def settings(tmp_path):
    return Settings(_env_file=None, db_file=tmp_path / "gym.db", bcrypt_rounds=TEST_ROUNDS, log_file="")


@pytest.fixture
def database(settings):
    db = Database.from_settings(settings)
    db.init_db()
    return db


@pytest.fixture
def directory(database):
    return UserDirectory(database)


@pytest.fixture
def auth(directory):
    return AuthService(directory, rounds=TEST_ROUNDS)


@pytest.fixture
def workouts(database):
    return WorkoutClassService(WorkoutClassStore(database))


@pytest.fixture
def clock():
    return FixedClock(date(2024, 1, 31))


@pytest.fixture
def memberships(database, clock):
    return MembershipService(MembershipStore(database), today=clock)


@pytest.fixture
def merch(database):
    return MerchService(MerchStore(database))
