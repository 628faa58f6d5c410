"""
workouts.py
Workout classes: SQL store + ownership-scoped service.

Update and delete match on (id, owner_id) in one statement, so there is no
separate read-then-check step.
"""

from __future__ import annotations

import logging
import sqlite3
from dataclasses import replace
from datetime import datetime

from db import Database
from models import WorkoutClass


def _row_to_class(row: sqlite3.Row) -> WorkoutClass:
    return WorkoutClass(
        id=row["id"],
        class_type=row["class_type"],
        description=row["description"],
        owner_id=row["owner_id"],
        scheduled_at=datetime.fromisoformat(row["scheduled_at"]),
        capacity=row["capacity"],
    )


def normalize_schedule(value: datetime) -> datetime:
    """Naive local time at whole-second precision, exactly what the store keeps."""
    if value.tzinfo is not None:
        raise ValueError("scheduled_at must be a naive local datetime.")
    return value.replace(microsecond=0)


def _to_db_time(value: datetime) -> str:
    return value.isoformat(timespec="seconds")


class WorkoutClassStore:
    def __init__(self, database: Database):
        self.db = database

    def insert(self, workout_class: WorkoutClass) -> WorkoutClass:
        new_id = self.db.execute(
            """
            INSERT INTO workout_classes(class_type, description, owner_id, scheduled_at, capacity)
            VALUES(?,?,?,?,?)
            """,
            (
                workout_class.class_type,
                workout_class.description,
                workout_class.owner_id,
                _to_db_time(workout_class.scheduled_at),
                workout_class.capacity,
            ),
        )
        return replace(workout_class, id=new_id)

    def update_owned(self, workout_class: WorkoutClass) -> bool:
        count = self.db.execute_count(
            """
            UPDATE workout_classes
            SET class_type=?, description=?, scheduled_at=?, capacity=?
            WHERE id=? AND owner_id=?
            """,
            (
                workout_class.class_type,
                workout_class.description,
                _to_db_time(workout_class.scheduled_at),
                workout_class.capacity,
                workout_class.id,
                workout_class.owner_id,
            ),
        )
        return count > 0

    def delete_owned(self, class_id: int, owner_id: int) -> bool:
        count = self.db.execute_count(
            "DELETE FROM workout_classes WHERE id=? AND owner_id=?",
            (class_id, owner_id),
        )
        return count > 0

    def get(self, class_id: int) -> WorkoutClass | None:
        row = self.db.fetch_one("SELECT * FROM workout_classes WHERE id = ?", (class_id,))
        return _row_to_class(row) if row else None

    def all(self) -> list[WorkoutClass]:
        rows = self.db.fetch_all("SELECT * FROM workout_classes ORDER BY scheduled_at ASC, id ASC")
        return [_row_to_class(r) for r in rows]

    def by_owner(self, owner_id: int) -> list[WorkoutClass]:
        rows = self.db.fetch_all(
            "SELECT * FROM workout_classes WHERE owner_id = ? ORDER BY scheduled_at ASC, id ASC",
            (owner_id,),
        )
        return [_row_to_class(r) for r in rows]


class WorkoutClassService:
    def __init__(self, store: WorkoutClassStore, logger: logging.Logger | None = None):
        self.store = store
        self.log = logger or logging.getLogger("gym_app.workouts")

    def create(
        self,
        owner_id: int,
        class_type: str,
        description: str | None,
        scheduled_at: datetime,
        capacity: int,
    ) -> WorkoutClass:
        # Capacity and time are stored as given (no range or past-date checks).
        created = self.store.insert(
            WorkoutClass(
                id=None,
                class_type=class_type,
                description=description,
                owner_id=owner_id,
                scheduled_at=normalize_schedule(scheduled_at),
                capacity=capacity,
            )
        )
        self.log.info("Workout class %s created by trainer %s (%s)", created.id, owner_id, class_type)
        return created

    def update(self, workout_class: WorkoutClass) -> bool:
        """Replace type/description/time/capacity; False if the id is unknown or owned by someone else."""
        workout_class = replace(workout_class, scheduled_at=normalize_schedule(workout_class.scheduled_at))
        updated = self.store.update_owned(workout_class)
        if updated:
            self.log.info("Workout class %s updated by trainer %s", workout_class.id, workout_class.owner_id)
        else:
            self.log.warning(
                "Workout class update rejected: id=%s owner=%s", workout_class.id, workout_class.owner_id
            )
        return updated

    def delete(self, class_id: int, owner_id: int) -> bool:
        deleted = self.store.delete_owned(class_id, owner_id)
        if deleted:
            self.log.info("Workout class %s deleted by trainer %s", class_id, owner_id)
        else:
            self.log.warning("Workout class delete rejected: id=%s owner=%s", class_id, owner_id)
        return deleted

    def get(self, class_id: int) -> WorkoutClass | None:
        return self.store.get(class_id)

    def list_all(self) -> list[WorkoutClass]:
        return self.store.all()

    def list_by_owner(self, owner_id: int) -> list[WorkoutClass]:
        return self.store.by_owner(owner_id)
