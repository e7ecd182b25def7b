"""
Configuration partagée pour tous les tests.
Override la dépendance get_db pour éviter toute connexion réelle à PostgreSQL,
et fournit un RecordStore en mémoire pour les services.
"""

import os

os.environ.setdefault("SCHEDULER_ENABLED", "false")

import uuid
import datetime as dt
from contextlib import contextmanager
from datetime import datetime
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from mealtrack.database import get_db
from mealtrack.exceptions import NotFoundError, PersistenceError
from mealtrack.main import app
from mealtrack.models.attendance import AttendanceRecord
from mealtrack.models.group import Group
from mealtrack.models.meal_registration import MealRegistration
from mealtrack.models.registrant import Registrant

TODAY = dt.date(2026, 3, 10)


class InMemoryStore:
    """RecordStore en mémoire avec annulation des suppressions sur échec d'une unité de travail."""

    def __init__(self, today=TODAY):
        self.today = today
        self.registrations = {}
        self.groups = {}
        self.registrants = {}
        self.attendance = {}
        self.failing_deletes = set()  # ids d'inscriptions dont la suppression lève PersistenceError
        self.commits = 0
        self.rollbacks = 0

    @contextmanager
    def unit_of_work(self):
        saved = (dict(self.registrations), dict(self.attendance))
        try:
            yield
        except Exception:
            self.registrations, self.attendance = saved
            self.rollbacks += 1
            raise
        self.commits += 1

    # --- Fabriques ---

    def add_registrant(self, name="Ana Pérez", code="T-001", role="TEACHER"):
        registrant = Registrant(id=uuid.uuid4(), name=name, personal_code=code, role=role)
        self.registrants[registrant.id] = registrant
        return registrant

    def add_group(self, name="3A", max_reinforcements=5, category="PRIMARY", eating_duration_minutes=30):
        group = Group(
            id=uuid.uuid4(),
            name=name,
            category=category,
            max_reinforcements=max_reinforcements,
            eating_duration_minutes=eating_duration_minutes,
        )
        self.groups[group.id] = group
        return group

    def add_registration(self, registrant, group_name="3A", date=None, entered_at=None,
                         registered_at=None):
        registration = MealRegistration(
            id=uuid.uuid4(),
            registrant_id=registrant.id,
            registrant_name=registrant.name,
            registrant_code=registrant.personal_code,
            group=group_name,
            date=date or self.today,
            registered_at=registered_at or datetime(2026, 3, 10, 12, 0),
            entered_at=entered_at,
            status="eating" if entered_at else "registered",
        )
        self.registrations[registration.id] = registration
        return registration

    def add_attendance(self, registrant, group, date=None, reinforcements_used=0,
                       present=20, eating=15):
        record = AttendanceRecord(
            id=uuid.uuid4(),
            registrant_id=registrant.id,
            registrant_name=registrant.name,
            group_id=group.id,
            group_name=group.name,
            group_category=group.category,
            date=date or self.today,
            students_present=present,
            students_eating=eating,
            students_not_eating=present - eating,
            reinforcements_used=reinforcements_used,
        )
        self.attendance[record.id] = record
        return record

    # --- RecordStore ---

    def get_today_registrations(self):
        return [r for r in self.registrations.values() if r.date == self.today]

    def get_registration(self, registration_id):
        if registration_id not in self.registrations:
            raise NotFoundError(f"Inscription {registration_id} introuvable.")
        return self.registrations[registration_id]

    def create_registration(self, fields):
        registration = MealRegistration(id=uuid.uuid4(), **fields)
        self.registrations[registration.id] = registration
        return registration

    def update_registration(self, registration_id, fields):
        registration = self.get_registration(registration_id)
        for field, value in fields.items():
            setattr(registration, field, value)
        return registration

    def delete_registration(self, registration_id):
        if registration_id in self.failing_deletes:
            raise PersistenceError("Timeout du stockage.")
        if registration_id not in self.registrations:
            raise NotFoundError(f"Inscription {registration_id} introuvable.")
        del self.registrations[registration_id]

    def get_all_groups(self):
        return list(self.groups.values())

    def get_group(self, group_id):
        if group_id not in self.groups:
            raise NotFoundError(f"Groupe {group_id} introuvable.")
        return self.groups[group_id]

    def get_registrant(self, registrant_id):
        if registrant_id not in self.registrants:
            raise NotFoundError(f"Inscrit {registrant_id} introuvable.")
        return self.registrants[registrant_id]

    def _matching(self, registrant_id, group_id, date):
        return [
            r for r in self.attendance.values()
            if r.registrant_id == registrant_id and r.group_id == group_id and r.date == date
        ]

    def get_attendance_record(self, registrant_id, group_id, date):
        matches = self._matching(registrant_id, group_id, date)
        return matches[0] if matches else None

    def create_attendance_record(self, fields):
        record = AttendanceRecord(id=uuid.uuid4(), **fields)
        self.attendance[record.id] = record
        return record

    def update_attendance_record(self, record_id, fields):
        record = self.attendance[record_id]
        for field, value in fields.items():
            setattr(record, field, value)
        return record

    def delete_attendance_by_registrant_group_date(self, registrant_id, group_id, date):
        matches = self._matching(registrant_id, group_id, date)
        for record in matches:
            del self.attendance[record.id]
        return len(matches)

    def delete_attendance_for_date(self, date):
        matches = [r for r in self.attendance.values() if r.date == date]
        for record in matches:
            del self.attendance[record.id]
        return len(matches)


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def client():
    """Client HTTP de test avec la BDD mockée."""
    mock_db = MagicMock()
    app.dependency_overrides[get_db] = lambda: mock_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
