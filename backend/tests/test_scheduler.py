"""
Tests unitaires pour le QueueMonitor (rechargement + tick des statuts).
Les tâches sont appelées directement ; seul le test start/stop lance APScheduler.
"""

import uuid
from datetime import datetime, timedelta
from types import SimpleNamespace
from unittest.mock import MagicMock

from sqlalchemy.exc import OperationalError

from mealtrack.schemas.registration import MealState
from mealtrack.scheduler import QueueMonitor

NOON = datetime(2026, 3, 10, 12, 0)


class FakeClock:
    def __init__(self, now):
        self.now = now

    def __call__(self):
        return self.now


def make_registration(entered_at=NOON):
    return SimpleNamespace(
        id=uuid.uuid4(), registrant_id=uuid.uuid4(), registrant_name="Ana Pérez",
        registrant_code="T-001", group="3A", date=NOON.date(), registered_at=NOON,
        entered_at=entered_at, status="eating",
    )


def make_db(registrations, groups):
    db = MagicMock()
    registrations_result = MagicMock()
    registrations_result.scalars.return_value.all.return_value = registrations
    groups_result = MagicMock()
    groups_result.scalars.return_value.all.return_value = groups
    db.execute.side_effect = [registrations_result, groups_result]
    return db


def make_group():
    return SimpleNamespace(id=uuid.uuid4(), name="3A", category="PRIMARY",
                           max_reinforcements=5, eating_duration_minutes=30)


def test_snapshot_vide_avant_rechargement():
    monitor = QueueMonitor(MagicMock, refresh_seconds=30, tick_seconds=1)
    assert monitor.snapshot() is None


def test_refresh_charge_et_calcule_le_tableau():
    db = make_db([make_registration()], [make_group()])
    clock = FakeClock(NOON + timedelta(minutes=10))
    monitor = QueueMonitor(lambda: db, clock=clock)

    monitor.refresh()

    board = monitor.snapshot()
    assert len(board.others) == 1
    assert board.others[0].state == MealState.EATING
    assert board.others[0].remaining_minutes == 20
    db.expunge_all.assert_called_once()
    db.close.assert_called_once()


def test_tick_recalcule_sans_acces_bdd():
    db = make_db([make_registration()], [make_group()])
    clock = FakeClock(NOON + timedelta(minutes=10))
    monitor = QueueMonitor(lambda: db, clock=clock)
    monitor.refresh()

    clock.now = NOON + timedelta(minutes=31)
    monitor.tick()

    assert monitor.snapshot().others[0].state == MealState.FINISHED
    assert db.execute.call_count == 2  # uniquement lors du refresh


def test_refresh_en_echec_conserve_le_tableau_precedent():
    good_db = make_db([make_registration()], [make_group()])
    bad_db = MagicMock()
    bad_db.execute.side_effect = OperationalError("SELECT", {}, Exception("timeout"))
    sessions = iter([good_db, bad_db])
    monitor = QueueMonitor(lambda: next(sessions), clock=FakeClock(NOON))

    monitor.refresh()
    monitor.refresh()

    assert len(monitor.snapshot().others) == 1
    bad_db.close.assert_called_once()


def test_start_stop():
    db = make_db([], [])
    monitor = QueueMonitor(lambda: db, refresh_seconds=3600, tick_seconds=3600)

    monitor.start()
    assert monitor.running is True
    job_ids = {job.id for job in monitor.scheduler.get_jobs()}
    assert job_ids == {"registrations_refresh", "status_tick"}

    monitor.stop()
    assert monitor.running is False


def test_stop_sans_start():
    monitor = QueueMonitor(MagicMock)
    monitor.stop()
    assert monitor.running is False
