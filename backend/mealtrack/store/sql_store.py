"""
Implémentation SQLAlchemy du RecordStore.

Les opérations font un flush mais jamais de commit : c'est unit_of_work()
qui valide ou annule. Toute SQLAlchemyError est convertie en PersistenceError
(StaleDataError → ConcurrencyError, via le compteur de version des présences).
"""

import uuid
import logging
import datetime as dt
from contextlib import contextmanager
from functools import wraps
from typing import Any, Dict, Iterator, List, Optional

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from mealtrack.exceptions import ConcurrencyError, NotFoundError, PersistenceError
from mealtrack.models.attendance import AttendanceRecord
from mealtrack.models.group import Group
from mealtrack.models.meal_registration import MealRegistration
from mealtrack.models.registrant import Registrant

logger = logging.getLogger(__name__)


def _storage_call(func):
    """Traduit les erreurs SQLAlchemy en erreurs métier typées."""
    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except StaleDataError as exc:
            raise ConcurrencyError(
                "L'enregistrement a été modifié entre-temps, rechargez et réessayez."
            ) from exc
        except SQLAlchemyError as exc:
            logger.error("Erreur de stockage dans %s : %s", func.__name__, exc)
            raise PersistenceError(f"Erreur de stockage : {exc.__class__.__name__}") from exc
    return wrapper


class SqlRecordStore:
    """RecordStore adossé à une session SQLAlchemy ; today fixe la journée active."""

    def __init__(self, db: Session, today: Optional[dt.date] = None):
        self.db = db
        self.today = today or dt.date.today()

    @contextmanager
    def unit_of_work(self) -> Iterator[None]:
        try:
            yield
            self.db.commit()
        except StaleDataError as exc:
            self.db.rollback()
            raise ConcurrencyError(
                "L'enregistrement a été modifié entre-temps, rechargez et réessayez."
            ) from exc
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise PersistenceError(f"Erreur de stockage : {exc.__class__.__name__}") from exc
        except Exception:
            self.db.rollback()
            raise

    # --- Inscriptions ---

    @_storage_call
    def get_today_registrations(self) -> List[MealRegistration]:
        return self.db.execute(
            select(MealRegistration)
            .where(MealRegistration.date == self.today)
            .order_by(MealRegistration.registered_at.desc())
        ).scalars().all()

    @_storage_call
    def get_registration(self, registration_id: uuid.UUID) -> MealRegistration:
        registration = self.db.get(MealRegistration, registration_id)
        if registration is None:
            raise NotFoundError(f"Inscription {registration_id} introuvable.")
        return registration

    @_storage_call
    def create_registration(self, fields: Dict[str, Any]) -> MealRegistration:
        registration = MealRegistration(**fields)
        self.db.add(registration)
        self.db.flush()
        return registration

    @_storage_call
    def update_registration(self, registration_id: uuid.UUID, fields: Dict[str, Any]) -> MealRegistration:
        registration = self.get_registration(registration_id)
        for field, value in fields.items():
            setattr(registration, field, value)
        self.db.flush()
        return registration

    @_storage_call
    def delete_registration(self, registration_id: uuid.UUID) -> None:
        # DELETE direct : une ligne déjà supprimée par une autre session donne rowcount 0
        result = self.db.execute(
            delete(MealRegistration).where(MealRegistration.id == registration_id)
        )
        if not result.rowcount:
            raise NotFoundError(f"Inscription {registration_id} introuvable.")

    # --- Catalogue ---

    @_storage_call
    def get_all_groups(self) -> List[Group]:
        return self.db.execute(select(Group).order_by(Group.name)).scalars().all()

    @_storage_call
    def get_group(self, group_id: uuid.UUID) -> Group:
        group = self.db.get(Group, group_id)
        if group is None:
            raise NotFoundError(f"Groupe {group_id} introuvable.")
        return group

    @_storage_call
    def get_registrant(self, registrant_id: uuid.UUID) -> Registrant:
        registrant = self.db.get(Registrant, registrant_id)
        if registrant is None:
            raise NotFoundError(f"Inscrit {registrant_id} introuvable.")
        return registrant

    # --- Présences ---

    @_storage_call
    def get_attendance_record(
        self, registrant_id: uuid.UUID, group_id: uuid.UUID, date: dt.date
    ) -> Optional[AttendanceRecord]:
        return self.db.execute(
            select(AttendanceRecord).where(
                AttendanceRecord.registrant_id == registrant_id,
                AttendanceRecord.group_id == group_id,
                AttendanceRecord.date == date,
            )
        ).scalar()

    @_storage_call
    def create_attendance_record(self, fields: Dict[str, Any]) -> AttendanceRecord:
        record = AttendanceRecord(**fields)
        self.db.add(record)
        self.db.flush()
        return record

    @_storage_call
    def update_attendance_record(self, record_id: uuid.UUID, fields: Dict[str, Any]) -> AttendanceRecord:
        record = self.db.get(AttendanceRecord, record_id)
        if record is None:
            raise NotFoundError(f"Enregistrement de présence {record_id} introuvable.")
        for field, value in fields.items():
            setattr(record, field, value)
        self.db.flush()
        return record

    @_storage_call
    def delete_attendance_by_registrant_group_date(
        self, registrant_id: uuid.UUID, group_id: uuid.UUID, date: dt.date
    ) -> int:
        result = self.db.execute(
            delete(AttendanceRecord).where(
                AttendanceRecord.registrant_id == registrant_id,
                AttendanceRecord.group_id == group_id,
                AttendanceRecord.date == date,
            )
        )
        return result.rowcount or 0

    @_storage_call
    def delete_attendance_for_date(self, date: dt.date) -> int:
        result = self.db.execute(
            delete(AttendanceRecord).where(AttendanceRecord.date == date)
        )
        return result.rowcount or 0
