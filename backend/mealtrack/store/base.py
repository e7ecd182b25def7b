"""
Contrat de stockage consommé par les services de MealTrack.

Les services ne manipulent jamais la session directement : ils passent par
un RecordStore, ce qui permet de les tester avec un stockage en mémoire.
"""

import uuid
import datetime as dt
from typing import Any, ContextManager, Dict, Optional, Protocol, Sequence

from mealtrack.models.attendance import AttendanceRecord
from mealtrack.models.group import Group
from mealtrack.models.meal_registration import MealRegistration
from mealtrack.models.registrant import Registrant


class RecordStore(Protocol):
    today: dt.date

    def unit_of_work(self) -> ContextManager[None]:
        """Transaction : validée en sortie normale, annulée si une exception s'échappe."""
        ...

    # --- Inscriptions ---

    def get_today_registrations(self) -> Sequence[MealRegistration]: ...

    def get_registration(self, registration_id: uuid.UUID) -> MealRegistration:
        """Lève NotFoundError si l'inscription n'existe pas."""
        ...

    def create_registration(self, fields: Dict[str, Any]) -> MealRegistration: ...

    def update_registration(self, registration_id: uuid.UUID, fields: Dict[str, Any]) -> MealRegistration: ...

    def delete_registration(self, registration_id: uuid.UUID) -> None:
        """Lève NotFoundError si l'inscription n'existe plus."""
        ...

    # --- Catalogue ---

    def get_all_groups(self) -> Sequence[Group]: ...

    def get_group(self, group_id: uuid.UUID) -> Group: ...

    def get_registrant(self, registrant_id: uuid.UUID) -> Registrant: ...

    # --- Présences ---

    def get_attendance_record(
        self, registrant_id: uuid.UUID, group_id: uuid.UUID, date: dt.date
    ) -> Optional[AttendanceRecord]: ...

    def create_attendance_record(self, fields: Dict[str, Any]) -> AttendanceRecord: ...

    def update_attendance_record(self, record_id: uuid.UUID, fields: Dict[str, Any]) -> AttendanceRecord: ...

    def delete_attendance_by_registrant_group_date(
        self, registrant_id: uuid.UUID, group_id: uuid.UUID, date: dt.date
    ) -> int: ...

    def delete_attendance_for_date(self, date: dt.date) -> int: ...
