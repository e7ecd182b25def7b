"""
Schémas Pydantic des rapports de suppression en cascade.
"""

import datetime as dt
from typing import List

from pydantic import BaseModel


class DeletionReport(BaseModel):
    """
    Rapport agrégé d'une suppression (unitaire ou en masse).

    skipped_count : cibles déjà supprimées (NotFoundError), non bloquant
    failed_count  : échecs de stockage, l'inscription concernée est conservée
    """

    deleted_registrations: int = 0
    deleted_attendance: int = 0
    skipped_count: int = 0
    failed_count: int = 0
    errors: List[str] = []


class AttendanceClearReport(BaseModel):
    date: dt.date
    deleted_attendance: int
