"""
Schémas Pydantic pour les effectifs d'élèves et les renforts.

Les règles métier (triplet d'effectifs, quota) sont vérifiées par
quota_service pour produire des erreurs typées ; ici on ne contrôle que les types.
"""

import uuid
import datetime as dt
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class AttendanceSubmit(BaseModel):
    """Soumission d'un enseignant pour un groupe. reinforcements_delta s'ajoute au cumul."""
    students_present: int
    students_eating: int
    students_not_eating: Optional[int] = None  # Calculé (présents - mangeant) si absent
    reinforcements_delta: int = 0
    submission_key: Optional[str] = Field(default=None, max_length=64)  # Clé d'idempotence


class AttendanceResponse(BaseModel):
    id: uuid.UUID
    registrant_id: uuid.UUID
    registrant_name: str
    group_id: uuid.UUID
    group_name: str
    group_category: str
    date: dt.date
    students_present: int
    students_eating: int
    students_not_eating: int
    reinforcements_used: int
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class AttendanceLookup(BaseModel):
    """Enregistrement existant (ou None) et renforts encore disponibles pour le groupe."""
    record: Optional[AttendanceResponse]
    max_reinforcements: int
    reinforcements_used: int
    available: int
