"""
Schémas Pydantic pour les inscriptions au repas et le tableau du jour.

Note : on importe datetime en tant que module (dt) pour éviter le conflit de nommage
entre le champ `date` et le type `datetime.date` dans Pydantic v2.
"""

import uuid
import datetime as dt
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, field_validator


class MealState(str, Enum):
    REGISTERED = "registered"
    EATING = "eating"
    FINISHED = "finished"
    UNKNOWN = "unknown"


class StatusView(BaseModel):
    """État dérivé d'une inscription à un instant donné (jamais persisté)."""
    state: MealState
    remaining_minutes: Optional[int] = None


class RegistrationCreate(BaseModel):
    group: str

    @field_validator("group")
    @classmethod
    def group_not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Le groupe ne peut pas être vide.")
        return v.strip()


class RegistrationResponse(BaseModel):
    id: uuid.UUID
    registrant_id: uuid.UUID
    registrant_name: str
    registrant_code: str
    group: str
    date: dt.date
    registered_at: datetime
    entered_at: Optional[datetime]
    status: Optional[str]

    model_config = {"from_attributes": True}


class RegistrationView(RegistrationResponse):
    """Inscription annotée pour l'affichage : état dérivé + catégorie du groupe."""
    state: MealState
    remaining_minutes: Optional[int] = None
    category_display: str


class BoardResponse(BaseModel):
    """Tableau du jour : inscriptions de l'acteur, des autres et compteurs par état."""
    date: dt.date
    generated_at: datetime
    mine: List[RegistrationView]
    others: List[RegistrationView]
    counts: Dict[MealState, int]
