"""
Schémas Pydantic pour le catalogue des groupes.
"""

import uuid
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator


class GroupCategory(str, Enum):
    PRESCHOOL = "PRESCHOOL"
    PRIMARY = "PRIMARY"
    SECONDARY = "SECONDARY"


CATEGORY_DISPLAY_NAMES = {
    GroupCategory.PRESCHOOL: "Preescolar",
    GroupCategory.PRIMARY: "Primaria",
    GroupCategory.SECONDARY: "Secundaria",
}


def get_category_display_name(category: Optional[str]) -> str:
    """Libellé affichable d'une catégorie ; « Sin categoría » si inconnue."""
    try:
        return CATEGORY_DISPLAY_NAMES[GroupCategory(category)]
    except ValueError:
        return "Sin categoría"


class GroupCreate(BaseModel):
    name: str
    category: GroupCategory
    max_reinforcements: int = Field(default=0, ge=0)
    eating_duration_minutes: Optional[int] = Field(default=None, gt=0)
    description: Optional[str] = None

    @field_validator("name")
    @classmethod
    def name_not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Le nom du groupe ne peut pas être vide.")
        return v.strip()


class GroupUpdate(BaseModel):
    name: Optional[str] = None
    category: Optional[GroupCategory] = None
    max_reinforcements: Optional[int] = Field(default=None, ge=0)
    eating_duration_minutes: Optional[int] = Field(default=None, gt=0)
    description: Optional[str] = None

    @field_validator("name", "category", "max_reinforcements")
    @classmethod
    def not_null(cls, v):
        # Champs NOT NULL : absents = inchangés, null explicite refusé
        if v is None:
            raise ValueError("Ce champ ne peut pas être null.")
        return v

    @field_validator("name")
    @classmethod
    def name_not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Le nom du groupe ne peut pas être vide.")
        return v.strip()


class GroupResponse(BaseModel):
    id: uuid.UUID
    name: str
    category: GroupCategory
    category_display: str = ""
    max_reinforcements: int
    eating_duration_minutes: Optional[int]
    description: Optional[str]
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}
