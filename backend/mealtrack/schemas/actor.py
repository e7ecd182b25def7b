"""
Identité de l'acteur à l'origine d'une opération.
L'authentification est externe : seuls l'identifiant et le rôle sont transmis.
"""

import uuid
from enum import Enum

from pydantic import BaseModel


class Role(str, Enum):
    TEACHER = "TEACHER"
    ADMIN = "ADMIN"


class Actor(BaseModel):
    id: uuid.UUID
    role: Role = Role.TEACHER

    @property
    def is_admin(self) -> bool:
        return self.role is Role.ADMIN
