"""
Dépendances FastAPI partagées : acteur courant et RecordStore de la requête.
L'identité arrive dans les en-têtes X-Actor-Id / X-Actor-Role, posés par la
passerelle d'authentification.
"""

import uuid

from fastapi import Depends, Header
from sqlalchemy.orm import Session

from mealtrack.database import get_db
from mealtrack.exceptions import PermissionDeniedError
from mealtrack.schemas.actor import Actor, Role
from mealtrack.store.sql_store import SqlRecordStore


def get_actor(
    x_actor_id: uuid.UUID = Header(...),
    x_actor_role: Role = Header(Role.TEACHER),
) -> Actor:
    return Actor(id=x_actor_id, role=x_actor_role)


def require_admin(actor: Actor = Depends(get_actor)) -> Actor:
    if not actor.is_admin:
        raise PermissionDeniedError("Opération réservée aux administrateurs.")
    return actor


def get_store(db: Session = Depends(get_db)) -> SqlRecordStore:
    return SqlRecordStore(db)
