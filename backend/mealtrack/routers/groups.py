"""
Router pour le catalogue des groupes.
Lecture ouverte à tous, création et modification réservées aux administrateurs.
"""

import uuid
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from mealtrack.database import get_db
from mealtrack.routers.deps import require_admin
from mealtrack.schemas.group import GroupCreate, GroupResponse, GroupUpdate
from mealtrack.services import group_service

router = APIRouter(prefix="/api/v1/groups", tags=["Groupes"])


@router.post(
    "",
    response_model=GroupResponse,
    status_code=201,
    summary="Créer un groupe",
    dependencies=[Depends(require_admin)],
)
def create_group(data: GroupCreate, db: Session = Depends(get_db)):
    """Crée un groupe avec un nom unique, sa catégorie et son quota de renforts."""
    try:
        return group_service.create_group(db, data)
    except ValueError as e:
        raise HTTPException(status_code=409, detail=str(e))


@router.get("", response_model=List[GroupResponse], summary="Lister les groupes")
def list_groups(db: Session = Depends(get_db)):
    return group_service.get_groups(db)


@router.get("/{group_id}", response_model=GroupResponse, summary="Détail d'un groupe")
def get_group(group_id: uuid.UUID, db: Session = Depends(get_db)):
    group = group_service.get_group(db, group_id)
    if group is None:
        raise HTTPException(status_code=404, detail="Groupe introuvable.")
    return group


@router.put(
    "/{group_id}",
    response_model=GroupResponse,
    summary="Modifier un groupe",
    dependencies=[Depends(require_admin)],
)
def update_group(group_id: uuid.UUID, data: GroupUpdate, db: Session = Depends(get_db)):
    try:
        result = group_service.update_group(db, group_id, data)
    except ValueError as e:
        raise HTTPException(status_code=409, detail=str(e))
    if result is None:
        raise HTTPException(status_code=404, detail="Groupe introuvable.")
    return result
