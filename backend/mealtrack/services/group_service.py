"""
Service métier pour le catalogue des groupes.
"""

import uuid
import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from mealtrack.models.group import Group
from mealtrack.schemas.group import GroupCreate, GroupResponse, GroupUpdate, get_category_display_name

logger = logging.getLogger(__name__)


def create_group(db: Session, data: GroupCreate) -> GroupResponse:
    """
    Crée un nouveau groupe.
    Lève une ValueError si le nom existe déjà.
    """
    group = Group(
        name=data.name,
        category=data.category.value,
        max_reinforcements=data.max_reinforcements,
        eating_duration_minutes=data.eating_duration_minutes,
        description=data.description,
    )
    db.add(group)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ValueError(f"Un groupe avec le nom '{data.name}' existe déjà.")
    db.refresh(group)
    logger.info("Groupe créé : %s (%s, %d renfort(s))", group.name, group.category, group.max_reinforcements)
    return _to_response(group)


def get_groups(db: Session) -> list[GroupResponse]:
    """Retourne tous les groupes, triés par nom."""
    groups = db.execute(select(Group).order_by(Group.name)).scalars().all()
    return [_to_response(g) for g in groups]


def get_group(db: Session, group_id: uuid.UUID) -> Optional[GroupResponse]:
    group = db.get(Group, group_id)
    if group is None:
        return None
    return _to_response(group)


def update_group(db: Session, group_id: uuid.UUID, data: GroupUpdate) -> Optional[GroupResponse]:
    """
    Met à jour les champs fournis d'un groupe.

    Renommer un groupe ne touche pas les inscriptions existantes : elles
    gardent l'ancien nom et apparaissent en état « unknown ».
    """
    group = db.get(Group, group_id)
    if group is None:
        return None

    update_data = data.model_dump(exclude_unset=True)
    if "category" in update_data and update_data["category"] is not None:
        update_data["category"] = update_data["category"].value
    for field, value in update_data.items():
        setattr(group, field, value)

    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ValueError("Un groupe avec ce nom existe déjà.")
    db.refresh(group)
    logger.info("Groupe %s mis à jour : %s", group_id, ", ".join(update_data) or "aucun champ")
    return _to_response(group)


def _to_response(group: Group) -> GroupResponse:
    return GroupResponse(
        id=group.id,
        name=group.name,
        category=group.category,
        category_display=get_category_display_name(group.category),
        max_reinforcements=group.max_reinforcements,
        eating_duration_minutes=group.eating_duration_minutes,
        description=group.description,
        created_at=group.created_at,
    )
