"""
Inscriptions au repas : création, début du repas et tableau du jour.
"""

import uuid
import logging
from datetime import datetime
from typing import Optional

from mealtrack.exceptions import (
    DuplicateRegistrationError,
    MealStatusError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from mealtrack.schemas.actor import Actor
from mealtrack.schemas.registration import BoardResponse, RegistrationResponse
from mealtrack.services import status_service
from mealtrack.store.base import RecordStore

logger = logging.getLogger(__name__)


def register_for_meal(
    store: RecordStore,
    actor: Actor,
    group_name: str,
    now: Optional[datetime] = None,
) -> RegistrationResponse:
    """
    Inscrit l'acteur au repas du jour pour un groupe.

    Lève NotFoundError si le groupe n'existe pas dans le catalogue et
    DuplicateRegistrationError si l'acteur est déjà inscrit pour ce groupe aujourd'hui.
    """
    now = now or datetime.now()
    catalog = status_service.groups_by_name(store.get_all_groups())
    if group_name not in catalog:
        raise NotFoundError(f"Groupe '{group_name}' introuvable.")

    already = any(
        r.registrant_id == actor.id and r.group == group_name
        for r in store.get_today_registrations()
    )
    if already:
        raise DuplicateRegistrationError(f"Déjà inscrit pour le groupe '{group_name}' aujourd'hui.")

    registrant = store.get_registrant(actor.id)
    with store.unit_of_work():
        registration = store.create_registration({
            "registrant_id": actor.id,
            "registrant_name": registrant.name,
            "registrant_code": registrant.personal_code,
            "group": group_name,
            "date": store.today,
            "registered_at": now,
            "status": "registered",
        })

    logger.info("Inscription de %s au repas (groupe %s)", registrant.name, group_name)
    return RegistrationResponse.model_validate(registration)


def start_eating(
    store: RecordStore,
    registration_id: uuid.UUID,
    actor: Actor,
    now: Optional[datetime] = None,
) -> RegistrationResponse:
    """
    Marque le début du repas (entered_at), une seule fois.

    Lève MealStatusError si le repas a déjà commencé et ValidationError si
    `now` précède l'heure d'inscription.
    """
    now = now or datetime.now()
    registration = store.get_registration(registration_id)
    if not actor.is_admin and registration.registrant_id != actor.id:
        raise PermissionDeniedError("Vous ne pouvez modifier que vos propres inscriptions.")
    if registration.entered_at is not None:
        raise MealStatusError("Le repas a déjà commencé pour cette inscription.")
    if now < registration.registered_at:
        raise ValidationError(
            "L'heure d'entrée ne peut pas précéder l'heure d'inscription.",
            details={"registered_at": registration.registered_at.isoformat()},
        )

    with store.unit_of_work():
        registration = store.update_registration(registration_id, {"entered_at": now, "status": "eating"})

    logger.info("Début du repas : inscription %s (%s)", registration_id, registration.group)
    return RegistrationResponse.model_validate(registration)


def get_board(store: RecordStore, viewer: Optional[Actor] = None, now: Optional[datetime] = None) -> BoardResponse:
    """Charge les inscriptions du jour et le catalogue, puis construit le tableau."""
    now = now or datetime.now()
    return status_service.build_board(
        store.get_today_registrations(),
        store.get_all_groups(),
        now,
        viewer,
    )
