"""
Router pour les inscriptions au repas du jour.
Inscription, début du repas, tableau des états et suppressions en cascade.
"""

import uuid

from fastapi import APIRouter, Depends, Response

from mealtrack import engine
from mealtrack.error_handler import respond
from mealtrack.routers.deps import get_actor, get_store, require_admin
from mealtrack.schemas.actor import Actor
from mealtrack.schemas.reconciliation import DeletionReport
from mealtrack.schemas.registration import BoardResponse, RegistrationCreate, RegistrationResponse
from mealtrack.schemas.result import OperationResult
from mealtrack.store.sql_store import SqlRecordStore

router = APIRouter(prefix="/api/v1/registrations", tags=["Inscriptions"])


@router.get(
    "/today",
    response_model=OperationResult[BoardResponse],
    summary="Tableau des inscriptions du jour",
)
def get_today_board(
    response: Response,
    actor: Actor = Depends(get_actor),
    store: SqlRecordStore = Depends(get_store),
):
    """
    Retourne les inscriptions du jour annotées de leur état dérivé
    (registered, eating, finished, unknown) et du temps restant.
    Un enseignant voit ses inscriptions séparées de celles des autres.
    """
    return respond(engine.get_board(store, actor), response)


@router.post(
    "",
    response_model=OperationResult[RegistrationResponse],
    summary="S'inscrire au repas du jour",
)
def register(
    data: RegistrationCreate,
    response: Response,
    actor: Actor = Depends(get_actor),
    store: SqlRecordStore = Depends(get_store),
):
    """404 si le groupe est inconnu, 409 si déjà inscrit pour ce groupe aujourd'hui."""
    return respond(engine.register_for_meal(store, actor, data.group), response, success_status=201)


@router.post(
    "/{registration_id}/start",
    response_model=OperationResult[RegistrationResponse],
    summary="Commencer le repas",
)
def start_eating(
    registration_id: uuid.UUID,
    response: Response,
    actor: Actor = Depends(get_actor),
    store: SqlRecordStore = Depends(get_store),
):
    return respond(engine.start_eating(store, registration_id, actor), response)


@router.delete(
    "/mine",
    response_model=OperationResult[DeletionReport],
    summary="Supprimer toutes mes inscriptions du jour",
)
def delete_my_registrations(
    response: Response,
    actor: Actor = Depends(get_actor),
    store: SqlRecordStore = Depends(get_store),
):
    """
    Supprime toutes les inscriptions du jour de l'acteur et leurs présences liées.
    Best effort : le rapport indique les suppressions, les cibles ignorées et les échecs.
    """
    return respond(engine.delete_all_for_registrant(store, actor.id, actor), response)


@router.delete(
    "/{registration_id}",
    response_model=OperationResult[DeletionReport],
    summary="Supprimer une inscription",
)
def delete_registration(
    registration_id: uuid.UUID,
    response: Response,
    actor: Actor = Depends(get_actor),
    store: SqlRecordStore = Depends(get_store),
):
    """
    Supprime une inscription et les présences (inscrit, groupe, date) associées.
    Un enseignant ne peut supprimer que ses propres inscriptions (403 sinon).
    """
    return respond(engine.delete_one(store, registration_id, actor), response)


@router.delete(
    "",
    response_model=OperationResult[DeletionReport],
    summary="Supprimer toutes les inscriptions du jour (administrateurs)",
)
def delete_all_registrations(
    response: Response,
    actor: Actor = Depends(require_admin),
    store: SqlRecordStore = Depends(get_store),
):
    return respond(engine.delete_all(store, actor), response)
