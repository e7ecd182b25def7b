"""
Router pour les effectifs d'élèves et les renforts du jour.
"""

import uuid
import datetime as dt
from typing import Optional

from fastapi import APIRouter, Depends, Response

from mealtrack import engine
from mealtrack.error_handler import respond
from mealtrack.routers.deps import get_actor, get_store, require_admin
from mealtrack.schemas.actor import Actor
from mealtrack.schemas.attendance import AttendanceLookup, AttendanceResponse, AttendanceSubmit
from mealtrack.schemas.reconciliation import AttendanceClearReport
from mealtrack.schemas.result import OperationResult
from mealtrack.store.sql_store import SqlRecordStore

router = APIRouter(prefix="/api/v1/attendance", tags=["Présences"])


@router.get(
    "/{group_id}",
    response_model=OperationResult[AttendanceLookup],
    summary="Effectifs du jour et renforts disponibles",
)
def get_attendance(
    group_id: uuid.UUID,
    response: Response,
    actor: Actor = Depends(get_actor),
    store: SqlRecordStore = Depends(get_store),
):
    return respond(engine.get_attendance(store, actor.id, group_id), response)


@router.post(
    "/{group_id}",
    response_model=OperationResult[AttendanceResponse],
    summary="Enregistrer les effectifs du jour",
)
def submit_attendance(
    group_id: uuid.UUID,
    data: AttendanceSubmit,
    response: Response,
    actor: Actor = Depends(get_actor),
    store: SqlRecordStore = Depends(get_store),
):
    """
    Crée ou met à jour l'enregistrement du jour pour (acteur, groupe).

    - students_not_eating est calculé si absent
    - reinforcements_delta s'ajoute au cumul du jour (409 si le quota est dépassé,
      details.available indique ce qui reste)
    - une submission_key déjà appliquée ne recompte pas les renforts
    """
    return respond(engine.submit_attendance(store, actor, group_id, data), response)


@router.delete(
    "",
    response_model=OperationResult[AttendanceClearReport],
    summary="Vider les présences d'une journée (administrateurs)",
)
def clear_attendance(
    response: Response,
    day: Optional[dt.date] = None,
    actor: Actor = Depends(require_admin),
    store: SqlRecordStore = Depends(get_store),
):
    return respond(engine.clear_attendance(store, actor, day), response)
