"""
Quota de renforts par groupe et effectifs d'élèves du jour.

allocate() est pur : il valide le triplet d'effectifs et le delta de renforts
contre le quota du groupe et renvoie le nouveau cumul à persister.
submit_attendance() est le chemin d'enregistrement complet autour de allocate().

Règles :
- présents ≥ 0, mangeant ≤ présents, mangeant + ne mangeant pas = présents
- le cumul de renforts ne dépasse jamais group.max_reinforcements
- une soumission refusée n'écrit rien
"""

import uuid
import logging
import datetime as dt
from typing import NamedTuple, Optional

from mealtrack.exceptions import QuotaExceededError, ValidationError
from mealtrack.schemas.actor import Actor
from mealtrack.schemas.attendance import AttendanceLookup, AttendanceResponse, AttendanceSubmit
from mealtrack.store.base import RecordStore

logger = logging.getLogger(__name__)

# Nombre de clés de soumission conservées par enregistrement
RECENT_SUBMISSION_KEYS = 20


class Headcount(NamedTuple):
    present: int
    eating: int
    not_eating: int


def complete_headcount(present: int, eating: int, not_eating: Optional[int] = None) -> Headcount:
    """Complète le triplet : ne mangeant pas = présents - mangeant lorsqu'il n'est pas fourni."""
    if not_eating is None:
        not_eating = present - eating
    return Headcount(present, eating, not_eating)


def validate_headcount(headcount: Headcount) -> None:
    """Lève ValidationError en nommant la contrainte violée."""
    present, eating, not_eating = headcount
    if present < 0 or eating < 0 or not_eating < 0:
        raise ValidationError(
            "Les effectifs ne peuvent pas être négatifs.",
            details={"constraint": "non_negative"},
        )
    if eating > present:
        raise ValidationError(
            "Le nombre d'élèves ayant mangé ne peut pas dépasser le nombre de présents.",
            details={"constraint": "eating_le_present", "present": present, "eating": eating},
        )
    if eating + not_eating != present:
        raise ValidationError(
            "Mangeant + ne mangeant pas doit être égal au nombre de présents.",
            details={"constraint": "sum_equals_present", "present": present,
                     "eating": eating, "not_eating": not_eating},
        )


def available_reinforcements(group, existing_used: int) -> int:
    """Renforts restants, jamais négatif même si le cumul stocké dépasse le quota."""
    return max(group.max_reinforcements - existing_used, 0)


def allocate(group, existing_used: int, requested_delta: int, headcount: Optional[Headcount] = None) -> int:
    """
    Valide une consommation de renforts et renvoie le nouveau cumul.

    Lève ValidationError si une quantité est négative (ou si le triplet
    d'effectifs fourni est incohérent), QuotaExceededError(available) si le
    delta dépasse ce qui reste. Aucun effet de bord.
    """
    if headcount is not None:
        validate_headcount(headcount)
    if requested_delta < 0:
        raise ValidationError(
            "Le nombre de renforts ne peut pas être négatif.",
            details={"constraint": "non_negative_delta"},
        )
    if existing_used < 0:
        raise ValidationError(
            "Le cumul de renforts existant ne peut pas être négatif.",
            details={"constraint": "non_negative_existing"},
        )

    available = available_reinforcements(group, existing_used)
    if requested_delta > available:
        raise QuotaExceededError(available=available, requested=requested_delta)
    return existing_used + requested_delta


def get_attendance(
    store: RecordStore,
    registrant_id: uuid.UUID,
    group_id: uuid.UUID,
    day: Optional[dt.date] = None,
) -> AttendanceLookup:
    """Retourne l'enregistrement du jour (ou None) et les renforts encore disponibles."""
    group = store.get_group(group_id)
    record = store.get_attendance_record(registrant_id, group_id, day or store.today)
    used = record.reinforcements_used if record else 0
    return AttendanceLookup(
        record=AttendanceResponse.model_validate(record) if record else None,
        max_reinforcements=group.max_reinforcements,
        reinforcements_used=used,
        available=available_reinforcements(group, used),
    )


def submit_attendance(
    store: RecordStore,
    actor: Actor,
    group_id: uuid.UUID,
    data: AttendanceSubmit,
) -> AttendanceResponse:
    """
    Enregistre les effectifs du jour d'un enseignant pour un groupe.

    Étapes :
    1. Compléter et valider le triplet d'effectifs (avant toute lecture)
    2. Charger le groupe et l'éventuel enregistrement du jour
    3. Si submission_key figure parmi les clés récentes de l'enregistrement → renvoyer tel quel
    4. allocate() sur le cumul existant
    5. Créer l'enregistrement ou le mettre à jour (cumul de renforts additionné)

    Seules les RECENT_SUBMISSION_KEYS dernières clés sont retenues : le renvoi
    d'une clé plus ancienne est compté comme une nouvelle soumission.
    """
    headcount = complete_headcount(data.students_present, data.students_eating, data.students_not_eating)
    validate_headcount(headcount)

    group = store.get_group(group_id)
    record = store.get_attendance_record(actor.id, group_id, store.today)

    recent_keys = list(record.recent_submission_keys or []) if record is not None else []
    if data.submission_key and data.submission_key in recent_keys:
        logger.info(
            "Soumission %s déjà appliquée (inscrit %s, groupe %s), ignorée",
            data.submission_key, actor.id, group.name,
        )
        return AttendanceResponse.model_validate(record)

    existing_used = record.reinforcements_used if record else 0
    new_total = allocate(group, existing_used, data.reinforcements_delta, headcount)
    if data.submission_key:
        recent_keys = (recent_keys + [data.submission_key])[-RECENT_SUBMISSION_KEYS:]

    fields = {
        "students_present": headcount.present,
        "students_eating": headcount.eating,
        "students_not_eating": headcount.not_eating,
        "reinforcements_used": new_total,
        "recent_submission_keys": recent_keys,
    }

    with store.unit_of_work():
        if record is None:
            registrant = store.get_registrant(actor.id)
            record = store.create_attendance_record({
                **fields,
                "registrant_id": actor.id,
                "registrant_name": registrant.name,
                "group_id": group.id,
                "group_name": group.name,
                "group_category": group.category,
                "date": store.today,
            })
        else:
            record = store.update_attendance_record(record.id, fields)

    logger.info(
        "Effectifs %s enregistrés par %s : %d présents, %d mangeant, renforts %d/%d",
        group.name, actor.id, headcount.present, headcount.eating,
        new_total, group.max_reinforcements,
    )
    return AttendanceResponse.model_validate(record)
