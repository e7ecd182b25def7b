"""
Suppression en cascade des inscriptions au repas et des présences liées.

Pour chaque inscription supprimée :
  1. Résoudre le nom de groupe de l'inscription en group_id via le catalogue
  2. Si résolu : supprimer les présences (registrant_id, group_id, date)
  3. Supprimer l'inscription
Les deux étapes d'une même inscription forment une unité de travail
(store.unit_of_work) : un échec annule la suppression des présences.

Les variantes en masse sont « best effort » : une inscription qui échoue est
journalisée et comptée, les suivantes sont traitées quand même.
"""

import uuid
import logging
import datetime as dt
from typing import Dict, NamedTuple, Optional, Sequence

from mealtrack.exceptions import NotFoundError, PermissionDeniedError, PersistenceError
from mealtrack.schemas.actor import Actor, Role
from mealtrack.schemas.reconciliation import AttendanceClearReport, DeletionReport
from mealtrack.services.status_service import groups_by_name
from mealtrack.store.base import RecordStore

logger = logging.getLogger(__name__)


def _authorize(actor: Actor, registration) -> None:
    """Un enseignant ne peut agir que sur ses propres inscriptions."""
    if actor.role is Role.ADMIN:
        return
    if actor.role is Role.TEACHER:
        if registration.registrant_id != actor.id:
            raise PermissionDeniedError("Vous ne pouvez supprimer que vos propres inscriptions.")
        return
    raise PermissionDeniedError(f"Rôle non pris en charge : {actor.role}.")


def _require_admin(actor: Optional[Actor]) -> None:
    if actor is not None and actor.role is not Role.ADMIN:
        raise PermissionDeniedError("Opération réservée aux administrateurs.")


class _Target(NamedTuple):
    """Copie des colonnes utiles d'une inscription, lue avant toute validation."""
    id: uuid.UUID
    registrant_id: uuid.UUID
    group: str
    date: dt.date


def _target(registration) -> _Target:
    return _Target(registration.id, registration.registrant_id, registration.group, registration.date)


def _group_ids(store: RecordStore) -> Dict[str, uuid.UUID]:
    return {name: group.id for name, group in groups_by_name(store.get_all_groups()).items()}


def _cascade(store: RecordStore, target: _Target, group_ids: Dict[str, uuid.UUID]) -> int:
    """Supprime les présences liées puis l'inscription ; retourne le nombre de présences supprimées."""
    deleted_attendance = 0
    group_id = group_ids.get(target.group)
    if group_id is not None:
        deleted_attendance = store.delete_attendance_by_registrant_group_date(
            target.registrant_id, group_id, target.date,
        )
    else:
        logger.warning(
            "Groupe '%s' introuvable pour l'inscription %s : présences non supprimées",
            target.group, target.id,
        )
    store.delete_registration(target.id)
    return deleted_attendance


def _cascade_many(store: RecordStore, registrations: Sequence) -> DeletionReport:
    report = DeletionReport()
    if not registrations:
        return report

    # Chaque commit expire les objets ORM chargés : on travaille sur des copies
    targets = [_target(r) for r in registrations]
    group_ids = _group_ids(store)

    for target in targets:
        try:
            with store.unit_of_work():
                deleted_attendance = _cascade(store, target, group_ids)
        except NotFoundError as exc:
            report.skipped_count += 1
            logger.warning("Inscription %s déjà supprimée, ignorée : %s", target.id, exc.message)
            continue
        except PersistenceError as exc:
            report.failed_count += 1
            error_msg = f"Échec suppression inscription {target.id} : {exc.message}"
            report.errors.append(error_msg)
            logger.error(error_msg)
            continue

        report.deleted_registrations += 1
        report.deleted_attendance += deleted_attendance

    return report


def delete_one(store: RecordStore, registration_id: uuid.UUID, actor: Actor) -> DeletionReport:
    """
    Supprime une inscription et ses présences liées.

    Lève NotFoundError si l'inscription n'existe pas, PermissionDeniedError si
    un enseignant vise l'inscription d'un autre, PersistenceError si le
    stockage échoue (rien n'est alors supprimé).
    """
    registration = store.get_registration(registration_id)
    _authorize(actor, registration)
    target = _target(registration)
    registrant_name = registration.registrant_name

    group_ids = _group_ids(store)
    with store.unit_of_work():
        deleted_attendance = _cascade(store, target, group_ids)

    logger.info(
        "Inscription %s supprimée (%s, %s), %d présence(s) liée(s) supprimée(s)",
        registration_id, registrant_name, target.group, deleted_attendance,
    )
    return DeletionReport(deleted_registrations=1, deleted_attendance=deleted_attendance)


def delete_all_for_registrant(
    store: RecordStore,
    registrant_id: uuid.UUID,
    actor: Optional[Actor] = None,
) -> DeletionReport:
    """Supprime toutes les inscriptions du jour d'un inscrit (best effort)."""
    if actor is not None and actor.role is not Role.ADMIN and actor.id != registrant_id:
        raise PermissionDeniedError("Vous ne pouvez supprimer que vos propres inscriptions.")

    registrations = [r for r in store.get_today_registrations() if r.registrant_id == registrant_id]
    report = _cascade_many(store, registrations)

    logger.info(
        "Inscrit %s : %d/%d inscription(s) et %d présence(s) supprimées, %d ignorée(s), %d échec(s)",
        registrant_id, report.deleted_registrations, len(registrations),
        report.deleted_attendance, report.skipped_count, report.failed_count,
    )
    return report


def delete_all(store: RecordStore, actor: Optional[Actor] = None) -> DeletionReport:
    """Supprime toutes les inscriptions du jour actif (best effort, administrateurs)."""
    _require_admin(actor)

    registrations = list(store.get_today_registrations())
    report = _cascade_many(store, registrations)

    logger.info(
        "Suppression globale du %s : %d/%d inscription(s) et %d présence(s) supprimées, %d échec(s)",
        store.today, report.deleted_registrations, len(registrations),
        report.deleted_attendance, report.failed_count,
    )
    return report


def clear_attendance(store: RecordStore, actor: Actor, day: Optional[dt.date] = None) -> AttendanceClearReport:
    """Vide toutes les présences d'une journée (administrateurs uniquement)."""
    if actor.role is not Role.ADMIN:
        raise PermissionDeniedError("Opération réservée aux administrateurs.")

    target = day or store.today
    with store.unit_of_work():
        deleted = store.delete_attendance_for_date(target)

    logger.info("Présences du %s vidées : %d enregistrement(s)", target, deleted)
    return AttendanceClearReport(date=target, deleted_attendance=deleted)
