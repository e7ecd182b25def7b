"""
Dérivation de l'état d'une inscription au repas.

Fonctions pures : l'état est une vue calculée à partir des horodatages et
de la durée de repas du groupe, jamais écrite en base. Elles peuvent être
appelées à chaque tick (une fois par seconde) avec un `now` qui change.
"""

import math
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Sequence

from mealtrack.config import settings
from mealtrack.schemas.actor import Actor
from mealtrack.schemas.group import get_category_display_name
from mealtrack.schemas.registration import (
    BoardResponse,
    MealState,
    RegistrationResponse,
    RegistrationView,
    StatusView,
)


def eating_duration_minutes(group) -> int:
    """Durée de repas du groupe, ou la durée par défaut si le groupe n'en définit pas."""
    duration = getattr(group, "eating_duration_minutes", None)
    if duration is None:
        return settings.DEFAULT_EATING_DURATION_MINUTES
    return duration


def _naive_local(value: datetime) -> datetime:
    """Ramène un datetime aware en heure locale naïve (les colonnes DateTime sont naïves)."""
    if value.tzinfo is not None:
        return value.astimezone().replace(tzinfo=None)
    return value


def derive_status(registration, group, now: datetime) -> StatusView:
    """
    Calcule l'état d'une inscription à l'instant `now`.

    - pas de entered_at         → registered, sans temps restant
    - groupe non résolu (None)  → unknown
    - now - entered_at < durée  → eating, minutes restantes arrondies à l'inférieur
    - sinon                     → finished, 0 minute restante

    Un `now` antérieur à entered_at (horloges décalées) est traité comme le
    début du repas : eating avec la durée complète.
    """
    if registration.entered_at is None:
        return StatusView(state=MealState.REGISTERED)
    if group is None:
        return StatusView(state=MealState.UNKNOWN)

    duration = eating_duration_minutes(group)
    elapsed = (_naive_local(now) - _naive_local(registration.entered_at)).total_seconds() / 60
    elapsed = max(elapsed, 0.0)

    if elapsed < duration:
        remaining = max(math.floor(duration - elapsed), 0)
        return StatusView(state=MealState.EATING, remaining_minutes=remaining)
    return StatusView(state=MealState.FINISHED, remaining_minutes=0)


def groups_by_name(groups: Iterable) -> Dict[str, object]:
    """Index du catalogue par nom de groupe (les inscriptions ne stockent que le nom)."""
    return {g.name: g for g in groups}


def annotate(registrations: Sequence, groups: Iterable, now: datetime) -> List[RegistrationView]:
    """Annote chaque inscription avec son état dérivé, de la plus récente à la plus ancienne."""
    catalog = groups_by_name(groups)
    views = []
    for registration in registrations:
        group = catalog.get(registration.group)
        status = derive_status(registration, group, now)
        base = RegistrationResponse.model_validate(registration)
        views.append(
            RegistrationView(
                **base.model_dump(),
                state=status.state,
                remaining_minutes=status.remaining_minutes,
                category_display=get_category_display_name(group.category if group else None),
            )
        )
    views.sort(key=lambda v: v.registered_at, reverse=True)
    return views


def build_board(
    registrations: Sequence,
    groups: Iterable,
    now: datetime,
    viewer: Optional[Actor] = None,
) -> BoardResponse:
    """
    Construit le tableau du jour.

    Pour un enseignant, ses propres inscriptions sont séparées de celles des
    autres ; un administrateur (ou aucun spectateur) voit tout dans `others`.
    """
    views = annotate(registrations, groups, now)
    counts = {state: 0 for state in MealState}
    for view in views:
        counts[view.state] += 1

    if viewer is not None and not viewer.is_admin:
        mine = [v for v in views if v.registrant_id == viewer.id]
        others = [v for v in views if v.registrant_id != viewer.id]
    else:
        mine, others = [], views

    board_date = views[0].date if views else _naive_local(now).date()
    return BoardResponse(
        date=board_date,
        generated_at=now,
        mine=mine,
        others=others,
        counts=counts,
    )
