"""
Frontière bibliothèque de MealTrack.

Chaque opération publique renvoie un OperationResult étiqueté au lieu de
lever : l'appelant (interface, router HTTP, tâche planifiée) affiche un
message déterministe à partir de error_code / message / details.
"""

import logging
from functools import wraps

from mealtrack.exceptions import BaseApplicationError
from mealtrack.schemas.result import OperationResult
from mealtrack.services import quota_service, reconciliation_service, registration_service, status_service

logger = logging.getLogger(__name__)


def as_result(func):
    """Exécute l'opération et convertit son issue en OperationResult."""
    @wraps(func)
    def wrapper(*args, **kwargs) -> OperationResult:
        try:
            return OperationResult.ok(func(*args, **kwargs))
        except BaseApplicationError as exc:
            logger.info("%s refusé : %s (%s)", func.__name__, exc.message, exc.error_code)
            return OperationResult.fail(exc)
        except Exception as exc:
            logger.error("Exception non gérée dans %s : %s", func.__name__, exc, exc_info=True)
            return OperationResult(
                success=False,
                error_code="INTERNAL_ERROR",
                message="Une erreur interne est survenue.",
                details={"error_type": type(exc).__name__},
            )
    return wrapper


# --- Cœur ---

derive_status = as_result(status_service.derive_status)
allocate = as_result(quota_service.allocate)
delete_one = as_result(reconciliation_service.delete_one)
delete_all_for_registrant = as_result(reconciliation_service.delete_all_for_registrant)
delete_all = as_result(reconciliation_service.delete_all)

# --- Opérations complémentaires ---

submit_attendance = as_result(quota_service.submit_attendance)
get_attendance = as_result(quota_service.get_attendance)
clear_attendance = as_result(reconciliation_service.clear_attendance)
register_for_meal = as_result(registration_service.register_for_meal)
start_eating = as_result(registration_service.start_eating)
get_board = as_result(registration_service.get_board)
