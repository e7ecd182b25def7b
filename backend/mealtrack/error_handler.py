"""
Correspondance entre les codes d'erreur métier et les statuts HTTP.

Les routes adossées à mealtrack.engine renvoient toujours l'enveloppe
OperationResult ; seul le statut HTTP dépend de error_code.
"""

import logging

from fastapi import Request, Response
from fastapi.responses import JSONResponse

from mealtrack.exceptions import BaseApplicationError
from mealtrack.schemas.result import OperationResult

logger = logging.getLogger(__name__)

ERROR_CODE_STATUS_MAP = {
    "VALIDATION_ERROR": 400,
    "MEAL_STATUS_INVALID": 400,
    "PERMISSION_DENIED": 403,
    "NOT_FOUND": 404,
    "QUOTA_EXCEEDED": 409,
    "DUPLICATE_REGISTRATION": 409,
    "CONCURRENT_UPDATE": 409,
    "PERSISTENCE_ERROR": 503,
    "INTERNAL_ERROR": 500,
}


def status_for(error_code: str) -> int:
    return ERROR_CODE_STATUS_MAP.get(error_code, 400)


def respond(result: OperationResult, response: Response, success_status: int = 200) -> OperationResult:
    """Fixe le statut HTTP d'après le résultat et renvoie l'enveloppe telle quelle."""
    response.status_code = success_status if result.success else status_for(result.error_code)
    return result


async def application_error_handler(request: Request, exc: BaseApplicationError) -> JSONResponse:
    """Erreur métier levée hors de la frontière engine (dépendances, routes CRUD)."""
    return JSONResponse(
        status_code=status_for(exc.error_code),
        content=OperationResult.fail(exc).model_dump(mode="json"),
    )
