"""
Résultat étiqueté renvoyé par la frontière bibliothèque (mealtrack.engine).

Même enveloppe que les réponses HTTP : success + data, ou success=False +
error_code / message / details.
"""

from typing import Any, Dict, Generic, Optional, TypeVar

from pydantic import BaseModel

from mealtrack.exceptions import BaseApplicationError

T = TypeVar("T")


class OperationResult(BaseModel, Generic[T]):
    success: bool
    data: Optional[T] = None
    error_code: Optional[str] = None
    message: Optional[str] = None
    details: Dict[str, Any] = {}

    @classmethod
    def ok(cls, data: Any = None, message: str = "Opération réussie.") -> "OperationResult":
        return cls(success=True, data=data, message=message)

    @classmethod
    def fail(cls, error: BaseApplicationError) -> "OperationResult":
        return cls(
            success=False,
            error_code=error.error_code,
            message=error.message,
            details=error.details,
        )
