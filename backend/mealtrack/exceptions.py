"""
Exceptions métier de MealTrack.

Chaque erreur porte un error_code stable : la couche HTTP et la frontière
bibliothèque (mealtrack.engine) s'en servent pour produire un résultat
étiqueté au lieu de laisser remonter l'exception.
"""

from typing import Any, Dict, Optional


class BaseApplicationError(Exception):
    """Exception de base de l'application."""

    default_code = "APPLICATION_ERROR"

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.error_code = error_code or self.default_code
        self.details = details or {}
        super().__init__(self.message)


class ValidationError(BaseApplicationError):
    """Donnée invalide : triplet d'effectifs incohérent, quantité négative."""

    default_code = "VALIDATION_ERROR"


class QuotaExceededError(BaseApplicationError):
    """Le delta de renforts demandé dépasse le quota restant du groupe."""

    default_code = "QUOTA_EXCEEDED"

    def __init__(self, available: int, requested: Optional[int] = None):
        self.available = available
        details: Dict[str, Any] = {"available": available}
        if requested is not None:
            details["requested"] = requested
        super().__init__(
            f"Quota de renforts dépassé : {available} renfort(s) disponible(s).",
            details=details,
        )


class PermissionDeniedError(BaseApplicationError):
    """Un enseignant tente d'agir sur l'enregistrement d'un autre."""

    default_code = "PERMISSION_DENIED"


class NotFoundError(BaseApplicationError):
    """Inscription, groupe ou enregistrement de présence introuvable."""

    default_code = "NOT_FOUND"


class DuplicateRegistrationError(BaseApplicationError):
    default_code = "DUPLICATE_REGISTRATION"


class MealStatusError(BaseApplicationError):
    """Transition de repas invalide (repas déjà commencé)."""

    default_code = "MEAL_STATUS_INVALID"


class PersistenceError(BaseApplicationError):
    """Échec de la couche de stockage (connexion, timeout, contrainte)."""

    default_code = "PERSISTENCE_ERROR"


class ConcurrencyError(PersistenceError):
    """Mise à jour concurrente détectée par le compteur de version."""

    default_code = "CONCURRENT_UPDATE"
