"""
Modèle SQLAlchemy pour les inscriptions au repas du jour.

Le champ status est un instantané qui peut être périmé : l'état affiché
est toujours recalculé par status_service.derive_status.
"""

import uuid
from sqlalchemy import Column, Date, DateTime, ForeignKey, String, func
from sqlalchemy.dialects.postgresql import UUID

from mealtrack.database import Base


class MealRegistration(Base):
    __tablename__ = "meal_registrations"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    registrant_id = Column(UUID(as_uuid=True), ForeignKey("registrants.id", ondelete="CASCADE"), nullable=False)
    registrant_name = Column(String(150), nullable=False)   # Dénormalisé pour l'affichage
    registrant_code = Column(String(20), nullable=False)
    group = Column(String(100), nullable=False)             # Nom du groupe (dénormalisé, sans FK)
    date = Column(Date, nullable=False, index=True)
    registered_at = Column(DateTime, nullable=False)
    entered_at = Column(DateTime, nullable=True)            # Début du repas
    status = Column(String(20), default="registered")       # registered, eating
    created_at = Column(DateTime, server_default=func.now())
