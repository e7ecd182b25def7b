"""
Modèle SQLAlchemy pour les inscrits au comedor (enseignants et administrateurs).
L'authentification est gérée hors de ce service.
"""

import uuid
from sqlalchemy import Boolean, Column, DateTime, String, func
from sqlalchemy.dialects.postgresql import UUID

from mealtrack.database import Base


class Registrant(Base):
    __tablename__ = "registrants"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(150), nullable=False)
    email = Column(String(255), unique=True, nullable=True)
    personal_code = Column(String(20), unique=True, nullable=False)
    role = Column(String(20), nullable=False, default="TEACHER")  # TEACHER, ADMIN
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())
