"""
Modèle SQLAlchemy pour les groupes (grades) servis au comedor.
"""

import uuid
from sqlalchemy import Column, DateTime, Integer, String, Text, func
from sqlalchemy.dialects.postgresql import UUID

from mealtrack.database import Base


class Group(Base):
    __tablename__ = "groups"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(100), unique=True, nullable=False)
    category = Column(String(20), nullable=False)  # PRESCHOOL, PRIMARY, SECONDARY
    max_reinforcements = Column(Integer, nullable=False, default=0)
    eating_duration_minutes = Column(Integer, nullable=True)  # NULL → durée par défaut (settings)
    description = Column(Text, nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())
