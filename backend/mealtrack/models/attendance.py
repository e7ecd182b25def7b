"""
Modèle SQLAlchemy pour les effectifs d'élèves du jour par (inscrit, groupe).

reinforcements_used est un total cumulé sur la journée, pas un delta.
Une seule ligne par (registrant_id, group_id, date) : les soumissions
suivantes la mettent à jour. La colonne version sert de verrou optimiste.
"""

import uuid
from sqlalchemy import JSON, Column, Date, DateTime, ForeignKey, Integer, String, UniqueConstraint, func
from sqlalchemy.dialects.postgresql import UUID

from mealtrack.database import Base


class AttendanceRecord(Base):
    __tablename__ = "student_attendance"
    __table_args__ = (
        UniqueConstraint("registrant_id", "group_id", "date", name="uq_attendance_registrant_group_date"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    registrant_id = Column(UUID(as_uuid=True), ForeignKey("registrants.id", ondelete="CASCADE"), nullable=False)
    registrant_name = Column(String(150), nullable=False)
    group_id = Column(UUID(as_uuid=True), ForeignKey("groups.id", ondelete="CASCADE"), nullable=False)
    group_name = Column(String(100), nullable=False)
    group_category = Column(String(20), nullable=False)
    date = Column(Date, nullable=False)

    students_present = Column(Integer, nullable=False, default=0)
    students_eating = Column(Integer, nullable=False, default=0)
    students_not_eating = Column(Integer, nullable=False, default=0)
    reinforcements_used = Column(Integer, nullable=False, default=0)

    recent_submission_keys = Column(JSON, nullable=False, default=list)  # Dernières clés d'idempotence appliquées
    version = Column(Integer, nullable=False, default=1)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    __mapper_args__ = {"version_id_col": version}
