"""
Alert Records
Durable form of the pending alerts produced by the clinical rule engine.

Lifecycle: active -> acknowledged | resolved | dismissed (terminal).
"""

import uuid

from sqlalchemy import Column, String, DateTime, JSON, Text, Index, text
from sqlalchemy.sql import func
from carewatch.database import Base


class Alert(Base):
    __tablename__ = "alerts"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    patient_id = Column(String, nullable=False, index=True)

    severity = Column(String, nullable=False)  # critical, elevated, informational
    status = Column(String, nullable=False, default="active")  # active, acknowledged, resolved, dismissed

    rule_id = Column(String(100), nullable=False)
    rule_name = Column(String(200), nullable=False)
    title = Column(String(300), nullable=False)
    description = Column(Text)
    vitals_snapshot = Column(JSON)

    resolved_at = Column(DateTime(timezone=True))
    resolved_by = Column(String)
    resolution_note = Column(Text)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        Index('idx_alerts_patient_rule_status', 'patient_id', 'rule_id', 'status'),
        # At most one active alert per (patient, rule); backs up the engine's dedup check
        Index(
            'uq_alerts_active_patient_rule',
            'patient_id', 'rule_id',
            unique=True,
            postgresql_where=text("status = 'active'"),
            sqlite_where=text("status = 'active'"),
        ),
    )
