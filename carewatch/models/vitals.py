"""
Vital sign readings ingested from devices and manual entry.
Rows are immutable facts: ingestion inserts, nothing here updates or deletes.
"""

from sqlalchemy import Column, Integer, String, Float, DateTime, Index
from sqlalchemy.sql import func
from carewatch.database import Base


class VitalReading(Base):
    __tablename__ = "vitals"

    id = Column(Integer, primary_key=True, autoincrement=True)
    patient_id = Column(String, nullable=False, index=True)

    vital_type = Column(String, nullable=False)  # blood_pressure_systolic, heart_rate, weight, ...
    value = Column(Float, nullable=False)
    unit = Column(String(20), nullable=False)
    recorded_at = Column(DateTime(timezone=True), nullable=False)
    source = Column(String(100), default="manual")

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        Index('idx_vitals_patient_type_recorded', 'patient_id', 'vital_type', 'recorded_at'),
    )
