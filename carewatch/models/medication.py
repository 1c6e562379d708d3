from sqlalchemy import Column, String, DateTime, Integer, Boolean, ForeignKey, Index
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from carewatch.database import Base


class Medication(Base):
    __tablename__ = "medications"

    id = Column(Integer, primary_key=True, autoincrement=True)
    patient_id = Column(String, nullable=False, index=True)

    medication_name = Column(String, nullable=False)
    dosage = Column(String, nullable=False)
    frequency = Column(String, nullable=False)

    is_active = Column(Boolean, default=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    logs = relationship("MedicationLog", back_populates="medication")


class MedicationLog(Base):
    """One scheduled dose and what happened to it"""
    __tablename__ = "medication_logs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    medication_id = Column(Integer, ForeignKey("medications.id"), nullable=False)
    patient_id = Column(String, nullable=False, index=True)

    scheduled_at = Column(DateTime(timezone=True), nullable=False)
    taken_at = Column(DateTime(timezone=True), nullable=True)
    status = Column(String, nullable=False)  # taken, missed, late, skipped

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    medication = relationship("Medication", back_populates="logs")

    __table_args__ = (
        Index('idx_medication_logs_patient_scheduled_status', 'patient_id', 'scheduled_at', 'status'),
    )
