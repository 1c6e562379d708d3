"""
Pytest configuration for the clinical rule engine tests.

Every test gets a fresh in-memory SQLite database built from the ORM
metadata, plus small factories for vitals, medication logs and alerts.
"""

import os
import sys
from datetime import datetime, timezone

# Must be set BEFORE importing carewatch.database
os.environ["DATABASE_URL"] = "sqlite://"

# Add parent directory to path to import app modules
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from carewatch.database import Base
from carewatch.models import Alert, Medication, MedicationLog, VitalReading

PATIENT_ID = "patient-7f3c2a91"

DEFAULT_UNITS = {
    "blood_pressure_systolic": "mmHg",
    "blood_pressure_diastolic": "mmHg",
    "heart_rate": "bpm",
    "blood_glucose": "mg/dL",
    "weight": "lbs",
    "oxygen_saturation": "%",
    "temperature": "F",
}


@pytest.fixture
def now():
    """Fixed evaluation instant"""
    return datetime(2026, 3, 10, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def patient_id():
    return PATIENT_ID


@pytest.fixture(scope="function")
def db_engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def session_factory(db_engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=db_engine)


@pytest.fixture(scope="function")
def db_session(session_factory):
    """Create a fresh database session for each test"""
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def add_vital(db_session, now):
    """Insert a vital reading; `at` defaults to the fixed evaluation instant"""
    def _add(vital_type, value, at=None, patient_id=PATIENT_ID, unit=None):
        reading = VitalReading(
            patient_id=patient_id,
            vital_type=getattr(vital_type, "value", vital_type),
            value=value,
            unit=unit or DEFAULT_UNITS[getattr(vital_type, "value", vital_type)],
            recorded_at=at or now,
        )
        db_session.add(reading)
        db_session.commit()
        return reading
    return _add


@pytest.fixture
def add_dose_logs(db_session, now):
    """Insert `count` medication log entries with the given status"""
    def _add(count, at=None, status="missed", patient_id=PATIENT_ID):
        medication = Medication(
            patient_id=patient_id,
            medication_name="Lisinopril",
            dosage="10mg",
            frequency="daily",
        )
        db_session.add(medication)
        db_session.flush()
        logs = []
        for _ in range(count):
            log = MedicationLog(
                medication_id=medication.id,
                patient_id=patient_id,
                scheduled_at=at or now,
                status=status,
            )
            db_session.add(log)
            logs.append(log)
        db_session.commit()
        return logs
    return _add


@pytest.fixture
def add_alert(db_session, now):
    """Insert an alert record for a rule"""
    def _add(rule_id, status="active", patient_id=PATIENT_ID, severity="elevated"):
        alert = Alert(
            patient_id=patient_id,
            severity=severity,
            status=status,
            rule_id=rule_id,
            rule_name=rule_id,
            title=f"Existing {rule_id}",
            description="Existing alert",
            vitals_snapshot={},
            created_at=now,
            updated_at=now,
        )
        db_session.add(alert)
        db_session.commit()
        return alert
    return _add


def alerts_for(pending, rule_id):
    return [alert for alert in pending if alert.rule_id == rule_id]


@pytest.fixture
def select_rule():
    """Filter pending alerts down to one rule id"""
    return alerts_for
