"""
Alert persistence tests: insert-or-skip and the clinician status lifecycle.
"""

from unittest.mock import patch

import pytest
from sqlalchemy import select

from carewatch.models import Alert
from carewatch.services.alert_engine import (
    AlertNotFoundError,
    AlertPersistenceService,
    AlertSeverity,
    AlertStatus,
    DeduplicationGate,
    InvalidAlertTransitionError,
    PendingAlert,
)

SYSTOLIC_RULE_ID = "threshold-bp-systolic"


@pytest.fixture
def pending_alert(patient_id):
    return PendingAlert(
        patient_id=patient_id,
        severity=AlertSeverity.CRITICAL,
        rule_id=SYSTOLIC_RULE_ID,
        rule_name="Blood Pressure (Systolic) Threshold",
        title="Hypertensive crisis",
        description="Blood Pressure (Systolic) Threshold: reading 185 mmHg exceeds threshold of 180 mmHg.",
        evidence={"vital_type": "blood_pressure_systolic", "value": 185, "unit": "mmHg"},
    )


def active_alerts(db, rule_id):
    stmt = select(Alert).where(Alert.rule_id == rule_id, Alert.status == "active")
    return list(db.execute(stmt).scalars().all())


class TestPersistPendingAlerts:

    def test_creates_active_record(self, db_session, pending_alert, now):
        created = AlertPersistenceService(db_session).persist_pending_alerts([pending_alert], now=now)

        assert len(created) == 1
        record = created[0]
        assert record.id
        assert record.status == "active"
        assert record.severity == "critical"
        assert record.title == "Hypertensive crisis"
        assert record.vitals_snapshot["value"] == 185

    def test_skips_when_active_alert_exists(self, db_session, add_alert, pending_alert, now):
        add_alert(SYSTOLIC_RULE_ID)

        created = AlertPersistenceService(db_session).persist_pending_alerts([pending_alert], now=now)

        assert created == []
        assert len(active_alerts(db_session, SYSTOLIC_RULE_ID)) == 1

    def test_unique_index_catches_dedup_race(self, db_session, add_alert, pending_alert, now):
        add_alert(SYSTOLIC_RULE_ID)

        with patch.object(DeduplicationGate, "has_active_alert", return_value=False):
            created = AlertPersistenceService(db_session).persist_pending_alerts([pending_alert], now=now)

        assert created == []
        assert len(active_alerts(db_session, SYSTOLIC_RULE_ID)) == 1

    def test_resolved_alert_does_not_block_new_one(self, db_session, add_alert, pending_alert, now):
        add_alert(SYSTOLIC_RULE_ID, status="resolved")

        created = AlertPersistenceService(db_session).persist_pending_alerts([pending_alert], now=now)

        assert len(created) == 1


class TestTransitions:

    def test_resolve_records_who_and_when(self, db_session, add_alert, now):
        alert = add_alert(SYSTOLIC_RULE_ID)

        updated = AlertPersistenceService(db_session).transition_alert(
            alert.id,
            AlertStatus.RESOLVED,
            resolved_by="dr-okafor",
            resolution_note="Medication adjusted",
            now=now,
        )

        assert updated.status == "resolved"
        assert updated.resolved_by == "dr-okafor"
        assert updated.resolved_at is not None
        assert updated.resolution_note == "Medication adjusted"

    def test_acknowledge_leaves_resolution_fields_empty(self, db_session, add_alert, now):
        alert = add_alert(SYSTOLIC_RULE_ID)

        updated = AlertPersistenceService(db_session).transition_alert(alert.id, AlertStatus.ACKNOWLEDGED, now=now)

        assert updated.status == "acknowledged"
        assert updated.resolved_at is None
        assert updated.resolved_by is None

    def test_only_active_alerts_transition(self, db_session, add_alert, now):
        alert = add_alert(SYSTOLIC_RULE_ID, status="dismissed")

        with pytest.raises(InvalidAlertTransitionError, match="already dismissed"):
            AlertPersistenceService(db_session).transition_alert(alert.id, AlertStatus.ACKNOWLEDGED, now=now)

    def test_target_must_be_terminal(self, db_session, add_alert, now):
        alert = add_alert(SYSTOLIC_RULE_ID)

        with pytest.raises(InvalidAlertTransitionError):
            AlertPersistenceService(db_session).transition_alert(alert.id, AlertStatus.ACTIVE, now=now)

    def test_unknown_alert(self, db_session):
        with pytest.raises(AlertNotFoundError):
            AlertPersistenceService(db_session).transition_alert("missing-id", AlertStatus.RESOLVED)


class TestListAlerts:

    def test_most_severe_first(self, db_session, add_alert):
        add_alert("trend-weight-falling", severity="informational")
        add_alert("composite-chf-exacerbation", severity="critical")
        add_alert("trend-bp-systolic-rising", severity="elevated")

        alerts = AlertPersistenceService(db_session).list_alerts()

        assert [a.severity for a in alerts] == ["critical", "elevated", "informational"]

    def test_filters_by_status_and_patient(self, db_session, add_alert, patient_id):
        add_alert(SYSTOLIC_RULE_ID)
        add_alert("threshold-heart-rate", status="resolved")
        add_alert(SYSTOLIC_RULE_ID, patient_id="patient-other")

        service = AlertPersistenceService(db_session)

        assert [a.rule_id for a in service.list_alerts(patient_id=patient_id)] == [SYSTOLIC_RULE_ID]
        assert [a.rule_id for a in service.list_alerts(status=AlertStatus.RESOLVED)] == ["threshold-heart-rate"]
