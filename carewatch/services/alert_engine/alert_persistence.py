"""
Alert Persistence - turns pending alerts into alert records and manages their lifecycle.

This is the caller side of the rule engine: the engine never writes. Inserts
are upsert-or-skip so that a dedup race between overlapping evaluations still
leaves at most one active alert per (patient, rule).
"""

import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy import case, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from carewatch.core.logging import mask_identifier
from carewatch.models.alert_models import Alert

from .dedup import DeduplicationGate
from .exceptions import AlertNotFoundError, DataAccessError, InvalidAlertTransitionError
from .timeseries import utcnow
from .types import AlertSeverity, AlertStatus, PendingAlert

logger = logging.getLogger(__name__)


class AlertPersistenceService:
    """Stores pending alerts and applies clinician status changes"""

    def __init__(self, db: Session):
        self.db = db
        self.gate = DeduplicationGate(db)

    def persist_pending_alerts(
        self,
        pending_alerts: List[PendingAlert],
        now: Optional[datetime] = None,
    ) -> List[Alert]:
        """
        Insert each pending alert as an active alert record.

        Alerts that would duplicate an existing active alert for the same
        patient and rule are skipped.

        Returns:
            The alert records actually created
        """
        now = now or utcnow()
        created = []

        for pending in pending_alerts:
            if self.gate.has_active_alert(pending.patient_id, pending.rule_id):
                continue

            record = Alert(
                patient_id=pending.patient_id,
                severity=pending.severity.value,
                status=AlertStatus.ACTIVE.value,
                rule_id=pending.rule_id,
                rule_name=pending.rule_name,
                title=pending.title,
                description=pending.description,
                vitals_snapshot=pending.evidence,
                created_at=now,
                updated_at=now,
            )

            try:
                self.db.add(record)
                self.db.commit()
            except IntegrityError:
                self.db.rollback()
                logger.info(
                    f"Skipped duplicate active alert for rule {pending.rule_id}, "
                    f"patient {mask_identifier(pending.patient_id)}"
                )
                continue
            except SQLAlchemyError as e:
                self.db.rollback()
                logger.error(f"Error creating alert record: {e}")
                raise DataAccessError(f"Failed to persist alert for rule {pending.rule_id}") from e

            self.db.refresh(record)
            created.append(record)

        if created:
            logger.info(f"Persisted {len(created)}/{len(pending_alerts)} pending alerts")
        return created

    def transition_alert(
        self,
        alert_id: str,
        status: AlertStatus,
        resolved_by: Optional[str] = None,
        resolution_note: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> Alert:
        """
        Move an active alert to a terminal status.

        Raises:
            AlertNotFoundError: no alert with this id
            InvalidAlertTransitionError: alert is not active, or target status is not terminal
        """
        status = AlertStatus(status)
        if status not in AlertStatus.terminal():
            raise InvalidAlertTransitionError(
                f"status must be one of: {', '.join(s.value for s in AlertStatus.terminal())}"
            )

        alert = self.db.get(Alert, alert_id)
        if alert is None:
            raise AlertNotFoundError(f"Alert {alert_id} not found")

        if alert.status != AlertStatus.ACTIVE.value:
            raise InvalidAlertTransitionError(
                f"Alert {alert_id} is already {alert.status}; only active alerts can change status"
            )

        now = now or utcnow()
        alert.status = status.value
        alert.updated_at = now
        if status is AlertStatus.RESOLVED:
            alert.resolved_at = now
            alert.resolved_by = resolved_by
        if resolution_note:
            alert.resolution_note = resolution_note

        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Error updating alert: {e}")
            raise DataAccessError(f"Failed to update alert {alert_id}") from e

        self.db.refresh(alert)
        logger.info(f"Alert {mask_identifier(alert_id)} moved to {status.value}")
        return alert

    def list_alerts(
        self,
        status: AlertStatus = AlertStatus.ACTIVE,
        patient_id: Optional[str] = None,
        limit: int = 100,
    ) -> List[Alert]:
        """Alerts in a status, most severe first, then newest first"""
        severity_rank = case(
            {s.value: s.rank for s in AlertSeverity},
            value=Alert.severity,
            else_=len(AlertSeverity) + 1,
        )
        stmt = select(Alert).where(Alert.status == AlertStatus(status).value)
        if patient_id:
            stmt = stmt.where(Alert.patient_id == patient_id)
        stmt = stmt.order_by(severity_rank, Alert.created_at.desc()).limit(limit)

        try:
            return list(self.db.execute(stmt).scalars().all())
        except SQLAlchemyError as e:
            logger.error(f"Error fetching alerts: {e}")
            raise DataAccessError("Failed to read alerts") from e
