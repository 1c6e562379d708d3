"""
Deduplication Gate - at most one active alert per (patient, rule).

The check is advisory: two overlapping evaluations can both see "no active
alert". The partial unique index on alerts and AlertPersistenceService catch
that race at write time.
"""

import logging

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from carewatch.core.logging import mask_identifier
from carewatch.models.alert_models import Alert

from .exceptions import DataAccessError
from .types import AlertStatus

logger = logging.getLogger(__name__)


class DeduplicationGate:
    """Answers whether a rule is already represented by an active alert"""

    def __init__(self, db: Session):
        self.db = db

    def has_active_alert(self, patient_id: str, rule_id: str) -> bool:
        stmt = (
            select(Alert.id)
            .where(
                Alert.patient_id == patient_id,
                Alert.rule_id == rule_id,
                Alert.status == AlertStatus.ACTIVE.value,
            )
            .limit(1)
        )
        try:
            exists = self.db.execute(stmt).first() is not None
        except SQLAlchemyError as e:
            logger.error(f"Error checking active alerts for rule {rule_id}: {e}")
            raise DataAccessError(f"Failed to read active alerts for rule {rule_id}") from e

        if exists:
            logger.info(
                f"Suppressing rule {rule_id} for patient {mask_identifier(patient_id)}: active alert exists"
            )
        return exists
