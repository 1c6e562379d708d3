"""
Time-Series Accessor - read-only patient-scoped queries over vitals and medication logs.

One accessor serves one evaluation. It is pinned to a single `now`: every
read ignores rows recorded after it, and repeated reads of the same query
return the memoized first answer so evaluators never see two different
"latest" readings within one pass.

Empty result sets are "no data" (None / [] / 0). Store failures and malformed
rows raise DataAccessError.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, List, Optional, Tuple, TypeVar

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from carewatch.core.logging import mask_identifier
from carewatch.models.medication import MedicationLog
from carewatch.models.vitals import VitalReading

from .exceptions import DataAccessError
from .types import MedicationStatus, VitalType

logger = logging.getLogger(__name__)

T = TypeVar("T")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Attach UTC to naive timestamps coming back from the store"""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class TimeSeriesAccessor:
    """Vitals and medication-log queries for one evaluation pass"""

    def __init__(self, db: Session, now: Optional[datetime] = None):
        self.db = db
        self.now = now or utcnow()
        self._latest: Dict[Tuple[str, str], Optional[VitalReading]] = {}
        self._earliest: Dict[Tuple[str, str, float], Optional[VitalReading]] = {}
        self._recent: Dict[Tuple[str, str, int], List[VitalReading]] = {}
        self._missed: Dict[Tuple[str, float], int] = {}

    def latest(self, patient_id: str, vital_type: VitalType) -> Optional[VitalReading]:
        """Most recent reading of a vital type, or None"""
        key = (patient_id, vital_type.value)
        if key not in self._latest:
            stmt = (
                select(VitalReading)
                .where(
                    VitalReading.patient_id == patient_id,
                    VitalReading.vital_type == vital_type.value,
                    VitalReading.recorded_at <= self.now,
                )
                .order_by(VitalReading.recorded_at.desc())
                .limit(1)
            )
            reading = self._run(f"latest {vital_type.value}", lambda: self.db.execute(stmt).scalars().first())
            self._latest[key] = self._checked(reading)
        return self._latest[key]

    def recent(self, patient_id: str, vital_type: VitalType, limit: int) -> List[VitalReading]:
        """Up to `limit` most recent readings, newest first"""
        key = (patient_id, vital_type.value, limit)
        if key not in self._recent:
            stmt = (
                select(VitalReading)
                .where(
                    VitalReading.patient_id == patient_id,
                    VitalReading.vital_type == vital_type.value,
                    VitalReading.recorded_at <= self.now,
                )
                .order_by(VitalReading.recorded_at.desc())
                .limit(limit)
            )
            readings = self._run(f"recent {vital_type.value}", lambda: list(self.db.execute(stmt).scalars().all()))
            self._recent[key] = [self._checked(r) for r in readings]
        return self._recent[key]

    def earliest_since(self, patient_id: str, vital_type: VitalType, days: float) -> Optional[VitalReading]:
        """
        Oldest reading at or after now - days. This is the baseline for delta
        rules; None means there is no baseline, not "no change".
        """
        key = (patient_id, vital_type.value, days)
        if key not in self._earliest:
            cutoff = self.now - timedelta(days=days)
            stmt = (
                select(VitalReading)
                .where(
                    VitalReading.patient_id == patient_id,
                    VitalReading.vital_type == vital_type.value,
                    VitalReading.recorded_at >= cutoff,
                    VitalReading.recorded_at <= self.now,
                )
                .order_by(VitalReading.recorded_at.asc())
                .limit(1)
            )
            reading = self._run(f"baseline {vital_type.value}", lambda: self.db.execute(stmt).scalars().first())
            self._earliest[key] = self._checked(reading)
        return self._earliest[key]

    def missed_medication_count(self, patient_id: str, days: float) -> int:
        """Medication log entries with status=missed scheduled in the last `days`"""
        key = (patient_id, days)
        if key not in self._missed:
            cutoff = self.now - timedelta(days=days)
            stmt = (
                select(func.count(MedicationLog.id))
                .where(
                    MedicationLog.patient_id == patient_id,
                    MedicationLog.status == MedicationStatus.MISSED.value,
                    MedicationLog.scheduled_at >= cutoff,
                    MedicationLog.scheduled_at <= self.now,
                )
            )
            count = self._run("missed medication count", lambda: self.db.execute(stmt).scalar())
            self._missed[key] = int(count or 0)
        return self._missed[key]

    def _run(self, description: str, query: Callable[[], T]) -> T:
        try:
            return query()
        except SQLAlchemyError as e:
            logger.error(f"Vitals store query failed ({description}): {e}")
            raise DataAccessError(f"Failed to read {description}") from e

    @staticmethod
    def _checked(reading: Optional[VitalReading]) -> Optional[VitalReading]:
        if reading is None:
            return None
        if reading.value is None or reading.recorded_at is None:
            raise DataAccessError(
                f"Malformed vital reading {reading.id} for patient {mask_identifier(reading.patient_id)}"
            )
        return reading
