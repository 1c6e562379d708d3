"""
Alert Evaluation Job - periodic caller of the clinical rule engine.

For every active patient (any vital reading within ACTIVE_PATIENT_WINDOW_DAYS):
1. Open a fresh session
2. Run ClinicalRuleEngine.evaluate
3. Persist the pending alerts as active alert records

One patient's failure is logged and reported in the run summary; it does not
stop the remaining patients.

Can be run as:
- FastAPI lifespan task (ALERT_EVALUATION_ENABLED=true)
- A single run_once() from an external scheduler
"""

import asyncio
import logging
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from carewatch.config import settings
from carewatch.core.logging import mask_identifier
from carewatch.models.vitals import VitalReading

from .alert_persistence import AlertPersistenceService
from .rule_engine import ClinicalRuleEngine
from .rule_registry import RuleSet
from .timeseries import utcnow

logger = logging.getLogger(__name__)


class AlertEvaluationJob:
    """Evaluates and persists alerts for all active patients"""

    def __init__(
        self,
        db_session_factory: Callable[[], Session],
        rule_set: Optional[RuleSet] = None,
        active_window_days: Optional[int] = None,
    ):
        """
        Args:
            db_session_factory: Callable that returns a database session
            rule_set: Rules to evaluate; defaults to the built-in rule set
            active_window_days: Recency window that makes a patient "active"
        """
        self.db_session_factory = db_session_factory
        self.rule_set = rule_set
        self.active_window_days = active_window_days or settings.ACTIVE_PATIENT_WINDOW_DAYS

    def get_active_patient_ids(self, db: Session, now: datetime) -> List[str]:
        cutoff = now - timedelta(days=self.active_window_days)
        stmt = (
            select(VitalReading.patient_id)
            .where(VitalReading.recorded_at >= cutoff)
            .distinct()
            .order_by(VitalReading.patient_id)
        )
        return [row[0] for row in db.execute(stmt).all() if row[0]]

    async def run_once(
        self,
        patient_ids: Optional[List[str]] = None,
        now: Optional[datetime] = None,
    ) -> Dict[str, Any]:
        """Run one evaluation pass and return a summary"""
        now = now or utcnow()

        if patient_ids is None:
            db = self.db_session_factory()
            try:
                patient_ids = self.get_active_patient_ids(db, now)
            finally:
                db.close()

        logger.info(f"Running alert evaluation for {len(patient_ids)} patients")

        alerts_created = 0
        failed_patients = []

        for patient_id in patient_ids:
            db = self.db_session_factory()
            try:
                engine = ClinicalRuleEngine(db, rule_set=self.rule_set)
                pending = await engine.evaluate(patient_id, now=now)
                created = AlertPersistenceService(db).persist_pending_alerts(pending, now=now)
                alerts_created += len(created)
            except Exception as e:
                logger.error(f"Error evaluating patient {mask_identifier(patient_id)}: {e}")
                failed_patients.append(patient_id)
            finally:
                db.close()

        summary = {
            "evaluated_at": now.isoformat(),
            "patients_evaluated": len(patient_ids) - len(failed_patients),
            "alerts_created": alerts_created,
            "failed_patients": failed_patients,
        }
        logger.info(
            f"Alert evaluation complete: {summary['patients_evaluated']} patients, "
            f"{alerts_created} alerts created, {len(failed_patients)} failures"
        )
        return summary


class AlertEvaluationCronJob:
    """
    Cron-style loop around AlertEvaluationJob.run_once.
    """

    def __init__(self, db_session_factory: Callable[[], Session], interval_minutes: Optional[int] = None):
        self.job = AlertEvaluationJob(db_session_factory)
        self.interval_minutes = interval_minutes or settings.ALERT_EVALUATION_INTERVAL_MINUTES
        self.running = False

    async def start(self):
        """Start the cron loop"""
        self.running = True
        logger.info(f"Alert evaluation cron starting (interval: {self.interval_minutes} min)")

        while self.running:
            try:
                await self.job.run_once()
            except Exception as e:
                logger.error(f"Error in alert evaluation cron: {e}")

            await asyncio.sleep(self.interval_minutes * 60)

    async def stop(self):
        """Stop the cron loop after the current pass"""
        self.running = False
        logger.info("Alert evaluation cron stopping...")
