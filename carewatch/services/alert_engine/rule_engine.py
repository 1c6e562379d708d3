"""
Clinical Rule Engine - evaluates every rule family for one patient.

Families:
1. Threshold: latest reading vs. ordered bounds (weight gain uses a 1-day delta)
2. Trend: N consecutive strictly rising/falling readings
3. Composite: minimum number of sub-conditions holding together

The engine reads, it never writes: pending alerts are returned to the caller
for persistence. Any data-access failure fails the whole evaluation; there
are no partial results.
"""

import asyncio
import logging
import time
from datetime import datetime
from typing import List, Optional

from sqlalchemy.orm import Session

from carewatch.core.logging import mask_identifier

from .composite_evaluator import evaluate_composite_rules
from .dedup import DeduplicationGate
from .exceptions import AlertEngineError
from .rule_registry import DEFAULT_RULE_SET, RuleSet, validate_rule_set
from .threshold_evaluator import evaluate_threshold_rules
from .timeseries import TimeSeriesAccessor, utcnow
from .trend_evaluator import evaluate_trend_rules
from .types import PendingAlert

logger = logging.getLogger(__name__)


class ClinicalRuleEngine:
    """Engine for generating pending alerts from a patient's stored history"""

    def __init__(self, db: Session, rule_set: Optional[RuleSet] = None):
        self.db = db
        self.rule_set = validate_rule_set(rule_set) if rule_set is not None else DEFAULT_RULE_SET

    async def evaluate(self, patient_id: str, now: Optional[datetime] = None) -> List[PendingAlert]:
        """
        Evaluate all rules for a patient.

        Args:
            patient_id: Patient identifier
            now: Evaluation instant; defaults to the current UTC time. All
                lookbacks in this call are measured from it.

        Returns:
            Pending alerts from all families. Order across families is not
            meaningful.

        Raises:
            DataAccessError: if any store read fails
        """
        now = now or utcnow()
        started = time.monotonic()
        accessor = TimeSeriesAccessor(self.db, now=now)
        gate = DeduplicationGate(self.db)
        rules = self.rule_set

        try:
            families = await asyncio.gather(
                evaluate_threshold_rules(
                    patient_id, list(rules.threshold_rules), rules.threshold_overrides, accessor, gate
                ),
                evaluate_trend_rules(patient_id, list(rules.trend_rules), accessor, gate),
                evaluate_composite_rules(
                    patient_id, list(rules.composite_rules), rules.composite_overrides, accessor, gate
                ),
            )
        except AlertEngineError as e:
            logger.error(f"Rule evaluation failed for patient {mask_identifier(patient_id)}: {e}")
            raise

        pending = [alert for family in families for alert in family]

        logger.info(
            f"Evaluated {len(rules.all_rules())} rules for patient {mask_identifier(patient_id)}: "
            f"{len(pending)} pending alerts in {(time.monotonic() - started) * 1000:.0f}ms"
        )
        return pending
