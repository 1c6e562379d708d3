"""
Trend Evaluator - strict monotonic runs over the most recent readings.
"""

import logging
from typing import List, Optional, Sequence

from carewatch.core.logging import mask_identifier
from carewatch.models.vitals import VitalReading

from .dedup import DeduplicationGate
from .timeseries import TimeSeriesAccessor, as_utc
from .types import PendingAlert, TrendDirection, TrendRule

logger = logging.getLogger(__name__)


def is_strictly_monotonic(values: Sequence[float], direction: TrendDirection) -> bool:
    """
    True when every step moves in `direction`. A tie breaks the run.

    Values must be in chronological order.
    """
    for previous, current in zip(values, values[1:]):
        if direction is TrendDirection.RISING and not current > previous:
            return False
        if direction is TrendDirection.FALLING and not current < previous:
            return False
    return True


def evaluate_trend_rule(
    patient_id: str,
    rule: TrendRule,
    accessor: TimeSeriesAccessor,
) -> Optional[PendingAlert]:
    readings = accessor.recent(patient_id, rule.vital_type, rule.consecutive_count)

    if len(readings) < rule.consecutive_count:
        logger.debug(
            f"Only {len(readings)}/{rule.consecutive_count} {rule.vital_type.value} readings "
            f"for {mask_identifier(patient_id)}; skipping {rule.id}"
        )
        return None

    # Accessor returns newest first
    chronological: List[VitalReading] = list(reversed(readings))
    if not is_strictly_monotonic([r.value for r in chronological], rule.direction):
        return None

    first, last = chronological[0], chronological[-1]

    return PendingAlert(
        patient_id=patient_id,
        severity=rule.severity,
        rule_id=rule.id,
        rule_name=rule.name,
        title=f"{rule.name}: {rule.consecutive_count} consecutive {rule.direction.value} readings",
        description=(
            f"{rule.vital_type.display_name} has been {rule.direction.value} over the last "
            f"{rule.consecutive_count} readings ({first.value:g} {first.unit} -> {last.value:g} {last.unit})."
        ),
        evidence={
            "vital_type": rule.vital_type.value,
            "direction": rule.direction.value,
            "first_value": first.value,
            "last_value": last.value,
            "readings": [
                {
                    "value": r.value,
                    "unit": r.unit,
                    "recorded_at": as_utc(r.recorded_at).isoformat(),
                }
                for r in chronological
            ],
        },
    )


async def evaluate_trend_rules(
    patient_id: str,
    rules: List[TrendRule],
    accessor: TimeSeriesAccessor,
    gate: DeduplicationGate,
) -> List[PendingAlert]:
    pending = []

    for rule in rules:
        if gate.has_active_alert(patient_id, rule.id):
            continue

        alert = evaluate_trend_rule(patient_id, rule, accessor)
        if alert:
            pending.append(alert)

    return pending
