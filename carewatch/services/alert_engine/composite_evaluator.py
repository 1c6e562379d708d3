"""
Composite Evaluator - counts independently evaluated sub-conditions.

Each condition resolves to a ConditionResult (it holds) or None (it doesn't,
or there isn't enough data to tell). Vital conditions compare the delta
between the latest reading and the earliest reading within the condition's
lookback. Conditions listed in the composite override table are resolved by
their override instead; today that is only the missed-medication count.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional

from carewatch.core.logging import mask_identifier

from .dedup import DeduplicationGate
from .rule_registry import MissedMedicationOverride
from .timeseries import TimeSeriesAccessor, as_utc
from .types import CompositeCondition, CompositeRule, PendingAlert

logger = logging.getLogger(__name__)


@dataclass
class ConditionResult:
    """A sub-condition that holds, with what to show for it"""
    key: str
    label: str
    evidence: Dict[str, Any]


def evaluate_vital_delta_condition(
    patient_id: str,
    condition: CompositeCondition,
    accessor: TimeSeriesAccessor,
) -> Optional[ConditionResult]:
    latest = accessor.latest(patient_id, condition.vital_type)
    baseline = accessor.earliest_since(patient_id, condition.vital_type, condition.lookback_days)
    if latest is None or baseline is None:
        logger.debug(
            f"No {condition.vital_type.value} baseline within {condition.lookback_days}d "
            f"for {mask_identifier(patient_id)}"
        )
        return None

    delta = latest.value - baseline.value
    if not condition.operator.holds(delta, condition.value):
        return None

    return ConditionResult(
        key=condition.key,
        label=condition.label,
        evidence={
            "current": latest.value,
            "baseline": baseline.value,
            "delta": round(delta, 2),
            "unit": latest.unit,
            "current_recorded_at": as_utc(latest.recorded_at).isoformat(),
            "baseline_recorded_at": as_utc(baseline.recorded_at).isoformat(),
            "lookback_days": condition.lookback_days,
        },
    )


def evaluate_missed_medication_condition(
    patient_id: str,
    condition: CompositeCondition,
    override: MissedMedicationOverride,
    accessor: TimeSeriesAccessor,
) -> Optional[ConditionResult]:
    missed = accessor.missed_medication_count(patient_id, override.lookback_days)
    if missed < override.min_missed:
        return None

    return ConditionResult(
        key=condition.key,
        label=condition.label,
        evidence={
            "missed_doses": missed,
            "lookback_days": override.lookback_days,
        },
    )


def evaluate_composite_rule(
    patient_id: str,
    rule: CompositeRule,
    overrides: Mapping[int, MissedMedicationOverride],
    accessor: TimeSeriesAccessor,
) -> Optional[PendingAlert]:
    met: List[ConditionResult] = []

    for index, condition in enumerate(rule.conditions):
        override = overrides.get(index)
        if override is not None:
            result = evaluate_missed_medication_condition(patient_id, condition, override, accessor)
        else:
            result = evaluate_vital_delta_condition(patient_id, condition, accessor)
        if result:
            met.append(result)

    if len(met) < rule.min_conditions_met:
        return None

    return PendingAlert(
        patient_id=patient_id,
        severity=rule.severity,
        rule_id=rule.id,
        rule_name=rule.name,
        title=f"{rule.name} ({len(met)}/{len(rule.conditions)} conditions met)",
        description=f"Triggered conditions: {'; '.join(r.label for r in met)}.",
        evidence={r.key: r.evidence for r in met},
    )


async def evaluate_composite_rules(
    patient_id: str,
    rules: List[CompositeRule],
    overrides: Mapping[str, Mapping[int, MissedMedicationOverride]],
    accessor: TimeSeriesAccessor,
    gate: DeduplicationGate,
) -> List[PendingAlert]:
    pending = []

    for rule in rules:
        if gate.has_active_alert(patient_id, rule.id):
            continue

        alert = evaluate_composite_rule(patient_id, rule, overrides.get(rule.id, {}), accessor)
        if alert:
            pending.append(alert)

    return pending
