"""
Threshold Evaluator.

Standard rules compare the latest reading against each bound in declared
order and stop at the first match. Rules listed in the threshold override
table compare a delta (latest - earliest in the lookback) instead.
"""

import logging
from typing import List, Mapping, Optional

from carewatch.core.logging import mask_identifier

from .dedup import DeduplicationGate
from .rule_registry import DailyDeltaOverride
from .timeseries import TimeSeriesAccessor, as_utc
from .types import PendingAlert, ThresholdBound, ThresholdRule

logger = logging.getLogger(__name__)


def _first_matching_bound(rule: ThresholdRule, observed: float) -> Optional[ThresholdBound]:
    for bound in rule.bounds:
        if bound.operator.holds(observed, bound.value):
            return bound
    return None


def _fmt(value: float) -> str:
    return f"{value:g}"


def evaluate_threshold_rule(
    patient_id: str,
    rule: ThresholdRule,
    accessor: TimeSeriesAccessor,
) -> Optional[PendingAlert]:
    """Evaluate one absolute-value threshold rule"""
    latest = accessor.latest(patient_id, rule.vital_type)
    if latest is None:
        logger.debug(f"No {rule.vital_type.value} readings for {mask_identifier(patient_id)}; skipping {rule.id}")
        return None

    bound = _first_matching_bound(rule, latest.value)
    if bound is None:
        return None

    return PendingAlert(
        patient_id=patient_id,
        severity=bound.severity,
        rule_id=rule.id,
        rule_name=rule.name,
        title=bound.label,
        description=(
            f"{rule.name}: reading {_fmt(latest.value)} {latest.unit} {bound.operator.verb} "
            f"threshold of {_fmt(bound.value)} {latest.unit}."
        ),
        evidence={
            "vital_type": rule.vital_type.value,
            "value": latest.value,
            "unit": latest.unit,
            "recorded_at": as_utc(latest.recorded_at).isoformat(),
            "operator": bound.operator.value,
            "threshold": bound.value,
        },
    )


def evaluate_daily_delta_rule(
    patient_id: str,
    rule: ThresholdRule,
    override: DailyDeltaOverride,
    accessor: TimeSeriesAccessor,
) -> Optional[PendingAlert]:
    """Evaluate a threshold rule whose bound applies to the change over the lookback"""
    latest = accessor.latest(patient_id, rule.vital_type)
    baseline = accessor.earliest_since(patient_id, rule.vital_type, override.lookback_days)
    if latest is None or baseline is None:
        logger.debug(f"No {rule.vital_type.value} baseline for {mask_identifier(patient_id)}; skipping {rule.id}")
        return None

    delta = latest.value - baseline.value
    bound = _first_matching_bound(rule, delta)
    if bound is None:
        return None

    return PendingAlert(
        patient_id=patient_id,
        severity=bound.severity,
        rule_id=rule.id,
        rule_name=rule.name,
        title=bound.label,
        description=(
            f"Weight increased by {delta:.1f} {latest.unit} in the last day "
            f"(threshold: {_fmt(bound.value)} {latest.unit})."
        ),
        evidence={
            "vital_type": rule.vital_type.value,
            "current_value": latest.value,
            "current_recorded_at": as_utc(latest.recorded_at).isoformat(),
            "previous_value": baseline.value,
            "previous_recorded_at": as_utc(baseline.recorded_at).isoformat(),
            "delta": round(delta, 2),
            "unit": latest.unit,
            "lookback_days": override.lookback_days,
        },
    )


async def evaluate_threshold_rules(
    patient_id: str,
    rules: List[ThresholdRule],
    overrides: Mapping[str, DailyDeltaOverride],
    accessor: TimeSeriesAccessor,
    gate: DeduplicationGate,
) -> List[PendingAlert]:
    """Threshold family: at most one pending alert per rule"""
    pending = []

    for rule in rules:
        if gate.has_active_alert(patient_id, rule.id):
            continue

        override = overrides.get(rule.id)
        if override is not None:
            alert = evaluate_daily_delta_rule(patient_id, rule, override, accessor)
        else:
            alert = evaluate_threshold_rule(patient_id, rule, accessor)

        if alert:
            pending.append(alert)

    return pending
