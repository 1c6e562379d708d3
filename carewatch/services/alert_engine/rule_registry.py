"""
Rule Registry - the configured rule set plus its rule-identity special cases.

Two rules are not evaluated the way their family normally is. Both are keyed
by rule id in the override tables below so they stay easy to find:

- threshold-weight-gain: the single bound is a 1-day weight delta.
- composite-med-nonadherence-bp: condition 0 is a missed-dose count from the
  medication logs (>= 2 in 3 days), not a vital delta.

validate_rule_set() runs when the engine is built and at application startup,
so a broken definition fails before any patient is evaluated.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Tuple

from .composite_rules import COMPOSITE_RULES, MED_NONADHERENCE_BP_RULE_ID
from .exceptions import RuleConfigurationError
from .threshold_rules import THRESHOLD_RULES, WEIGHT_GAIN_RULE_ID
from .trend_rules import TREND_RULES
from .types import ClinicalRule, CompositeRule, ThresholdRule, TrendRule

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DailyDeltaOverride:
    """Compare the bound against latest - earliest reading within `lookback_days`"""
    lookback_days: int = 1


@dataclass(frozen=True)
class MissedMedicationOverride:
    """Condition holds when missed doses in `lookback_days` reach `min_missed`"""
    lookback_days: int = 3
    min_missed: int = 2


# rule id -> override
THRESHOLD_OVERRIDES: Dict[str, DailyDeltaOverride] = {
    WEIGHT_GAIN_RULE_ID: DailyDeltaOverride(lookback_days=1),
}

# rule id -> {condition index -> override}
COMPOSITE_CONDITION_OVERRIDES: Dict[str, Dict[int, MissedMedicationOverride]] = {
    MED_NONADHERENCE_BP_RULE_ID: {
        0: MissedMedicationOverride(lookback_days=3, min_missed=2),
    },
}


@dataclass(frozen=True)
class RuleSet:
    """Everything the engine evaluates for a patient"""
    threshold_rules: Tuple[ThresholdRule, ...] = ()
    trend_rules: Tuple[TrendRule, ...] = ()
    composite_rules: Tuple[CompositeRule, ...] = ()
    threshold_overrides: Mapping[str, DailyDeltaOverride] = field(default_factory=dict)
    composite_overrides: Mapping[str, Mapping[int, MissedMedicationOverride]] = field(default_factory=dict)

    def all_rules(self) -> List[ClinicalRule]:
        return [*self.threshold_rules, *self.trend_rules, *self.composite_rules]

    def get_rule(self, rule_id: str) -> Optional[ClinicalRule]:
        for rule in self.all_rules():
            if rule.id == rule_id:
                return rule
        return None


def validate_rule_set(rule_set: RuleSet) -> RuleSet:
    """
    Check a rule set for definitions the evaluators cannot handle.

    Raises:
        RuleConfigurationError: on the first inconsistency found
    """
    seen = set()
    for rule in rule_set.all_rules():
        if rule.id in seen:
            raise RuleConfigurationError(f"Duplicate rule id: {rule.id}")
        seen.add(rule.id)

    threshold_ids = {r.id: r for r in rule_set.threshold_rules}
    composite_ids = {r.id: r for r in rule_set.composite_rules}

    for rule in rule_set.threshold_rules:
        if not rule.bounds:
            raise RuleConfigurationError(f"Threshold rule {rule.id} has no bounds")

    for rule_id, override in rule_set.threshold_overrides.items():
        rule = threshold_ids.get(rule_id)
        if rule is None:
            raise RuleConfigurationError(
                f"Threshold override references unknown threshold rule: {rule_id}"
            )
        if len(rule.bounds) != 1:
            raise RuleConfigurationError(
                f"Delta threshold rule {rule_id} must declare exactly one bound, found {len(rule.bounds)}"
            )
        if override.lookback_days < 1:
            raise RuleConfigurationError(f"Delta threshold rule {rule_id} needs a lookback of at least 1 day")

    for rule in rule_set.trend_rules:
        if rule.consecutive_count < 2:
            raise RuleConfigurationError(
                f"Trend rule {rule.id} needs at least 2 consecutive readings, got {rule.consecutive_count}"
            )

    for rule_id, overrides in rule_set.composite_overrides.items():
        rule = composite_ids.get(rule_id)
        if rule is None:
            raise RuleConfigurationError(
                f"Composite override references unknown composite rule: {rule_id}"
            )
        for index in overrides:
            if not 0 <= index < len(rule.conditions):
                raise RuleConfigurationError(
                    f"Composite override for {rule_id} targets missing condition index {index}"
                )

    for rule in rule_set.composite_rules:
        if not rule.conditions:
            raise RuleConfigurationError(f"Composite rule {rule.id} has no conditions")
        if not 1 <= rule.min_conditions_met <= len(rule.conditions):
            raise RuleConfigurationError(
                f"Composite rule {rule.id}: min_conditions_met={rule.min_conditions_met} "
                f"outside 1..{len(rule.conditions)}"
            )
        overrides = rule_set.composite_overrides.get(rule.id, {})
        for index, condition in enumerate(rule.conditions):
            if index in overrides:
                continue
            if condition.vital_type is None or condition.value is None:
                raise RuleConfigurationError(
                    f"Composite rule {rule.id} condition '{condition.key}' has no vital threshold "
                    f"and no override"
                )

    logger.debug(f"Validated {len(seen)} clinical rules")
    return rule_set


DEFAULT_RULE_SET = validate_rule_set(RuleSet(
    threshold_rules=THRESHOLD_RULES,
    trend_rules=TREND_RULES,
    composite_rules=COMPOSITE_RULES,
    threshold_overrides=THRESHOLD_OVERRIDES,
    composite_overrides=COMPOSITE_CONDITION_OVERRIDES,
))
