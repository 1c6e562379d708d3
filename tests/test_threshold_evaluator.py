"""
Threshold rule tests, including the weight-gain daily delta special case.
"""

from datetime import timedelta
from unittest.mock import MagicMock

import pytest

from carewatch.services.alert_engine import AlertSeverity, ClinicalRuleEngine, VitalType
from carewatch.services.alert_engine.rule_registry import DailyDeltaOverride
from carewatch.services.alert_engine.threshold_evaluator import (
    evaluate_daily_delta_rule,
    evaluate_threshold_rules,
)
from carewatch.services.alert_engine.threshold_rules import BP_SYSTOLIC_RULE, WEIGHT_GAIN_RULE

SYSTOLIC_RULE_ID = "threshold-bp-systolic"
WEIGHT_GAIN_RULE_ID = "threshold-weight-gain"


class TestAbsoluteThresholds:

    @pytest.mark.asyncio
    async def test_no_reading_no_alert(self, db_session, now, patient_id, select_rule):
        pending = await ClinicalRuleEngine(db_session).evaluate(patient_id, now=now)
        assert select_rule(pending, SYSTOLIC_RULE_ID) == []

    @pytest.mark.asyncio
    async def test_first_matching_bound_wins(self, db_session, add_vital, now, patient_id, select_rule):
        add_vital(VitalType.BLOOD_PRESSURE_SYSTOLIC, 185)

        pending = await ClinicalRuleEngine(db_session).evaluate(patient_id, now=now)
        alerts = select_rule(pending, SYSTOLIC_RULE_ID)

        assert len(alerts) == 1
        assert alerts[0].severity == AlertSeverity.CRITICAL
        assert alerts[0].title == "Hypertensive crisis"
        assert alerts[0].description == (
            "Blood Pressure (Systolic) Threshold: reading 185 mmHg exceeds threshold of 180 mmHg."
        )
        assert alerts[0].evidence["value"] == 185
        assert alerts[0].evidence["unit"] == "mmHg"
        assert alerts[0].evidence["recorded_at"].startswith("2026-03-10T12:00:00")

    @pytest.mark.asyncio
    async def test_lower_bound_matches(self, db_session, add_vital, now, patient_id, select_rule):
        add_vital(VitalType.BLOOD_PRESSURE_SYSTOLIC, 150)

        alerts = select_rule(await ClinicalRuleEngine(db_session).evaluate(patient_id, now=now), SYSTOLIC_RULE_ID)

        assert [a.severity for a in alerts] == [AlertSeverity.ELEVATED]
        assert alerts[0].title == "Hypertension Stage 2"

    @pytest.mark.asyncio
    async def test_value_within_bounds_no_alert(self, db_session, add_vital, now, patient_id, select_rule):
        add_vital(VitalType.BLOOD_PRESSURE_SYSTOLIC, 140)

        pending = await ClinicalRuleEngine(db_session).evaluate(patient_id, now=now)
        assert select_rule(pending, SYSTOLIC_RULE_ID) == []

    @pytest.mark.asyncio
    async def test_uses_latest_reading_only(self, db_session, add_vital, now, patient_id, select_rule):
        add_vital(VitalType.BLOOD_PRESSURE_SYSTOLIC, 190, at=now - timedelta(hours=6))
        add_vital(VitalType.BLOOD_PRESSURE_SYSTOLIC, 125, at=now - timedelta(hours=1))

        pending = await ClinicalRuleEngine(db_session).evaluate(patient_id, now=now)
        assert select_rule(pending, SYSTOLIC_RULE_ID) == []

    @pytest.mark.asyncio
    async def test_less_than_bound(self, db_session, add_vital, now, patient_id, select_rule):
        add_vital(VitalType.HEART_RATE, 45)

        alerts = select_rule(
            await ClinicalRuleEngine(db_session).evaluate(patient_id, now=now), "threshold-heart-rate"
        )

        assert len(alerts) == 1
        assert alerts[0].title == "Bradycardia"
        assert "is below threshold of 50 bpm" in alerts[0].description

    @pytest.mark.asyncio
    async def test_decimal_bound(self, db_session, add_vital, now, patient_id, select_rule):
        add_vital(VitalType.TEMPERATURE, 100.6)

        alerts = select_rule(
            await ClinicalRuleEngine(db_session).evaluate(patient_id, now=now), "threshold-temperature"
        )

        assert [a.title for a in alerts] == ["Fever"]
        assert "threshold of 100.4 F" in alerts[0].description


class TestWeightGainDelta:

    @pytest.mark.asyncio
    async def test_daily_gain_over_bound_fires(self, db_session, add_vital, now, patient_id, select_rule):
        add_vital(VitalType.WEIGHT, 149.0, at=now - timedelta(hours=20))
        add_vital(VitalType.WEIGHT, 153.0)

        alerts = select_rule(await ClinicalRuleEngine(db_session).evaluate(patient_id, now=now), WEIGHT_GAIN_RULE_ID)

        assert len(alerts) == 1
        assert alerts[0].severity == AlertSeverity.ELEVATED
        assert alerts[0].evidence["delta"] == 4.0
        assert alerts[0].evidence["previous_value"] == 149.0
        assert alerts[0].evidence["current_value"] == 153.0
        assert alerts[0].description == "Weight increased by 4.0 lbs in the last day (threshold: 3 lbs)."

    @pytest.mark.asyncio
    async def test_small_gain_no_alert(self, db_session, add_vital, now, patient_id, select_rule):
        add_vital(VitalType.WEIGHT, 149.0, at=now - timedelta(hours=20))
        add_vital(VitalType.WEIGHT, 151.0)

        pending = await ClinicalRuleEngine(db_session).evaluate(patient_id, now=now)
        assert select_rule(pending, WEIGHT_GAIN_RULE_ID) == []

    @pytest.mark.asyncio
    async def test_absolute_weight_is_not_compared(self, db_session, add_vital, now, patient_id, select_rule):
        add_vital(VitalType.WEIGHT, 250.0)

        pending = await ClinicalRuleEngine(db_session).evaluate(patient_id, now=now)
        assert select_rule(pending, WEIGHT_GAIN_RULE_ID) == []

    @pytest.mark.asyncio
    async def test_no_baseline_in_last_day(self, db_session, add_vital, now, patient_id, select_rule):
        add_vital(VitalType.WEIGHT, 149.0, at=now - timedelta(days=3))
        add_vital(VitalType.WEIGHT, 156.0, at=now - timedelta(days=2))

        pending = await ClinicalRuleEngine(db_session).evaluate(patient_id, now=now)
        assert select_rule(pending, WEIGHT_GAIN_RULE_ID) == []

    def test_missing_baseline_skips(self, now, patient_id):
        accessor = MagicMock()
        accessor.latest.return_value = MagicMock(value=153.0, unit="lbs", recorded_at=now)
        accessor.earliest_since.return_value = None

        result = evaluate_daily_delta_rule(patient_id, WEIGHT_GAIN_RULE, DailyDeltaOverride(), accessor)

        assert result is None
        accessor.earliest_since.assert_called_once_with(patient_id, VitalType.WEIGHT, 1)


class TestDeduplicationBeforeWork:

    @pytest.mark.asyncio
    async def test_active_alert_skips_all_reads(self, patient_id):
        accessor = MagicMock()
        gate = MagicMock()
        gate.has_active_alert.return_value = True

        pending = await evaluate_threshold_rules(
            patient_id, [BP_SYSTOLIC_RULE, WEIGHT_GAIN_RULE],
            {WEIGHT_GAIN_RULE.id: DailyDeltaOverride()}, accessor, gate,
        )

        assert pending == []
        accessor.latest.assert_not_called()
        accessor.earliest_since.assert_not_called()
