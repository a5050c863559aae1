import os
import sys

import pytest

sys.path.append(os.path.dirname(os.path.dirname(__file__)))
from metrics_analysis import MetricsAnalysis
from models import BodyMetricEntry, FitnessGoal


def goal(**fields) -> FitnessGoal:
    data = {
        "title": "Goal",
        "metric_to_track": "body_weight",
        "target_value": 200,
        "start_date": "2024-01-01",
        "target_date": "2024-01-11",
    }
    data.update(fields)
    return FitnessGoal(**data)


def weigh_ins(weights: list[float], start_day: int = 20) -> list[BodyMetricEntry]:
    return [
        BodyMetricEntry(date=f"2024-01-{start_day + i:02d}", body_weight=w, weight_unit="lb")
        for i, w in enumerate(weights)
    ]


class TestBodyCalculations:
    def test_bmi(self):
        assert MetricsAnalysis.calculate_bmi(180, 70) == 25.8
        assert MetricsAnalysis.calculate_bmi(70, 1.75, "metric") == 22.9
        assert MetricsAnalysis.bmi_category(25.8) == "overweight"
        assert MetricsAnalysis.bmi_category(17) == "underweight"
        with pytest.raises(ValueError):
            MetricsAnalysis.calculate_bmi(0, 70)

    def test_body_fat_and_lean_mass(self):
        assert MetricsAnalysis.body_fat_category(15, "male") == "fitness"
        assert MetricsAnalysis.body_fat_category(35, "female") == "obese"
        assert MetricsAnalysis.calculate_lean_body_mass(200, 20) == 160.0
        with pytest.raises(ValueError):
            MetricsAnalysis.calculate_lean_body_mass(200, 120)

    def test_waist_to_hip(self):
        assert MetricsAnalysis.calculate_waist_to_hip_ratio(30, 40, "male") == {
            "ratio": 0.75,
            "risk_level": "low",
        }
        assert MetricsAnalysis.calculate_waist_to_hip_ratio(36, 40, "female")["risk_level"] == "high"

    def test_calorie_needs(self):
        needs = MetricsAnalysis.calculate_calorie_needs(
            70, 175, 30, "male", "moderately_active", units="metric"
        )
        assert needs == 2556


class TestWeightTrend:
    def test_decreasing_trend(self):
        trend = MetricsAnalysis.calculate_weight_trend(
            weigh_ins([180, 179, 178, 177]), 30, today="2024-02-01"
        )
        assert trend["trend"] == "decreasing"
        assert trend["rate"] == -1.0
        assert trend["confidence"] == pytest.approx(1.0)

    def test_old_entries_are_ignored(self):
        trend = MetricsAnalysis.calculate_weight_trend(
            weigh_ins([180, 179, 178]), 30, today="2024-06-01"
        )
        assert trend["trend"] == "stable"
        assert trend["rate"] == 0.0

    def test_predict_weight(self):
        entries = weigh_ins([180, 179, 178, 177])
        assert MetricsAnalysis.predict_weight(entries, 10, today="2024-02-01") == 167.0
        assert MetricsAnalysis.predict_weight(entries[:2], 10, today="2024-02-01") is None


class TestGoalProgress:
    def test_target_value_from_start(self):
        assert MetricsAnalysis.calculate_goal_progress(goal(start_value=100), 150) == 50.0

    def test_decrease_by(self):
        g = goal(goal_type="decrease_by", start_value=200, target_value=10)
        assert MetricsAnalysis.calculate_goal_progress(g, 195) == 50.0

    def test_progress_is_clamped(self):
        assert MetricsAnalysis.calculate_goal_progress(goal(start_value=100), 260) == 100.0
        assert MetricsAnalysis.calculate_goal_progress(goal(start_value=100), 50) == 0.0
        assert MetricsAnalysis.calculate_goal_progress(goal(target_value=0), 50) == 0.0

    def test_expected_progress(self):
        assert MetricsAnalysis.expected_goal_progress(goal(), "2024-01-06") == pytest.approx(50.0)
        flat = goal(target_date="2024-01-01")
        assert MetricsAnalysis.expected_goal_progress(flat, "2024-01-06") is None
        assert MetricsAnalysis.is_goal_on_track(flat, "2024-01-06")

    def test_on_track(self):
        assert MetricsAnalysis.is_goal_on_track(goal(completion_percentage=45), "2024-01-06")
        assert not MetricsAnalysis.is_goal_on_track(goal(completion_percentage=10), "2024-01-06")
