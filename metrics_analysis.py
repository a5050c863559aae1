from __future__ import annotations

from typing import Iterable, Optional

from algorithms import MathTools
from date_utils import DateUtils
from models import BodyMetricEntry, FitnessGoal


class MetricsAnalysis:
    """Body composition and goal progress calculations."""

    BODY_FAT_RANGES = {
        "male": {"essential": 5, "athletic": 13, "fitness": 17, "average": 25},
        "female": {"essential": 12, "athletic": 20, "fitness": 24, "average": 31},
    }
    ACTIVITY_MULTIPLIERS = {
        "sedentary": 1.2,
        "lightly_active": 1.375,
        "moderately_active": 1.55,
        "very_active": 1.725,
        "extra_active": 1.9,
    }

    @staticmethod
    def calculate_bmi(weight: float, height: float, units: str = "imperial") -> float:
        """Return BMI from pounds and inches (imperial) or kg and meters."""
        if weight <= 0 or height <= 0:
            raise ValueError("weight and height must be positive")
        if units == "imperial":
            bmi = weight * 703 / (height * height)
        else:
            bmi = weight / (height * height)
        return round(bmi, 1)

    @staticmethod
    def bmi_category(bmi: float) -> str:
        if bmi < 18.5:
            return "underweight"
        if bmi < 25:
            return "normal"
        if bmi < 30:
            return "overweight"
        return "obese"

    @classmethod
    def body_fat_category(cls, body_fat: float, gender: str) -> str:
        ranges = cls.BODY_FAT_RANGES["male" if gender == "male" else "female"]
        for label in ("essential", "athletic", "fitness", "average"):
            if body_fat <= ranges[label]:
                return label
        return "obese"

    @staticmethod
    def calculate_lean_body_mass(weight: float, body_fat_percent: float) -> float:
        if body_fat_percent < 0 or body_fat_percent > 100:
            raise ValueError("body fat percentage must be between 0 and 100")
        return round(weight * (1 - body_fat_percent / 100), 1)

    @staticmethod
    def calculate_waist_to_hip_ratio(waist: float, hips: float, gender: str) -> dict:
        if hips <= 0:
            raise ValueError("hips must be positive")
        ratio = waist / hips
        low, moderate = (0.95, 1.0) if gender == "male" else (0.80, 0.85)
        if ratio < low:
            risk = "low"
        elif ratio < moderate:
            risk = "moderate"
        else:
            risk = "high"
        return {"ratio": round(ratio, 2), "risk_level": risk}

    @classmethod
    def calculate_calorie_needs(
        cls,
        weight: float,
        height: float,
        age: int,
        gender: str,
        activity_level: str = "sedentary",
        units: str = "imperial",
    ) -> int:
        """Return daily energy needs using the Mifflin-St Jeor equation."""
        if units == "imperial":
            weight = weight * 0.453592
            height = height * 2.54
        bmr = 10 * weight + 6.25 * height - 5 * age
        bmr += 5 if gender == "male" else -161
        return round(bmr * cls.ACTIVITY_MULTIPLIERS.get(activity_level, 1.2))

    @staticmethod
    def calculate_weight_trend(
        entries: Iterable[BodyMetricEntry], days: int = 30, today: str | None = None
    ) -> dict:
        """Fit a line through body weights logged within the last ``days`` days.

        ``rate`` is the slope per logged entry and ``confidence`` the
        absolute correlation of the fit.
        """
        result = {
            "metric": "body_weight",
            "trend": "stable",
            "rate": 0.0,
            "confidence": 0.0,
            "period_days": days,
        }
        cutoff = DateUtils.days_ago(days, today)
        recent = sorted((e for e in entries if e.date >= cutoff), key=lambda e: e.date)
        if len(recent) < 2:
            return result
        x = list(range(len(recent)))
        y = [e.body_weight for e in recent]
        slope = MathTools.linear_regression_slope(x, y)
        if abs(slope) < 0.01:
            trend = "stable"
        elif slope > 0:
            trend = "increasing"
        else:
            trend = "decreasing"
        result.update(
            trend=trend,
            rate=round(slope, 3),
            confidence=abs(MathTools.correlation(x, y)),
        )
        return result

    @classmethod
    def predict_weight(
        cls,
        entries: list[BodyMetricEntry],
        future_days: int,
        today: str | None = None,
    ) -> Optional[float]:
        """Project the latest weight forward, or None when the trend is weak."""
        if len(entries) < 3:
            return None
        trend = cls.calculate_weight_trend(entries, 60, today)
        if trend["confidence"] < 0.3:
            return None
        latest = max(entries, key=lambda e: e.date)
        return round(latest.body_weight + trend["rate"] * future_days, 1)

    @staticmethod
    def calculate_goal_progress(goal: FitnessGoal, current_value: float) -> float:
        """Return completion percentage of ``goal`` at ``current_value``.

        The result is clamped to 0-100 and rounded to one decimal.
        """
        if not goal.target_value:
            return 0.0
        start = goal.start_value
        if goal.goal_type == "target_value":
            if start is not None:
                total = goal.target_value - start
                percentage = (current_value - start) / total * 100 if total else 0.0
            else:
                percentage = current_value / goal.target_value * 100
        elif goal.goal_type == "increase_by":
            percentage = (current_value - (start or 0)) / goal.target_value * 100
        elif goal.goal_type == "decrease_by":
            initial = start if start is not None else current_value
            percentage = (initial - current_value) / goal.target_value * 100
        else:
            percentage = 0.0
        return MathTools.clamp(round(percentage, 1), 0.0, 100.0)

    @staticmethod
    def expected_goal_progress(goal: FitnessGoal, today: str | None = None) -> Optional[float]:
        """Return the share of the goal window elapsed, in percent.

        None when the window has zero or negative length.
        """
        total = DateUtils.days_between(goal.start_date, goal.target_date)
        if total <= 0:
            return None
        elapsed = DateUtils.days_between(goal.start_date, today or DateUtils.current_date())
        return elapsed / total * 100

    @classmethod
    def is_goal_on_track(cls, goal: FitnessGoal, today: str | None = None) -> bool:
        expected = cls.expected_goal_progress(goal, today)
        if expected is None:
            return True
        return goal.completion_percentage >= expected * 0.8
