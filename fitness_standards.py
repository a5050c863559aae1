from __future__ import annotations

from collections import Counter
from typing import Optional

from algorithms import MathTools, UnitConverter
from date_utils import DateUtils
from models import BaselineTestEntry, CardioLevel, FitnessLevel

STRENGTH_LIFTS = ("bench_press", "squat", "deadlift", "overhead_press")
LEVELS = ("untrained", "novice", "intermediate", "advanced", "elite")


class FitnessStandards:
    """Scores baseline test results against strength and cardio standards."""

    # bodyweight multipliers per level
    STRENGTH_STANDARDS = {
        ("bench_press", "male"): (0.60, 0.85, 1.15, 1.50, 1.90),
        ("bench_press", "female"): (0.35, 0.50, 0.70, 0.95, 1.25),
        ("squat", "male"): (0.75, 1.10, 1.50, 1.95, 2.40),
        ("squat", "female"): (0.45, 0.70, 1.00, 1.35, 1.75),
        ("deadlift", "male"): (1.00, 1.35, 1.80, 2.35, 2.90),
        ("deadlift", "female"): (0.60, 0.85, 1.20, 1.60, 2.05),
        ("overhead_press", "male"): (0.40, 0.55, 0.75, 1.00, 1.25),
        ("overhead_press", "female"): (0.25, 0.35, 0.50, 0.65, 0.85),
    }

    # (min_age, max_age, excellent, good, fair, poor); rockport in minutes, run in miles
    CARDIO_STANDARDS = {
        ("rockport_walk", "male"): [
            (20, 29, 11.5, 13.0, 15.0, 17.0),
            (30, 39, 12.0, 13.5, 15.5, 17.5),
            (40, 49, 12.5, 14.0, 16.0, 18.0),
            (50, 59, 13.0, 14.5, 16.5, 18.5),
            (60, 69, 13.5, 15.0, 17.0, 19.0),
        ],
        ("rockport_walk", "female"): [
            (20, 29, 12.5, 14.0, 16.0, 18.0),
            (30, 39, 13.0, 14.5, 16.5, 18.5),
            (40, 49, 13.5, 15.0, 17.0, 19.0),
            (50, 59, 14.0, 15.5, 17.5, 19.5),
            (60, 69, 14.5, 16.0, 18.0, 20.0),
        ],
        ("twelve_minute_run", "male"): [
            (20, 29, 1.8, 1.6, 1.4, 1.2),
            (30, 39, 1.7, 1.5, 1.3, 1.1),
            (40, 49, 1.6, 1.4, 1.2, 1.0),
            (50, 59, 1.5, 1.3, 1.1, 0.9),
            (60, 69, 1.4, 1.2, 1.0, 0.8),
        ],
        ("twelve_minute_run", "female"): [
            (20, 29, 1.6, 1.4, 1.2, 1.0),
            (30, 39, 1.5, 1.3, 1.1, 0.9),
            (40, 49, 1.4, 1.2, 1.0, 0.8),
            (50, 59, 1.3, 1.1, 0.9, 0.7),
            (60, 69, 1.2, 1.0, 0.8, 0.6),
        ],
    }
    CARDIO_PERCENTILES = {"excellent": 90, "good": 75, "fair": 50, "poor": 25}

    @staticmethod
    def percentile_rank(value: float, standards: list[float]) -> int:
        """Share of ``standards`` at or below ``value``, in percent."""
        if not standards:
            return 0
        rank = sum(1 for s in standards if s <= value)
        return int(MathTools.round_half_up(rank / len(standards) * 100))

    @classmethod
    def get_strength_level(
        cls, lift: float, body_weight: float, exercise: str, gender: str
    ) -> FitnessLevel:
        """Classify a one-rep max by its ratio to body weight."""
        if body_weight <= 0:
            raise ValueError("body weight must be positive")
        multipliers = cls.STRENGTH_STANDARDS.get((exercise, gender))
        if multipliers is None:
            return FitnessLevel(category="strength", level="untrained", percentile=0, progress_to_next=0)

        ratio = lift / body_weight
        if ratio < multipliers[0]:
            level = "untrained"
            target = body_weight * multipliers[0]
            progress = ratio / multipliers[0] * 100
        elif ratio >= multipliers[-1]:
            level = "elite"
            target = None
            progress = 100.0
        else:
            tier = max(i for i, m in enumerate(multipliers) if ratio >= m)
            level = LEVELS[tier]
            low, high = multipliers[tier], multipliers[tier + 1]
            target = body_weight * high
            progress = (ratio - low) / (high - low) * 100
        return FitnessLevel(
            category="strength",
            level=level,
            percentile=cls.percentile_rank(ratio, list(multipliers)),
            next_level_target=target,
            progress_to_next=MathTools.clamp(progress, 0, 100),
        )

    @classmethod
    def get_next_level_target(
        cls, lift: float, body_weight: float, exercise: str, gender: str
    ) -> Optional[dict]:
        """Weight needed for the next standard, None at elite."""
        current = cls.get_strength_level(lift, body_weight, exercise, gender)
        if current.next_level_target is None:
            return None
        multipliers = cls.STRENGTH_STANDARDS[(exercise, gender)]
        ratio = current.next_level_target / body_weight
        name = LEVELS[min(range(len(multipliers)), key=lambda i: abs(multipliers[i] - ratio))]
        return {"target": MathTools.round_half_up(current.next_level_target), "level": name}

    @classmethod
    def get_cardio_fitness_level(
        cls, result: float, age: int, gender: str, test_type: str
    ) -> CardioLevel:
        """Rate a rockport walk time (minutes) or 12 minute run distance (miles)."""
        ranges = cls.CARDIO_STANDARDS.get((test_type, gender))
        if ranges is None:
            return CardioLevel(level="unknown", fitness_age=age, percentile=50)
        band = next((r for r in ranges if r[0] <= age <= r[1]), ranges[-1])
        lower_is_better = test_type == "rockport_walk"
        level = "poor"
        for label, threshold in zip(("excellent", "good", "fair"), band[2:5]):
            if (result <= threshold) if lower_is_better else (result >= threshold):
                level = label
                break
        return CardioLevel(
            level=level,
            fitness_age=cls.calculate_fitness_age(result, ranges, lower_is_better),
            percentile=cls.CARDIO_PERCENTILES[level],
        )

    @staticmethod
    def calculate_fitness_age(result: float, ranges: list[tuple], lower_is_better: bool) -> int:
        """Midpoint of the youngest age band where ``result`` rates good."""
        for min_age, max_age, _excellent, good, _fair, _poor in ranges:
            if (result <= good) if lower_is_better else (result >= good):
                return int(MathTools.round_half_up((min_age + max_age) / 2))
        return ranges[-1][1] + 5

    @classmethod
    def get_comprehensive_fitness_level(
        cls, baseline: BaselineTestEntry, body_weight: float, age: int, gender: str
    ) -> dict:
        strength: dict[str, FitnessLevel] = {}
        for lift in STRENGTH_LIFTS:
            value = getattr(baseline, f"{lift}_1rm_lb")
            if value:
                strength[lift] = cls.get_strength_level(value, body_weight, lift, gender)

        cardio: dict[str, CardioLevel] = {}
        if baseline.rockport_time_mm_ss:
            minutes = DateUtils.mm_ss_to_seconds(baseline.rockport_time_mm_ss) / 60
            cardio["rockport_walk"] = cls.get_cardio_fitness_level(minutes, age, gender, "rockport_walk")
        if baseline.twelve_minute_distance:
            distance = baseline.twelve_minute_distance
            if baseline.twelve_minute_distance_unit == "kilometers":
                distance = UnitConverter.km_to_miles(distance)
            cardio["twelve_minute_run"] = cls.get_cardio_fitness_level(
                distance, age, gender, "twelve_minute_run"
            )

        levels = [s.level for s in strength.values()]
        percentile = MathTools.mean(s.percentile for s in strength.values()) if strength else 50.0
        overall = FitnessLevel(
            category="overall",
            level=cls.determine_overall_level(levels, percentile),
            percentile=percentile,
            progress_to_next=MathTools.mean(s.progress_to_next for s in strength.values()),
        )
        return {"overall": overall, "strength": strength, "cardio": cardio}

    @staticmethod
    def determine_overall_level(levels: list[str], average_percentile: float) -> str:
        """Most common strength level, or a percentile guess without lifts."""
        if not levels:
            if average_percentile >= 75:
                return "intermediate"
            if average_percentile >= 50:
                return "novice"
            return "untrained"
        return Counter(levels).most_common(1)[0][0]
