from __future__ import annotations

from collections import Counter
from typing import Iterable, Optional

from algorithms import MathTools
from date_utils import DateUtils
from models import (
    CardioEntry,
    PerformedSet,
    ProgressTrend,
    StrengthEntry,
    WorkoutLogEntry,
    WorkoutStats,
)


class WorkoutAnalysis:
    """Statistics derived from logged workouts.

    Every method is total: empty or unrecognized input yields ``0``,
    ``"stable"`` or ``"insufficient data"`` instead of raising.
    """

    KG_TO_LB = 2.20462
    LB_TO_KG = 0.453592
    KM_TO_MILES = 0.621371
    TREND_WINDOW = 6
    TREND_THRESHOLD = 0.1

    EFFORT_SCORES = {
        "very easy": 1,
        "easy": 2,
        "moderately hard": 3,
        "hard": 4,
        "very hard": 5,
    }

    @classmethod
    def calculate_volume(cls, sets: Iterable[PerformedSet], target_unit: str = "lb") -> float:
        """Sum weight times reps, converting sets logged in the other unit."""
        total = 0.0
        for s in sets:
            weight = s.weight_value or 0.0
            if s.weight_unit and s.weight_unit != target_unit:
                if target_unit == "lb" and s.weight_unit == "kg":
                    weight *= cls.KG_TO_LB
                elif target_unit == "kg" and s.weight_unit == "lb":
                    weight *= cls.LB_TO_KG
            total += weight * s.repetitions_done
        return total

    @classmethod
    def perceived_effort_to_number(cls, effort: Optional[str]) -> int:
        return cls.EFFORT_SCORES.get(effort or "", 3)

    @classmethod
    def _set_rpe(cls, s: PerformedSet) -> float:
        return s.rpe_score or cls.perceived_effort_to_number(s.perceived_effort_text)

    @classmethod
    def calculate_average_intensity(cls, sets: list[PerformedSet]) -> float:
        if not sets:
            return 0.0
        return MathTools.mean(cls.perceived_effort_to_number(s.perceived_effort_text) for s in sets)

    @classmethod
    def calculate_average_rpe(cls, sets: list[PerformedSet]) -> float:
        values = [v for v in (cls._set_rpe(s) for s in sets) if v > 0]
        return MathTools.mean(values)

    @staticmethod
    def calculate_estimated_1rm(weight: float, reps: int) -> float:
        return MathTools.brzycki_1rm(weight, reps)

    @classmethod
    def _exercise_sessions(cls, workouts: Iterable[WorkoutLogEntry], exercise_id: str) -> list[dict]:
        sessions = []
        for workout in workouts:
            entry = workout.strength_entry(exercise_id)
            if entry is None or not entry.performed_sets:
                continue
            sets = entry.performed_sets
            sessions.append(
                {
                    "date": workout.date_time_start,
                    "weight": max(s.weight_value or 0.0 for s in sets),
                    "reps": max(s.repetitions_done for s in sets),
                    "volume": cls.calculate_volume(sets),
                }
            )
        sessions.sort(key=lambda d: DateUtils.parse(d["date"]))
        return sessions

    @classmethod
    def get_progress_trend(
        cls, workouts: Iterable[WorkoutLogEntry], exercise_id: str, metric: str = "weight"
    ) -> ProgressTrend:
        """Classify the last six sessions of ``exercise_id`` by regression slope."""
        sessions = cls._exercise_sessions(workouts, exercise_id)[-cls.TREND_WINDOW:]
        if len(sessions) < 2:
            return ProgressTrend(trend="stable", percentage=0, period="insufficient data")
        values = [float(s.get(metric, 0.0)) for s in sessions]
        period = f"{len(values)} sessions"
        if values[0] == 0:
            return ProgressTrend(trend="stable", percentage=0, period=period)
        slope = MathTools.linear_regression_slope(list(range(len(values))), values)
        if slope > cls.TREND_THRESHOLD:
            trend = "increasing"
        elif slope < -cls.TREND_THRESHOLD:
            trend = "decreasing"
        else:
            trend = "stable"
        percentage = round(MathTools.percent_change(values[0], values[-1]), 1)
        return ProgressTrend(trend=trend, percentage=percentage, period=period)

    @staticmethod
    def calculate_workout_duration(workout: WorkoutLogEntry) -> int:
        """Return the workout length in whole seconds, 0 while unfinished."""
        if not workout.date_time_end:
            return 0
        delta = DateUtils.parse(workout.date_time_end) - DateUtils.parse(workout.date_time_start)
        return int(delta.total_seconds())

    @classmethod
    def get_personal_records(cls, workouts: Iterable[WorkoutLogEntry], exercise_id: str) -> dict:
        max_weight = 0.0
        max_reps = 0
        max_volume = 0.0
        best_session = ""
        for workout in workouts:
            entry = workout.strength_entry(exercise_id)
            if entry is None:
                continue
            for s in entry.performed_sets:
                weight = s.weight_value or 0.0
                if weight > max_weight:
                    max_weight = weight
                    best_session = workout.date_time_start[:10]
                max_reps = max(max_reps, s.repetitions_done)
            max_volume = max(max_volume, cls.calculate_volume(entry.performed_sets))
        return {
            "max_weight": round(max_weight, 1),
            "max_reps": max_reps,
            "max_volume": round(max_volume),
            "best_session": best_session,
        }

    @staticmethod
    def _strength_sets(workout: WorkoutLogEntry) -> list[PerformedSet]:
        return [
            s
            for entry in workout.entries
            if isinstance(entry, StrengthEntry)
            for s in entry.performed_sets
        ]

    @classmethod
    def calculate_intensity_score(cls, workout: WorkoutLogEntry) -> float:
        return MathTools.mean(cls._set_rpe(s) for s in cls._strength_sets(workout))

    @classmethod
    def generate_workout_stats(cls, workout: WorkoutLogEntry) -> WorkoutStats:
        sets = cls._strength_sets(workout)
        volume = sum(
            cls.calculate_volume(e.performed_sets)
            for e in workout.entries
            if isinstance(e, StrengthEntry)
        )
        return WorkoutStats(
            total_volume=round(volume),
            average_rpe=round(MathTools.mean(cls._set_rpe(s) for s in sets), 1),
            max_weight=round(max((s.weight_value or 0.0 for s in sets), default=0.0), 1),
            total_reps=sum(s.repetitions_done for s in sets),
            exercise_count=len(workout.entries),
            duration=cls.calculate_workout_duration(workout),
        )

    @staticmethod
    def has_form_breakdown(workout: WorkoutLogEntry) -> bool:
        return any(s.form_breakdown for s in WorkoutAnalysis._strength_sets(workout))

    @staticmethod
    def get_pain_summary(workout: WorkoutLogEntry) -> dict:
        max_back = max_knee = 0
        has_back = has_knee = False
        for s in WorkoutAnalysis._strength_sets(workout):
            if s.pain_back_0_to_10:
                max_back = max(max_back, s.pain_back_0_to_10)
                has_back = True
            if s.pain_knee_0_to_10:
                max_knee = max(max_knee, s.pain_knee_0_to_10)
                has_knee = True
        return {
            "has_back_pain": has_back,
            "has_knee_pain": has_knee,
            "max_back_pain": max_back,
            "max_knee_pain": max_knee,
        }

    @classmethod
    def generate_workout_summary(cls, workouts: list[WorkoutLogEntry]) -> dict:
        """Aggregate totals across ``workouts``."""
        performed: list[str] = []
        frequency: Counter = Counter()
        duration = 0
        volume_lb = 0.0
        distance_miles = 0.0
        ratings = []
        for workout in workouts:
            duration += cls.calculate_workout_duration(workout)
            if workout.overall_rating:
                ratings.append(workout.overall_rating)
            for entry in workout.entries:
                if isinstance(entry, CardioEntry):
                    key = entry.mode
                    for segment in entry.segments:
                        if not segment.distance_value:
                            continue
                        if segment.distance_unit == "miles":
                            distance_miles += segment.distance_value
                        elif segment.distance_unit == "kilometers":
                            distance_miles += segment.distance_value * cls.KM_TO_MILES
                        elif segment.distance_unit == "meters":
                            distance_miles += segment.distance_value / 1000 * cls.KM_TO_MILES
                else:
                    key = entry.exercise_id
                    if isinstance(entry, StrengthEntry):
                        volume_lb += cls.calculate_volume(entry.performed_sets)
                frequency[key] += 1
                if key not in performed:
                    performed.append(key)
        return {
            "total_workouts": len(workouts),
            "total_duration_minutes": round(duration / 60),
            "exercises_performed": performed,
            "strength_volume_lb": round(volume_lb),
            "cardio_distance_miles": round(distance_miles, 2),
            "average_workout_rating": round(MathTools.mean(ratings), 1),
            "most_frequent_exercises": [
                {"exercise_id": k, "count": c} for k, c in frequency.most_common(5)
            ],
        }
