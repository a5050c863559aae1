import os
import sys
import unittest

sys.path.append(os.path.dirname(os.path.dirname(__file__)))
from models import CardioEntry, CardioSegment, PerformedSet, StrengthEntry, WorkoutLogEntry
from workout_analysis import WorkoutAnalysis


def lift(number: int, weight: float, reps: int, unit: str = "lb", **extra) -> PerformedSet:
    return PerformedSet(
        set_number=number, repetitions_done=reps, weight_value=weight, weight_unit=unit, **extra
    )


def workout(day: str, sets: list, end: str | None = None, **extra) -> WorkoutLogEntry:
    entries = extra.pop("entries", [])
    if sets:
        entries.insert(
            0, StrengthEntry(exercise_id="bench", exercise_name="Bench Press", performed_sets=sets)
        )
    return WorkoutLogEntry(
        date_time_start=f"{day}T10:00:00+00:00",
        date_time_end=end,
        entries=entries,
        **extra,
    )


class VolumeAndEffortTest(unittest.TestCase):
    def test_volume_converts_units(self) -> None:
        sets = [lift(1, 100, 10), lift(2, 10, 10, unit="kg")]
        self.assertAlmostEqual(WorkoutAnalysis.calculate_volume(sets), 1000 + 220.462)
        self.assertAlmostEqual(WorkoutAnalysis.calculate_volume([lift(1, 100, 10)], "kg"), 453.592)
        self.assertEqual(WorkoutAnalysis.calculate_volume([]), 0)

    def test_effort_scores(self) -> None:
        self.assertEqual(WorkoutAnalysis.perceived_effort_to_number("very hard"), 5)
        self.assertEqual(WorkoutAnalysis.perceived_effort_to_number("unknown"), 3)
        sets = [
            lift(1, 100, 5, perceived_effort_text="hard"),
            lift(2, 100, 5, perceived_effort_text="easy"),
        ]
        self.assertEqual(WorkoutAnalysis.calculate_average_intensity(sets), 3)
        self.assertEqual(WorkoutAnalysis.calculate_average_intensity([]), 0)

    def test_estimated_1rm(self) -> None:
        self.assertAlmostEqual(WorkoutAnalysis.calculate_estimated_1rm(100, 10), 133.333, places=2)
        self.assertEqual(WorkoutAnalysis.calculate_estimated_1rm(100, 1), 100)


class TrendAndRecordsTest(unittest.TestCase):
    def test_increasing_trend(self) -> None:
        workouts = [
            workout("2024-01-03", [lift(1, 110, 5)]),
            workout("2024-01-01", [lift(1, 100, 5)]),
            workout("2024-01-02", [lift(1, 105, 5)]),
        ]
        trend = WorkoutAnalysis.get_progress_trend(workouts, "bench")
        self.assertEqual(trend.trend, "increasing")
        self.assertEqual(trend.percentage, 10.0)
        self.assertEqual(trend.period, "3 sessions")

    def test_decreasing_and_stable(self) -> None:
        falling = [workout(f"2024-01-0{i}", [lift(1, 100 - i * 5, 5)]) for i in range(1, 4)]
        self.assertEqual(WorkoutAnalysis.get_progress_trend(falling, "bench").trend, "decreasing")
        flat = [workout(f"2024-01-0{i}", [lift(1, 100, 5)]) for i in range(1, 4)]
        self.assertEqual(WorkoutAnalysis.get_progress_trend(flat, "bench").trend, "stable")

    def test_trend_uses_last_six_sessions(self) -> None:
        workouts = [workout(f"2024-01-{i:02d}", [lift(1, 50 + i * 10, 5)]) for i in range(1, 9)]
        trend = WorkoutAnalysis.get_progress_trend(workouts, "bench")
        self.assertEqual(trend.period, "6 sessions")
        self.assertEqual(trend.percentage, round((130 - 80) / 80 * 100, 1))

    def test_insufficient_data(self) -> None:
        trend = WorkoutAnalysis.get_progress_trend([workout("2024-01-01", [lift(1, 100, 5)])], "bench")
        self.assertEqual(trend.trend, "stable")
        self.assertEqual(trend.percentage, 0)
        self.assertEqual(trend.period, "insufficient data")

    def test_personal_records(self) -> None:
        workouts = [
            workout("2024-01-01", [lift(1, 100, 5), lift(2, 90, 10)]),
            workout("2024-01-08", [lift(1, 110, 3)]),
        ]
        records = WorkoutAnalysis.get_personal_records(workouts, "bench")
        self.assertEqual(
            records,
            {"max_weight": 110, "max_reps": 10, "max_volume": 1400, "best_session": "2024-01-08"},
        )


class WorkoutStatsTest(unittest.TestCase):
    def setUp(self) -> None:
        cardio = CardioEntry(
            mode="treadmill",
            segments=[
                CardioSegment(
                    segment_number=1, label="Run", duration_seconds=600,
                    distance_value=2, distance_unit="miles",
                )
            ],
        )
        self.workout = workout(
            "2024-01-01",
            [
                lift(1, 100, 10, rpe_score=8, pain_back_0_to_10=3),
                lift(2, 100, 8, perceived_effort_text="hard", pain_back_0_to_10=5, form_breakdown=True),
            ],
            end="2024-01-01T11:00:00+00:00",
            entries=[cardio],
            overall_rating=4,
        )

    def test_generate_workout_stats(self) -> None:
        stats = WorkoutAnalysis.generate_workout_stats(self.workout)
        self.assertEqual(stats.total_volume, 1800)
        self.assertEqual(stats.average_rpe, 6.0)
        self.assertEqual(stats.max_weight, 100)
        self.assertEqual(stats.total_reps, 18)
        self.assertEqual(stats.exercise_count, 2)
        self.assertEqual(stats.duration, 3600)

    def test_unfinished_workout_has_no_duration(self) -> None:
        self.assertEqual(WorkoutAnalysis.calculate_workout_duration(workout("2024-01-01", [])), 0)

    def test_form_and_pain(self) -> None:
        self.assertTrue(WorkoutAnalysis.has_form_breakdown(self.workout))
        self.assertEqual(
            WorkoutAnalysis.get_pain_summary(self.workout),
            {"has_back_pain": True, "has_knee_pain": False, "max_back_pain": 5, "max_knee_pain": 0},
        )

    def test_workout_summary(self) -> None:
        second = workout(
            "2024-01-02",
            [],
            end="2024-01-02T10:30:00+00:00",
            entries=[
                CardioEntry(
                    mode="treadmill",
                    segments=[
                        CardioSegment(
                            segment_number=1, label="Run", duration_seconds=1500,
                            distance_value=5, distance_unit="kilometers",
                        )
                    ],
                )
            ],
        )
        summary = WorkoutAnalysis.generate_workout_summary([self.workout, second])
        self.assertEqual(summary["total_workouts"], 2)
        self.assertEqual(summary["total_duration_minutes"], 90)
        self.assertEqual(summary["exercises_performed"], ["bench", "treadmill"])
        self.assertEqual(summary["strength_volume_lb"], 1800)
        self.assertEqual(summary["cardio_distance_miles"], 5.11)
        self.assertEqual(summary["average_workout_rating"], 4.0)
        self.assertEqual(summary["most_frequent_exercises"][0], {"exercise_id": "treadmill", "count": 2})

    def test_empty_summary(self) -> None:
        summary = WorkoutAnalysis.generate_workout_summary([])
        self.assertEqual(summary["total_workouts"], 0)
        self.assertEqual(summary["average_workout_rating"], 0)
        self.assertEqual(summary["most_frequent_exercises"], [])


if __name__ == "__main__":
    unittest.main()
