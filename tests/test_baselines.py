import os
import sys
import unittest

sys.path.append(os.path.dirname(os.path.dirname(__file__)))
from db import BaselineRepository, EntityValidationError
from fitness_standards import FitnessStandards
from models import BaselineTestEntry

TODAY = "2024-03-20"


class BaselineRepositoryTest(unittest.TestCase):
    def setUp(self) -> None:
        self.db_path = "test_baselines.db"
        if os.path.exists(self.db_path):
            os.remove(self.db_path)
        self.repo = BaselineRepository(self.db_path)

    def tearDown(self) -> None:
        if os.path.exists(self.db_path):
            os.remove(self.db_path)

    def seed(self) -> None:
        self.repo.create(
            {
                "month": "2024-01",
                "test_date": "2024-01-10",
                "rockport_time_mm_ss": "14:30",
                "twelve_minute_distance": 1.2,
                "bench_press_1rm_lb": 150,
                "pull_up_max_reps": 2,
                "sit_and_reach_inches": 3,
            }
        )
        self.repo.create(
            {
                "month": "2024-02",
                "test_date": "2024-02-12",
                "rockport_time_mm_ss": "13:45",
                "bench_press_1rm_lb": 160,
                "squat_1rm_lb": 200,
                "pull_up_max_reps": 4,
            }
        )
        self.repo.create(
            {
                "month": "2024-03",
                "test_date": "2024-03-11",
                "twelve_minute_distance": 1.4,
                "bench_press_1rm_lb": 170,
                "plank_max_seconds": 60,
            }
        )

    def test_validation(self) -> None:
        with self.assertRaises(EntityValidationError):
            self.repo.create({"month": "2024-1", "test_date": "2024-01-10"})
        with self.assertRaises(EntityValidationError):
            self.repo.create(
                {"month": "2024-01", "test_date": "2024-01-10", "rockport_time_mm_ss": "14:75"}
            )

    def test_lookups(self) -> None:
        self.assertEqual(self.repo.get_next_test_date(today=TODAY), TODAY)
        self.seed()
        self.assertEqual(self.repo.get_by_month("2024-02").test_date, "2024-02-12")
        self.assertIsNone(self.repo.get_by_month("2023-12"))
        self.assertEqual(self.repo.get_latest().month, "2024-03")
        self.assertEqual(
            [b.month for b in self.repo.get_by_date_range("2024-02-01", "2024-03-31")],
            ["2024-02", "2024-03"],
        )
        self.assertEqual(self.repo.get_current_month(TODAY).month, "2024-03")
        self.assertFalse(self.repo.exists_for_current_month("2024-04-02"))
        self.assertEqual(self.repo.get_next_test_date(), "2024-04-01")

    def test_progressions(self) -> None:
        self.seed()
        self.assertEqual(
            self.repo.get_cardio_progression("rockport"),
            [
                {"month": "2024-01", "value": 870, "unit": "seconds"},
                {"month": "2024-02", "value": 825, "unit": "seconds"},
            ],
        )
        self.assertEqual(
            [p["value"] for p in self.repo.get_cardio_progression("twelve_minute")], [1.2, 1.4]
        )
        self.assertEqual(
            [p["value"] for p in self.repo.get_strength_progression("bench_press")], [150, 160, 170]
        )
        self.assertEqual(
            self.repo.get_bodyweight_progression("pull_up"),
            [
                {"month": "2024-01", "value": 2, "unit": "reps"},
                {"month": "2024-02", "value": 4, "unit": "reps"},
            ],
        )
        with self.assertRaises(ValueError):
            self.repo.get_strength_progression("curl")
        with self.assertRaises(ValueError):
            self.repo.get_cardio_progression("swim")

    def test_improvement_stats(self) -> None:
        self.seed()
        bench = self.repo.get_improvement_stats("bench_press_1rm_lb", 6, today=TODAY)
        self.assertEqual(bench["improvement"], 20)
        self.assertAlmostEqual(bench["improvement_percent"], 13.33)
        self.assertEqual(bench["unit"], "lb")
        recent = self.repo.get_improvement_stats("bench_press_1rm_lb", 1, today=TODAY)
        self.assertEqual(recent["start_value"], 160)
        run = self.repo.get_improvement_stats("twelve_minute_distance", 6, today=TODAY)
        self.assertAlmostEqual(run["improvement"], 0.2)
        self.assertAlmostEqual(run["improvement_percent"], 16.67)
        self.assertEqual(run["unit"], "miles")
        self.assertIsNone(self.repo.get_improvement_stats("squat_1rm_lb", 6, today=TODAY))
        self.assertIsNone(self.repo.get_improvement_stats("bench_press_1rm_lb", 0, today=TODAY))
        with self.assertRaises(ValueError):
            self.repo.get_improvement_stats("notes")

    def test_statistics(self) -> None:
        self.assertEqual(self.repo.get_statistics()["total_tests"], 0)
        self.seed()
        stats = self.repo.get_statistics()
        self.assertEqual(stats["months_covered"], 3)
        self.assertEqual(stats["average_tests_per_month"], 1)
        self.assertEqual(stats["most_recent_test"], "2024-03-11")
        self.assertEqual(stats["oldest_test"], "2024-01-10")
        self.assertEqual(stats["completion_rate"], {"cardio": 100, "strength": 100, "flexibility": 33})


class FitnessStandardsTest(unittest.TestCase):
    def test_strength_levels(self) -> None:
        level = FitnessStandards.get_strength_level(200, 200, "bench_press", "male")
        self.assertEqual(level.level, "novice")
        self.assertAlmostEqual(level.next_level_target, 230)
        self.assertAlmostEqual(level.progress_to_next, 50)
        self.assertEqual(level.percentile, 40)
        weak = FitnessStandards.get_strength_level(100, 200, "bench_press", "male")
        self.assertEqual(weak.level, "untrained")
        self.assertAlmostEqual(weak.next_level_target, 120)
        self.assertAlmostEqual(weak.progress_to_next, 83.33, places=2)
        elite = FitnessStandards.get_strength_level(400, 200, "bench_press", "male")
        self.assertEqual(elite.level, "elite")
        self.assertIsNone(elite.next_level_target)
        unknown = FitnessStandards.get_strength_level(100, 200, "curl", "male")
        self.assertEqual(unknown.level, "untrained")
        with self.assertRaises(ValueError):
            FitnessStandards.get_strength_level(100, 0, "squat", "male")

    def test_next_level_target(self) -> None:
        self.assertEqual(
            FitnessStandards.get_next_level_target(200, 200, "bench_press", "male"),
            {"target": 230, "level": "intermediate"},
        )
        self.assertIsNone(FitnessStandards.get_next_level_target(400, 200, "bench_press", "male"))

    def test_cardio_levels(self) -> None:
        walk = FitnessStandards.get_cardio_fitness_level(13.2, 35, "male", "rockport_walk")
        self.assertEqual((walk.level, walk.percentile, walk.fitness_age), ("good", 75, 35))
        run = FitnessStandards.get_cardio_fitness_level(1.5, 25, "female", "twelve_minute_run")
        self.assertEqual((run.level, run.fitness_age), ("good", 25))
        slow = FitnessStandards.get_cardio_fitness_level(0.5, 25, "female", "twelve_minute_run")
        self.assertEqual((slow.level, slow.fitness_age), ("poor", 74))
        older = FitnessStandards.get_cardio_fitness_level(11.0, 80, "male", "rockport_walk")
        self.assertEqual(older.level, "excellent")
        unknown = FitnessStandards.get_cardio_fitness_level(10, 40, "male", "swim")
        self.assertEqual((unknown.level, unknown.fitness_age, unknown.percentile), ("unknown", 40, 50))

    def test_comprehensive_level(self) -> None:
        baseline = BaselineTestEntry(
            month="2024-03",
            test_date="2024-03-11",
            rockport_time_mm_ss="13:12",
            twelve_minute_distance=2.4,
            twelve_minute_distance_unit="kilometers",
            bench_press_1rm_lb=200,
        )
        result = FitnessStandards.get_comprehensive_fitness_level(baseline, 200, 35, "male")
        self.assertEqual(set(result["strength"]), {"bench_press"})
        self.assertEqual(result["overall"].level, "novice")
        self.assertEqual(result["overall"].percentile, 40)
        self.assertEqual(result["cardio"]["rockport_walk"].level, "good")
        self.assertEqual(result["cardio"]["twelve_minute_run"].level, "fair")

    def test_overall_without_lifts(self) -> None:
        self.assertEqual(FitnessStandards.determine_overall_level([], 80), "intermediate")
        self.assertEqual(FitnessStandards.determine_overall_level([], 50), "novice")
        self.assertEqual(FitnessStandards.determine_overall_level([], 10), "untrained")


if __name__ == "__main__":
    unittest.main()
