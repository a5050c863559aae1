import os
import sys
import unittest

sys.path.append(os.path.dirname(os.path.dirname(__file__)))
from app import FitnessApp
from config import YamlConfig
from seed_sample_data import STARTER_EXERCISES, STARTER_GLOSSARY, seed
from workout_session import SessionStateError


class FitnessAppTest(unittest.TestCase):
    def setUp(self) -> None:
        self.db_path = "test_app.db"
        self.yaml_path = "test_app.yaml"
        for path in (self.db_path, self.yaml_path):
            if os.path.exists(path):
                os.remove(path)
        YamlConfig(self.yaml_path).save({"db_path": self.db_path, "autosave_interval": 15})
        self.app = FitnessApp(self.yaml_path).init()

    def tearDown(self) -> None:
        for path in (self.db_path, self.yaml_path):
            if os.path.exists(path):
                os.remove(path)

    def test_init_wires_config(self) -> None:
        self.assertTrue(self.app.initialized)
        self.assertEqual(self.app.config.db_path, self.db_path)
        self.assertEqual(self.app.sessions.autosave_interval, 15)
        self.assertTrue(self.app.sessions.auto_save)
        self.assertEqual(self.app.settings.get_settings().unit_system, "imperial")
        self.assertIs(self.app.planner.plans, self.app.plans)
        self.assertIs(self.app.planner.exercises, self.app.exercises)

    def test_seed_is_idempotent(self) -> None:
        plan = seed(self.app)
        self.assertTrue(plan.is_template)
        self.assertEqual(self.app.glossary.count(), len(STARTER_GLOSSARY))
        monday = plan.phases[0].weeks[0].days[1].sessions[0]
        self.assertEqual([e.exercise_id for e in monday.exercises], ["goblet-squat", "romanian-deadlift"])
        wednesday = plan.phases[0].weeks[0].days[3].sessions[0]
        self.assertEqual([e.exercise_id for e in wednesday.exercises], ["walking-in-place"])
        self.assertEqual(self.app.exercises.count(), len(STARTER_EXERCISES))
        self.assertEqual(self.app.exercises.fetch("goblet-squat").movement_pattern, "squat")
        self.assertIsNone(seed(self.app))
        self.assertEqual(len(self.app.plans.get_templates()), 1)

    def test_reset_clears_data(self) -> None:
        seed(self.app)
        self.app.settings.update_setting("unit_system", "metric")
        self.app.reset()
        self.assertEqual(self.app.plans.count(), 0)
        self.assertEqual(self.app.glossary.count(), 0)
        self.assertEqual(self.app.exercises.count(), 0)
        self.assertEqual(self.app.settings.get_settings().unit_system, "imperial")

    def test_reset_requires_init(self) -> None:
        with self.assertRaises(SessionStateError):
            FitnessApp(self.yaml_path).reset()


if __name__ == "__main__":
    unittest.main()
