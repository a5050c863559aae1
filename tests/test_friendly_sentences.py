import os
import sys
import unittest

sys.path.append(os.path.dirname(os.path.dirname(__file__)))
from friendly_sentences import FriendlySentenceGenerator
from models import (
    CardioBlock,
    CardioInterval,
    ExerciseCatalogItem,
    ExercisePrescription,
    RepRange,
    SetPrescription,
)


def strength_prescription(**overrides) -> ExercisePrescription:
    fields = {
        "target_repetitions": RepRange(min=8, max=12),
        "target_weight_value": 100,
        "target_weight_unit": "lb",
    }
    fields.update(overrides)
    return ExercisePrescription(
        exercise_id="press",
        sets=[SetPrescription(set_number=n, **fields) for n in range(1, 4)],
    )


class FriendlySentenceTest(unittest.TestCase):
    def setUp(self) -> None:
        self.dumbbell = ExerciseCatalogItem(id="press", name="Dumbbell Press", equipment=["Dumbbells"])
        self.barbell = ExerciseCatalogItem(
            id="squat", name="Back Squat", beginner_friendly_name="Barbell squat", equipment=["barbell"]
        )

    def test_dumbbell_weight_is_per_dumbbell_in_metric(self) -> None:
        text = FriendlySentenceGenerator.generate_exercise_description(
            strength_prescription(), self.dumbbell, "metric"
        )
        self.assertEqual(
            text, "Dumbbell Press: 3 series of 8 to 12 repetitions with 45 kilograms per dumbbell."
        )

    def test_tempo_rest_and_rpe_are_appended(self) -> None:
        prescription = strength_prescription(tempo_text="Slow and controlled", rest_seconds=90, rpe_target=8)
        text = FriendlySentenceGenerator.generate_exercise_description(prescription, self.dumbbell)
        self.assertEqual(
            text,
            "Dumbbell Press: 3 series of 8 to 12 repetitions with 100 pounds per dumbbell. "
            "Move slowly and with control. Rest 1 minute and 30 seconds between series. "
            "This should feel hard but manageable.",
        )

    def test_barbell_weight_uses_one_decimal(self) -> None:
        prescription = strength_prescription(target_weight_value=60, target_weight_unit="kg")
        text = FriendlySentenceGenerator.generate_exercise_description(prescription, self.barbell)
        self.assertTrue(text.startswith("Barbell squat: 3 series"))
        self.assertIn("with 132.3 pounds.", text)

    def test_written_description_wins(self) -> None:
        prescription = strength_prescription()
        prescription.clear_description = "Do what the coach says."
        text = FriendlySentenceGenerator.generate_exercise_description(prescription, self.dumbbell)
        self.assertEqual(text, "Do what the coach says.")

    def test_fallback_to_display_name(self) -> None:
        empty = ExercisePrescription(exercise_id="squat")
        self.assertEqual(
            FriendlySentenceGenerator.generate_exercise_description(empty, self.barbell), "Barbell squat"
        )

    def test_cardio_uses_first_interval(self) -> None:
        prescription = ExercisePrescription(
            exercise_id="walk",
            cardio_block=CardioBlock(
                warm_up_minutes=5,
                work_intervals=[
                    CardioInterval(
                        interval_number=1, hard_seconds=30, easy_seconds=90,
                        target_heart_rate_range_bpm=(140, 160),
                    ),
                    CardioInterval(interval_number=2, hard_seconds=60, easy_seconds=60),
                ],
                cool_down_minutes=5,
                safety_notes="Stop if dizzy.",
            ),
        )
        text = FriendlySentenceGenerator.generate_cardio_description(prescription)
        self.assertEqual(
            text,
            "Warm up for 5 minutes with an easy walk. Do 2 rounds: 30 seconds of fast pace "
            "followed by 90 seconds of easy pace. Target heart rate: 140-160 beats per minute. "
            "Cool down for 5 minutes, then walk until your heart rate is at or below one "
            "hundred ten beats per minute. Stop if dizzy.",
        )

    def test_small_formatters(self) -> None:
        single = SetPrescription(set_number=1, target_repetitions=1)
        self.assertEqual(FriendlySentenceGenerator.format_repetitions(single), "1 repetition")
        self.assertEqual(
            FriendlySentenceGenerator.format_rest(SetPrescription(set_number=1, target_repetitions=5, rest_seconds=45)),
            "Rest 45 seconds between series.",
        )
        self.assertEqual(
            FriendlySentenceGenerator.format_rest(SetPrescription(set_number=1, target_repetitions=5, rest_seconds=120)),
            "Rest 2 minutes between series.",
        )
        self.assertEqual(
            FriendlySentenceGenerator.format_rpe(SetPrescription(set_number=1, target_repetitions=5, rpe_target=10)),
            "This should feel like maximum effort.",
        )
        self.assertEqual(
            FriendlySentenceGenerator.format_tempo(SetPrescription(set_number=1, target_repetitions=5, tempo_text="3-1-1")),
            "Tempo: 3-1-1",
        )

    def test_session_summary(self) -> None:
        exercises = [strength_prescription(), strength_prescription()]
        self.assertEqual(
            FriendlySentenceGenerator.generate_session_summary(exercises, "strength", 45),
            "Strength training session with 2 exercises. Estimated duration: 45 minutes.",
        )
        self.assertEqual(
            FriendlySentenceGenerator.generate_session_summary([], "steady_cardio", 90),
            "Steady cardio session. Estimated duration: 1.5 hours.",
        )

    def test_safety_reminder(self) -> None:
        back = ExerciseCatalogItem(id="a", name="Deadlift", safety_notes=["Keep your spine neutral"])
        knee = ExerciseCatalogItem(id="b", name="Lunge", safety_notes=["Watch your knee alignment"])
        self.assertIn("back or knee discomfort", FriendlySentenceGenerator.generate_safety_reminder([back, knee]))
        self.assertIn("any back discomfort", FriendlySentenceGenerator.generate_safety_reminder([back]))
        self.assertEqual(
            FriendlySentenceGenerator.generate_safety_reminder([]),
            "Remember: Listen to your body and stop if you feel any pain or discomfort.",
        )


if __name__ == "__main__":
    unittest.main()
