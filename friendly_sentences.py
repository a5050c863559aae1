from __future__ import annotations

from typing import Iterable

from algorithms import UnitConverter
from models import (
    ExerciseCatalogItem,
    ExercisePrescription,
    RepRange,
    SetPrescription,
)


class FriendlySentenceGenerator:
    """Plain language sentences describing planned exercises and sessions."""

    RECOVERY_INSTRUCTION = (
        "walk until your heart rate is at or below one hundred ten beats per minute"
    )

    SESSION_SUMMARIES = {
        "strength": "Strength training session with {count} exercises",
        "intervals": "Interval training session with {count} exercises",
        "steady_cardio": "Steady cardio session",
        "flexibility": "Flexibility and stretching session with {count} exercises",
        "sport": "Sport-specific training session",
    }

    @classmethod
    def generate_exercise_description(
        cls,
        prescription: ExercisePrescription,
        exercise: ExerciseCatalogItem,
        unit_system: str = "imperial",
    ) -> str:
        """Describe ``prescription``; a written description always wins."""
        if prescription.clear_description.strip():
            return prescription.clear_description
        if prescription.sets:
            return cls.generate_strength_description(prescription, exercise, unit_system)
        if prescription.cardio_block is not None:
            return cls.generate_cardio_description(prescription)
        return exercise.display_name

    @classmethod
    def generate_strength_description(
        cls,
        prescription: ExercisePrescription,
        exercise: ExerciseCatalogItem,
        unit_system: str = "imperial",
    ) -> str:
        sets = prescription.sets or []
        first = sets[0]
        series = "1 series" if len(sets) == 1 else f"{len(sets)} series"
        description = f"{exercise.display_name}: {series} of {cls.format_repetitions(first)}"
        description += cls.format_weight(first, exercise, unit_system)
        tempo = cls.format_tempo(first)
        description += f". {tempo}." if tempo else "."
        for extra in (cls.format_rest(first), cls.format_rpe(first)):
            if extra:
                description += f" {extra}"
        return description

    @classmethod
    def generate_cardio_description(cls, prescription: ExercisePrescription) -> str:
        """Narrate a cardio block.

        Rounds are reported with the first interval's durations and heart
        rate even when later intervals differ.
        """
        cardio = prescription.cardio_block
        description = f"Warm up for {cardio.warm_up_minutes} minutes with an easy walk."
        if cardio.work_intervals:
            interval = cardio.work_intervals[0]
            rounds = len(cardio.work_intervals)
            label = "1 round" if rounds == 1 else f"{rounds} rounds"
            description += (
                f" Do {label}: {interval.hard_seconds} seconds of fast pace followed by"
                f" {interval.easy_seconds} seconds of easy pace."
            )
            if interval.target_heart_rate_range_bpm:
                low, high = interval.target_heart_rate_range_bpm
                description += f" Target heart rate: {low}-{high} beats per minute."
        description += (
            f" Cool down for {cardio.cool_down_minutes} minutes, then {cls.RECOVERY_INSTRUCTION}."
        )
        if cardio.safety_notes:
            description += f" {cardio.safety_notes}"
        return description

    @staticmethod
    def format_repetitions(prescribed: SetPrescription) -> str:
        reps = prescribed.target_repetitions
        if isinstance(reps, RepRange):
            return f"{reps.min} to {reps.max} repetitions"
        return "1 repetition" if reps == 1 else f"{reps} repetitions"

    @staticmethod
    def is_dumbbell_exercise(exercise: ExerciseCatalogItem) -> bool:
        return any(item.lower() in ("dumbbell", "dumbbells") for item in exercise.equipment)

    @classmethod
    def format_weight(
        cls, prescribed: SetPrescription, exercise: ExerciseCatalogItem, unit_system: str
    ) -> str:
        if not prescribed.target_weight_value or not prescribed.target_weight_unit:
            return ""
        target = "lb" if unit_system == "imperial" else "kg"
        unit_name = "pounds" if target == "lb" else "kilograms"
        if cls.is_dumbbell_exercise(exercise):
            value = UnitConverter.convert_weight(
                prescribed.target_weight_value, prescribed.target_weight_unit, target, "dumbbell"
            )
            return f" with {UnitConverter.format_number(value)} {unit_name} per dumbbell"
        value = UnitConverter.convert_weight(
            prescribed.target_weight_value, prescribed.target_weight_unit, target
        )
        return f" with {UnitConverter.format_number(round(value, 1))} {unit_name}"

    @staticmethod
    def format_tempo(prescribed: SetPrescription) -> str:
        if not prescribed.tempo_text:
            return ""
        tempo = prescribed.tempo_text.lower()
        if "slow" in tempo or "controlled" in tempo:
            return "Move slowly and with control"
        if "explosive" in tempo or "fast" in tempo:
            return "Move with explosive power"
        if "pause" in tempo or "hold" in tempo:
            return "Pause briefly at the bottom of each repetition"
        return f"Tempo: {prescribed.tempo_text}"

    @staticmethod
    def format_rest(prescribed: SetPrescription) -> str:
        if not prescribed.rest_seconds:
            return ""
        minutes, seconds = divmod(prescribed.rest_seconds, 60)
        if minutes == 0:
            return f"Rest {seconds} seconds between series."
        minute_text = "minute" if minutes == 1 else "minutes"
        if seconds == 0:
            return f"Rest {minutes} {minute_text} between series."
        return f"Rest {minutes} {minute_text} and {seconds} seconds between series."

    @staticmethod
    def format_rpe(prescribed: SetPrescription) -> str:
        rpe = prescribed.rpe_target
        if not rpe:
            return ""
        if rpe <= 3:
            feel = "very easy"
        elif rpe <= 5:
            feel = "easy to moderate"
        elif rpe <= 7:
            feel = "moderately hard"
        elif rpe <= 8:
            feel = "hard but manageable"
        elif rpe <= 9:
            feel = "very hard"
        else:
            return "This should feel like maximum effort."
        return f"This should feel {feel}."

    @classmethod
    def generate_session_summary(
        cls, exercises: list[ExercisePrescription], session_type: str, estimated_minutes: int
    ) -> str:
        if estimated_minutes < 60:
            duration = f"{estimated_minutes} minutes"
        else:
            duration = f"{UnitConverter.format_number(round(estimated_minutes / 60, 1))} hours"
        template = cls.SESSION_SUMMARIES.get(session_type, "Workout session with {count} exercises")
        return f"{template.format(count=len(exercises))}. Estimated duration: {duration}."

    @staticmethod
    def generate_safety_reminder(exercises: Iterable[ExerciseCatalogItem]) -> str:
        notes = [note.lower() for ex in exercises for note in ex.safety_notes]
        back = any("back" in n or "spine" in n for n in notes)
        knee = any("quad" in n or "knee" in n for n in notes)
        if back and knee:
            area = "back or knee"
        elif back:
            area = "back"
        elif knee:
            area = "knee"
        else:
            return "Remember: Listen to your body and stop if you feel any pain or discomfort."
        return (
            f"Remember: If you experience any {area} discomfort above 2 out of 10, "
            "stop immediately and rest."
        )
