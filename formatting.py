from __future__ import annotations

import datetime
import math
from typing import Optional, Union

from algorithms import UnitConverter
from date_utils import DateUtils
from models import (
    CardioSegment,
    ExerciseCatalogItem,
    ExercisePrescription,
    PerformedSet,
    RepRange,
)


class FriendlyFormatter:
    """Short display labels for prescriptions, logs and body metrics."""

    EFFORT_LABELS = {
        1: "very easy",
        2: "easy",
        3: "moderately easy",
        4: "moderately hard",
        5: "hard",
        6: "hard",
        7: "very hard",
        8: "very hard",
        9: "extremely hard",
        10: "maximum effort",
    }

    RATING_LABELS = {
        1: "😔 Tough day",
        2: "😐 Below average",
        3: "😊 Good workout",
        4: "😄 Great session",
        5: "🔥 Crushing it!",
    }

    @staticmethod
    def weight_unit_for(unit_system: str) -> str:
        return "lb" if unit_system == "imperial" else "kg"

    @staticmethod
    def format_rep_range(reps: Union[int, RepRange]) -> str:
        if isinstance(reps, RepRange):
            return f"{reps.min}-{reps.max} reps"
        return f"{reps} reps"

    @classmethod
    def format_weight_display(cls, value: float, unit: str, unit_system: str = "imperial") -> str:
        """Convert to the user's unit at dumbbell precision with a unit suffix."""
        target = cls.weight_unit_for(unit_system)
        return UnitConverter.format_weight(value, unit, target, "dumbbell")

    @classmethod
    def exercise_description(
        cls,
        prescription: ExercisePrescription,
        exercise: ExerciseCatalogItem,
        unit_system: str = "imperial",
    ) -> str:
        description = exercise.display_name
        if not prescription.sets:
            return description
        first = prescription.sets[0]
        reps = cls.format_rep_range(first.target_repetitions)
        description += f" - {len(prescription.sets)} sets of {reps}"
        if first.target_weight_value and first.target_weight_unit:
            weight = cls.format_weight_display(
                first.target_weight_value, first.target_weight_unit, unit_system
            )
            description += f" at {weight}"
        if first.rest_seconds:
            description += f", rest {cls.time_to_readable(first.rest_seconds)}"
        return description

    @classmethod
    def perceived_effort_text(cls, level) -> str:
        if isinstance(level, str):
            return level
        if isinstance(level, (int, float)) and not isinstance(level, bool):
            if float(level).is_integer():
                return cls.EFFORT_LABELS.get(int(level), "unknown")
        return "unknown"

    @staticmethod
    def time_to_readable(seconds: int) -> str:
        seconds = int(seconds)
        if seconds < 60:
            return f"{seconds}s"
        if seconds < 3600:
            minutes, rest = divmod(seconds, 60)
            return f"{minutes}m {rest}s" if rest else f"{minutes}m"
        hours = seconds // 3600
        minutes = (seconds % 3600) // 60
        return f"{hours}h {minutes}m" if minutes else f"{hours}h"

    @classmethod
    def format_time_from_string(cls, value: str) -> str:
        """Render an ``MM:SS`` string, returning it unchanged when malformed."""
        parts = value.split(":")
        if len(parts) != 2 or not all(p.strip().isdigit() for p in parts):
            return value
        return cls.time_to_readable(int(parts[0]) * 60 + int(parts[1]))

    @classmethod
    def format_workout_rating(cls, rating: float) -> str:
        return cls.RATING_LABELS.get(int(math.floor(rating + 0.5)), "Not rated")

    @classmethod
    def format_workout_summary(
        cls,
        total_sets: int,
        total_reps: int,
        duration: int,
        average_rating: Optional[float] = None,
    ) -> str:
        summary = f"{total_sets} sets, {total_reps} reps in {cls.time_to_readable(duration)}"
        if average_rating:
            summary += f" • {cls.format_workout_rating(average_rating)}"
        return summary

    @classmethod
    def format_set_summary(cls, performed: PerformedSet, unit_system: str = "imperial") -> str:
        summary = f"{performed.repetitions_done} reps"
        if performed.weight_value and performed.weight_unit:
            weight = cls.format_weight_display(
                performed.weight_value, performed.weight_unit, unit_system
            )
            summary += f" @ {weight}"
        if performed.perceived_effort_text:
            summary += f" • {performed.perceived_effort_text}"
        return summary

    @classmethod
    def format_cardio_summary(cls, segment: CardioSegment) -> str:
        summary = f"{segment.label}: {cls.time_to_readable(segment.duration_seconds)}"
        if segment.distance_value and segment.distance_unit:
            summary += f" • {cls.format_number(segment.distance_value, 2)} {segment.distance_unit}"
        if segment.speed_mph_or_kph:
            speed_unit = "mph" if segment.distance_unit == "miles" else "kph"
            summary += f" • {cls.format_number(segment.speed_mph_or_kph)} {speed_unit}"
        if segment.average_heart_rate_bpm:
            summary += f" • {segment.average_heart_rate_bpm} bpm avg"
        return summary

    @staticmethod
    def format_date(
        value: Union[str, datetime.date, datetime.datetime],
        mode: str = "short",
        now: Union[str, datetime.datetime, None] = None,
    ) -> str:
        """Render a date as ``short``, ``long`` or ``relative`` text."""
        moment = DateUtils.parse(value)
        if mode == "relative":
            reference = DateUtils.parse(now) if now is not None else datetime.datetime.now(
                datetime.timezone.utc
            )
            days = math.floor((reference - moment).total_seconds() / 86400)
            if days <= 0:
                return "Today"
            if days == 1:
                return "Yesterday"
            if days < 7:
                return f"{days} days ago"
            if days < 30:
                return f"{days // 7} weeks ago"
            if days < 365:
                return f"{days // 30} months ago"
            return f"{days // 365} years ago"
        if mode == "long":
            return f"{moment:%A}, {moment:%B} {moment.day}, {moment.year}"
        return f"{moment:%b} {moment.day}, {moment.year}"

    @staticmethod
    def format_number(value: float, decimals: int = 1) -> str:
        text = f"{value:.{decimals}f}"
        if "." in text:
            text = text.rstrip("0").rstrip(".")
        return text

    @classmethod
    def format_body_weight(cls, weight: float, unit: str) -> str:
        return f"{cls.format_number(weight)} {UnitConverter.unit_display(unit)}"

    @classmethod
    def format_body_fat_percentage(cls, percentage: float) -> str:
        return f"{cls.format_number(percentage)}%"
