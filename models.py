from __future__ import annotations

import uuid
from typing import Annotated, Iterator, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from date_utils import DateUtils

WeightUnit = Literal["lb", "kg"]
UnitSystem = Literal["imperial", "metric"]
Difficulty = Literal["beginner", "intermediate", "advanced"]
EffortText = Literal["very easy", "easy", "moderately hard", "hard", "very hard"]
SessionType = Literal["strength", "intervals", "steady_cardio", "sport", "flexibility"]
GoalStatus = Literal["active", "completed", "paused", "abandoned"]
SessionStatus = Literal["not-started", "active", "paused", "completed", "abandoned"]

DATE_PATTERN = r"^\d{4}-\d{2}-\d{2}$"


def new_id() -> str:
    return str(uuid.uuid4())


class Entity(BaseModel):
    """Base for every stored document."""

    model_config = ConfigDict(validate_assignment=True)

    id: str = Field(default_factory=new_id, min_length=1)
    created_at: str = Field(default_factory=DateUtils.current_datetime)
    updated_at: str = Field(default_factory=DateUtils.current_datetime)
    version: int = Field(default=1, ge=1)


# Body metrics


class BodyMetricEntry(Entity):
    date: str = Field(pattern=DATE_PATTERN)
    body_weight: float = Field(ge=0)
    weight_unit: WeightUnit
    body_fat_percent: Optional[float] = Field(default=None, ge=0, le=100)
    body_muscle_percent: Optional[float] = Field(default=None, ge=0, le=100)
    notes: Optional[str] = Field(default=None, max_length=1000)


# Goals


class FitnessGoal(Entity):
    title: str = Field(min_length=1)
    description: Optional[str] = None
    category: Literal["weight", "strength", "cardio", "body_composition", "custom"] = "custom"
    goal_type: Literal["target_value", "increase_by", "decrease_by"] = "target_value"
    metric_to_track: str
    start_value: Optional[float] = None
    current_value: Optional[float] = None
    target_value: float
    unit: Optional[str] = None
    start_date: str = Field(pattern=DATE_PATTERN)
    target_date: str = Field(pattern=DATE_PATTERN)
    status: GoalStatus = "active"
    completion_percentage: float = Field(default=0.0, ge=0, le=100)


# Glossary


class MediaItem(BaseModel):
    """Opaque media reference resolved elsewhere."""

    type: Literal["image", "video", "gif"] = "image"
    source: str
    caption: Optional[str] = None


class GlossaryItem(Entity):
    term: str = Field(min_length=1)
    category: Literal["exercise", "nutrition", "recovery", "technique", "equipment"]
    plain_definition: str
    why_it_matters: str = ""
    how_to_do_it_safely: list[str] = Field(default_factory=list)
    common_mistakes: list[str] = Field(default_factory=list)
    media: list[MediaItem] = Field(default_factory=list)
    related_terms: list[str] = Field(default_factory=list)
    difficulty_level: Difficulty = "beginner"


# Exercise catalog


MovementPattern = Literal["hinge", "squat", "press", "pull", "carry", "core"]
ExerciseType = Literal["strength", "cardio", "flexibility", "balance"]


class ExerciseCatalogItem(Entity):
    name: str = Field(min_length=1)
    aliases: list[str] = Field(default_factory=list)
    beginner_friendly_name: Optional[str] = None
    movement_pattern: Optional[MovementPattern] = None
    exercise_type: ExerciseType = "strength"
    primary_muscles: list[str] = Field(default_factory=list)
    secondary_muscles: list[str] = Field(default_factory=list)
    equipment: list[str] = Field(default_factory=list)
    step_by_step_instructions: list[str] = Field(default_factory=list)
    safety_notes: list[str] = Field(default_factory=list)
    media: list[MediaItem] = Field(default_factory=list)
    difficulty_level: Difficulty = "beginner"

    @property
    def display_name(self) -> str:
        return self.beginner_friendly_name or self.name


# Body measurements and progress photos


class Circumferences(BaseModel):
    chest: Optional[float] = Field(default=None, gt=0)
    waist: Optional[float] = Field(default=None, gt=0)
    hips: Optional[float] = Field(default=None, gt=0)
    bicep_left: Optional[float] = Field(default=None, gt=0)
    bicep_right: Optional[float] = Field(default=None, gt=0)
    thigh_left: Optional[float] = Field(default=None, gt=0)
    thigh_right: Optional[float] = Field(default=None, gt=0)
    neck: Optional[float] = Field(default=None, gt=0)
    forearm_left: Optional[float] = Field(default=None, gt=0)
    forearm_right: Optional[float] = Field(default=None, gt=0)
    calf_left: Optional[float] = Field(default=None, gt=0)
    calf_right: Optional[float] = Field(default=None, gt=0)


MEASUREMENT_SITES = tuple(Circumferences.model_fields)


class BodyMeasurement(Entity):
    date: str = Field(pattern=DATE_PATTERN)
    measurements: Circumferences = Field(default_factory=Circumferences)
    measurement_unit: Literal["in", "cm"] = "in"
    notes: Optional[str] = Field(default=None, max_length=1000)


PhotoType = Literal["front", "side", "back", "custom"]


class ProgressPhoto(Entity):
    date: str = Field(pattern=DATE_PATTERN)
    photo_type: PhotoType = "front"
    photo: MediaItem
    measurements_id: Optional[str] = None
    notes: Optional[str] = Field(default=None, max_length=1000)


# Baseline fitness tests


class BaselineTestEntry(Entity):
    month: str = Field(pattern=r"^\d{4}-\d{2}$")
    test_date: str = Field(pattern=DATE_PATTERN)
    rockport_time_mm_ss: Optional[str] = Field(default=None, pattern=r"^\d{1,2}:[0-5]\d$")
    rockport_finish_heart_rate_bpm: Optional[int] = Field(default=None, gt=0)
    twelve_minute_distance: Optional[float] = Field(default=None, gt=0)
    twelve_minute_distance_unit: Literal["miles", "kilometers"] = "miles"
    twelve_minute_average_heart_rate_bpm: Optional[int] = Field(default=None, gt=0)
    longest_continuous_jog_minutes: Optional[float] = Field(default=None, ge=0)
    best_one_minute_heart_rate_drop_bpm: Optional[int] = Field(default=None, ge=0)
    resting_heart_rate_bpm: Optional[int] = Field(default=None, gt=0)
    blood_pressure_systolic: Optional[int] = Field(default=None, gt=0)
    blood_pressure_diastolic: Optional[int] = Field(default=None, gt=0)
    bench_press_1rm_lb: Optional[float] = Field(default=None, gt=0)
    squat_1rm_lb: Optional[float] = Field(default=None, gt=0)
    deadlift_1rm_lb: Optional[float] = Field(default=None, gt=0)
    overhead_press_1rm_lb: Optional[float] = Field(default=None, gt=0)
    pull_up_max_reps: Optional[int] = Field(default=None, ge=0)
    push_up_max_reps: Optional[int] = Field(default=None, ge=0)
    plank_max_seconds: Optional[int] = Field(default=None, ge=0)
    sit_and_reach_inches: Optional[float] = None
    overhead_reach_test_pass: Optional[bool] = None
    notes: Optional[str] = Field(default=None, max_length=1000)


StrengthLevel = Literal["untrained", "novice", "intermediate", "advanced", "elite"]


class FitnessLevel(BaseModel):
    category: Literal["strength", "cardio", "overall"]
    level: StrengthLevel
    percentile: float
    next_level_target: Optional[float] = None
    progress_to_next: float = Field(ge=0, le=100)


class CardioLevel(BaseModel):
    level: Literal["excellent", "good", "fair", "poor", "unknown"]
    fitness_age: int
    percentile: int


# Plans


class RepRange(BaseModel):
    min: int = Field(ge=0)
    max: int = Field(ge=0)


class SetPrescription(BaseModel):
    set_number: int = Field(ge=1)
    target_repetitions: Union[int, RepRange]
    target_weight_value: Optional[float] = None
    target_weight_unit: Optional[WeightUnit] = None
    target_weight_percentage: Optional[float] = None
    rest_seconds: Optional[int] = None
    tempo_text: Optional[str] = None
    rpe_target: Optional[float] = None
    notes_for_user: Optional[str] = None


class CardioInterval(BaseModel):
    interval_number: int
    hard_seconds: int
    easy_seconds: int
    target_heart_rate_range_bpm: Optional[tuple[int, int]] = None
    target_pace: Optional[str] = None
    target_incline_percent: Optional[float] = None
    notes: Optional[str] = None


class CardioBlock(BaseModel):
    warm_up_minutes: int
    work_intervals: list[CardioInterval] = Field(default_factory=list)
    cool_down_minutes: int
    safety_notes: str = ""
    equipment_needed: list[str] = Field(default_factory=list)


class ExercisePrescription(BaseModel):
    exercise_id: str
    clear_description: str = ""
    order_index: int = 0
    sets: Optional[list[SetPrescription]] = None
    cardio_block: Optional[CardioBlock] = None
    rest_notes: Optional[str] = None
    form_cues: list[str] = Field(default_factory=list)


class Session(BaseModel):
    id: str = Field(default_factory=new_id)
    session_type: SessionType
    title: str
    description: Optional[str] = None
    estimated_duration_minutes: int = 0
    exercises: list[ExercisePrescription] = Field(default_factory=list)
    warm_up_notes: Optional[str] = None
    cool_down_notes: Optional[str] = None


class Day(BaseModel):
    day_of_week: int = Field(ge=0, le=6)
    date: Optional[str] = Field(default=None, pattern=DATE_PATTERN)
    is_rest_day: bool = False
    sessions: list[Session] = Field(default_factory=list)


class Week(BaseModel):
    index: int = Field(ge=1)
    deload_week: bool = False
    days: list[Day] = Field(default_factory=list)


class Phase(BaseModel):
    name: Literal["Base", "Build", "Peak"]
    description: Optional[str] = None
    duration_weeks: int = Field(ge=0)
    weeks: list[Week] = Field(default_factory=list)


class SessionPath(BaseModel):
    """Index address of a session inside a plan tree."""

    model_config = ConfigDict(frozen=True)

    phase_index: int
    week_index: int
    day_index: int
    session_index: int

    def resolve(self, plan: "ProgramPlan") -> Optional[Session]:
        """Return the addressed session, or None when any index is out of range."""
        indices = (self.phase_index, self.week_index, self.day_index, self.session_index)
        if any(i < 0 for i in indices):
            return None
        if self.phase_index >= len(plan.phases):
            return None
        phase = plan.phases[self.phase_index]
        if self.week_index >= len(phase.weeks):
            return None
        week = phase.weeks[self.week_index]
        if self.day_index >= len(week.days):
            return None
        day = week.days[self.day_index]
        if self.session_index >= len(day.sessions):
            return None
        return day.sessions[self.session_index]


class ProgramPlan(Entity):
    title: str = Field(min_length=1)
    description: Optional[str] = None
    duration_weeks: int = Field(ge=0)
    difficulty_level: Difficulty = "beginner"
    phases: list[Phase] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    author: Optional[str] = None
    is_template: bool = False

    def iter_sessions(self) -> Iterator[tuple[SessionPath, Day, Session]]:
        """Yield every leaf session in tree order with its path and owning day."""
        for p, phase in enumerate(self.phases):
            for w, week in enumerate(phase.weeks):
                for d, day in enumerate(week.days):
                    for s, session in enumerate(day.sessions):
                        yield SessionPath(
                            phase_index=p, week_index=w, day_index=d, session_index=s
                        ), day, session

    def session_types(self) -> set[str]:
        return {session.session_type for _, _, session in self.iter_sessions()}


class CompletedSession(Entity):
    session_id: str
    completion_date: str
    session_path: SessionPath
    plan_id: str
    actual_duration_minutes: Optional[int] = None
    completion_notes: Optional[str] = None


class DurationRange(BaseModel):
    min: Optional[int] = None
    max: Optional[int] = None


class PlanSearchFilters(BaseModel):
    query: Optional[str] = None
    difficulty_level: Optional[Difficulty] = None
    duration_weeks: Optional[DurationRange] = None
    session_types: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    is_template: Optional[bool] = None


class PlanProgress(BaseModel):
    plan_id: str
    current_phase_index: int
    current_week_index: int
    completed_sessions: set[str]
    total_sessions: int
    completed_count: int
    completion_percentage: float
    last_session_date: Optional[str] = None


class PlanStats(BaseModel):
    total_sessions: int
    sessions_by_type: dict[str, int]
    total_exercises: int
    unique_exercises: int
    estimated_total_duration_minutes: int
    phases_count: int
    weeks_per_phase: list[int]


# Workout logs


class PerformedSet(BaseModel):
    set_number: int = Field(ge=1)
    repetitions_done: int = Field(ge=0)
    weight_value: Optional[float] = None
    weight_unit: Optional[WeightUnit] = None
    rest_seconds_observed: Optional[int] = None
    perceived_effort_text: str = "moderately hard"
    rpe_score: Optional[float] = Field(default=None, ge=0, le=10)
    tempo_notes: Optional[str] = None
    form_breakdown: bool = False
    notes: Optional[str] = None
    pain_back_0_to_10: Optional[int] = Field(default=None, ge=0, le=10)
    pain_knee_0_to_10: Optional[int] = Field(default=None, ge=0, le=10)
    pain_shoulder_0_to_10: Optional[int] = Field(default=None, ge=0, le=10)
    pain_other_location: Optional[str] = None
    pain_other_0_to_10: Optional[int] = Field(default=None, ge=0, le=10)


class StrengthEntry(BaseModel):
    type: Literal["strength"] = "strength"
    exercise_id: str
    exercise_name: str
    order_index: int = 0
    performed_sets: list[PerformedSet] = Field(default_factory=list)
    notes: Optional[str] = None
    form_rating: Optional[int] = Field(default=None, ge=1, le=5)


class CardioSegment(BaseModel):
    segment_number: int
    label: str
    duration_seconds: int = Field(ge=0)
    distance_value: Optional[float] = None
    distance_unit: Optional[Literal["miles", "kilometers", "meters"]] = None
    speed_mph_or_kph: Optional[float] = None
    incline_percent: Optional[float] = None
    resistance_level: Optional[int] = None
    average_heart_rate_bpm: Optional[int] = None
    max_heart_rate_bpm: Optional[int] = None
    perceived_effort: Optional[EffortText] = None
    notes: Optional[str] = None


class CardioEntry(BaseModel):
    type: Literal["cardio"] = "cardio"
    mode: str
    total_duration_seconds: int = 0
    segments: list[CardioSegment] = Field(default_factory=list)
    average_heart_rate_bpm: Optional[int] = None
    max_heart_rate_bpm: Optional[int] = None
    calories_estimated: Optional[float] = None
    notes: Optional[str] = None


class FlexibilityEntry(BaseModel):
    type: Literal["flexibility"] = "flexibility"
    exercise_id: str
    exercise_name: str
    duration_seconds: int = Field(default=0, ge=0)
    hold_time_seconds: Optional[int] = None
    repetitions: Optional[int] = None
    perceived_stretch_intensity: Optional[Literal["light", "moderate", "deep"]] = None
    notes: Optional[str] = None


ExerciseEntry = Annotated[
    Union[StrengthEntry, CardioEntry, FlexibilityEntry], Field(discriminator="type")
]


class WorkoutLogEntry(Entity):
    date_time_start: str
    date_time_end: Optional[str] = None
    session_plan_ref: Optional[str] = None
    session_title: Optional[str] = None
    entries: list[ExerciseEntry] = Field(default_factory=list)
    session_notes: Optional[str] = None
    overall_rating: Optional[int] = Field(default=None, ge=1, le=5)
    energy_level_start: Optional[int] = Field(default=None, ge=1, le=5)
    energy_level_end: Optional[int] = Field(default=None, ge=1, le=5)
    environment: Optional[Literal["gym", "home", "outdoor", "other"]] = None

    def strength_entry(self, exercise_id: str) -> Optional[StrengthEntry]:
        for entry in self.entries:
            if isinstance(entry, StrengthEntry) and entry.exercise_id == exercise_id:
                return entry
        return None


class ActiveWorkoutSession(BaseModel):
    """In-memory wrapper around the log of a workout in progress."""

    id: str = Field(default_factory=new_id)
    workout_log: WorkoutLogEntry
    current_exercise_index: int = 0
    session_status: SessionStatus = "not-started"
    start_time: str = Field(default_factory=DateUtils.current_datetime)
    pause_time: Optional[str] = None
    pause_duration: float = 0.0
    last_activity: str = Field(default_factory=DateUtils.current_datetime)


class ProgressTrend(BaseModel):
    trend: Literal["increasing", "decreasing", "stable"]
    percentage: float
    period: str


class WorkoutStats(BaseModel):
    total_volume: float
    average_rpe: float
    max_weight: float
    total_reps: int
    exercise_count: int
    duration: int


class SessionProgress(BaseModel):
    exercises_completed: int
    total_exercises: int
    sets_completed: int
    total_sets: int
    elapsed_time: int
    estimated_time_remaining: int


# Settings


class AppSettings(Entity):
    unit_system: UnitSystem = "imperial"
    theme: Literal["system", "light", "dark"] = "system"
    language: Literal["en"] = "en"
    data_version: int = Field(default=1, ge=1)
    privacy_acknowledged: bool = False
    default_rest_time_seconds: int = Field(default=90, ge=0)
    auto_save_workouts: bool = True
    weight_increment_lb: float = 5.0
    weight_increment_kg: float = 2.5
