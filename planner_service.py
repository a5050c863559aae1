from __future__ import annotations

import datetime
import logging
from typing import Optional

from date_utils import DateUtils
from db import ExerciseRepository, InvalidSessionPathError, PlanRepository
from friendly_sentences import FriendlySentenceGenerator
from models import (
    CardioBlock,
    CardioInterval,
    Day,
    ExerciseCatalogItem,
    ExercisePrescription,
    Phase,
    ProgramPlan,
    RepRange,
    Session,
    SessionPath,
    SetPrescription,
    Week,
)

logger = logging.getLogger(__name__)


class PlannerService:
    """Builds and edits workout plans stored in a :class:`PlanRepository`."""

    DEFAULT_CARDIO_SAFETY = "Stop immediately if you feel dizzy or short of breath"

    def __init__(
        self, plan_repo: PlanRepository, exercise_repo: Optional[ExerciseRepository] = None
    ) -> None:
        self.plans = plan_repo
        self.exercises = exercise_repo

    @staticmethod
    def _strength_session() -> Session:
        return Session(
            session_type="strength",
            title="Strength Training",
            description="Full body strength session",
            estimated_duration_minutes=45,
            warm_up_notes="5-10 minutes of light movement and dynamic stretches",
            cool_down_notes="5-10 minutes of walking and static stretches",
        )

    @staticmethod
    def _interval_session() -> Session:
        return Session(
            session_type="intervals",
            title="Interval Training",
            description="High-intensity interval training",
            estimated_duration_minutes=30,
            warm_up_notes="5 minutes easy walking",
            cool_down_notes="5 minutes easy walking until heart rate recovers",
        )

    @staticmethod
    def _walk_session() -> Session:
        return Session(
            session_type="steady_cardio",
            title="Easy Walk",
            description="Steady state cardio",
            estimated_duration_minutes=30,
            warm_up_notes="Start with 2-3 minutes very easy pace",
            cool_down_notes="End with 2-3 minutes very easy pace",
        )

    @classmethod
    def create_default_week(cls, index: int, deload: bool = False) -> Week:
        """Sunday-first week: strength Mon/Fri, intervals Wed, walk Sat."""
        sessions = {
            1: cls._strength_session,
            3: cls._interval_session,
            5: cls._strength_session,
            6: cls._walk_session,
        }
        days = []
        for day_of_week in range(7):
            factory = sessions.get(day_of_week)
            days.append(
                Day(
                    day_of_week=day_of_week,
                    is_rest_day=factory is None,
                    sessions=[factory()] if factory else [],
                )
            )
        return Week(index=index, deload_week=deload, days=days)

    @classmethod
    def create_phase(cls, name: str, duration_weeks: int = 4) -> Phase:
        weeks = [
            cls.create_default_week(i, i == duration_weeks)
            for i in range(1, duration_weeks + 1)
        ]
        return Phase(
            name=name,
            description=f"{name} phase",
            duration_weeks=duration_weeks,
            weeks=weeks,
        )

    def create_new_plan(self, title: str = "New Workout Plan") -> ProgramPlan:
        """Create a four-week beginner plan whose last week is a deload."""
        phase = self.create_phase("Base", 4)
        phase.description = "Building foundation"
        plan = ProgramPlan(
            title=title,
            description="A beginner-friendly workout program",
            duration_weeks=4,
            difficulty_level="beginner",
            phases=[phase],
        )
        plan = self.plans.save(plan)
        logger.info(f"Created plan {plan.id}")
        return plan

    def create_from_template(self, template_id: str, title: str) -> ProgramPlan:
        return self.plans.duplicate(template_id, title)

    def add_phase(self, plan_id: str, name: str, duration_weeks: int = 4) -> ProgramPlan:
        plan = self.plans.fetch(plan_id)
        plan.phases.append(self.create_phase(name, duration_weeks))
        plan.duration_weeks += duration_weeks
        return self.plans.save(plan)

    def add_week_to_phase(self, plan_id: str, phase_index: int) -> ProgramPlan:
        plan = self.plans.fetch(plan_id)
        if not 0 <= phase_index < len(plan.phases):
            raise InvalidSessionPathError(f"phase {phase_index} not found")
        phase = plan.phases[phase_index]
        phase.weeks.append(self.create_default_week(len(phase.weeks) + 1))
        phase.duration_weeks += 1
        plan.duration_weeks += 1
        return self.plans.save(plan)

    @staticmethod
    def _require_session(plan: ProgramPlan, path: SessionPath) -> Session:
        session = path.resolve(plan)
        if session is None:
            raise InvalidSessionPathError(f"invalid session path {path.model_dump()}")
        return session

    def schedule_session(
        self, plan_id: str, path: SessionPath, date: str | datetime.date
    ) -> ProgramPlan:
        """Pin the day owning ``path`` to a calendar date."""
        plan = self.plans.fetch(plan_id)
        self._require_session(plan, path)
        day = plan.phases[path.phase_index].weeks[path.week_index].days[path.day_index]
        day.date = DateUtils.to_date(date).isoformat()
        return self.plans.save(plan)

    def update_session_exercises(
        self, plan_id: str, path: SessionPath, exercises: list[ExercisePrescription]
    ) -> Session:
        return self.plans.update_session(
            plan_id, path, {"exercises": [e.model_dump() for e in exercises]}
        )

    @classmethod
    def create_default_prescription(
        cls, exercise: ExerciseCatalogItem, session_type: str, order_index: int = 0
    ) -> ExercisePrescription:
        """Intervals for cardio work, otherwise three sets of 8-12 reps."""
        if exercise.exercise_type == "cardio" or session_type == "intervals":
            return ExercisePrescription(
                exercise_id=exercise.id,
                order_index=order_index,
                cardio_block=CardioBlock(
                    warm_up_minutes=5,
                    work_intervals=[
                        CardioInterval(interval_number=1, hard_seconds=30, easy_seconds=90)
                    ],
                    cool_down_minutes=5,
                    safety_notes=cls.DEFAULT_CARDIO_SAFETY,
                ),
            )
        sets = [
            SetPrescription(
                set_number=n,
                target_repetitions=RepRange(min=8, max=12),
                rest_seconds=60,
            )
            for n in range(1, 4)
        ]
        return ExercisePrescription(exercise_id=exercise.id, order_index=order_index, sets=sets)

    def add_exercise_to_session(
        self, plan_id: str, path: SessionPath, exercise: ExerciseCatalogItem
    ) -> Session:
        plan = self.plans.fetch(plan_id)
        session = self._require_session(plan, path)
        session.exercises.append(
            self.create_default_prescription(
                exercise, session.session_type, len(session.exercises)
            )
        )
        self.plans.save(plan)
        return session

    def remove_exercise_from_session(
        self, plan_id: str, path: SessionPath, exercise_index: int
    ) -> Session:
        plan = self.plans.fetch(plan_id)
        session = self._require_session(plan, path)
        if not 0 <= exercise_index < len(session.exercises):
            raise IndexError(f"exercise {exercise_index} not found")
        del session.exercises[exercise_index]
        for index, prescription in enumerate(session.exercises):
            prescription.order_index = index
        self.plans.save(plan)
        return session

    def reorder_exercises(
        self, plan_id: str, path: SessionPath, start_index: int, end_index: int
    ) -> Session:
        """Move the exercise at ``start_index`` to ``end_index``."""
        plan = self.plans.fetch(plan_id)
        session = self._require_session(plan, path)
        if not 0 <= start_index < len(session.exercises):
            raise IndexError(f"exercise {start_index} not found")
        moved = session.exercises.pop(start_index)
        session.exercises.insert(end_index, moved)
        for index, prescription in enumerate(session.exercises):
            prescription.order_index = index
        self.plans.save(plan)
        return session

    @staticmethod
    def generate_session_descriptions(
        session: Session, catalog: list[ExerciseCatalogItem], unit_system: str = "imperial"
    ) -> Session:
        """Fill empty descriptions with generated sentences."""
        by_id = {item.id: item for item in catalog}
        for prescription in session.exercises:
            exercise = by_id.get(prescription.exercise_id)
            if exercise is not None and not prescription.clear_description.strip():
                prescription.clear_description = (
                    FriendlySentenceGenerator.generate_exercise_description(
                        prescription, exercise, unit_system
                    )
                )
        return session

    def describe_session(
        self, plan_id: str, path: SessionPath, unit_system: str = "imperial"
    ) -> Session:
        """Generate missing descriptions for a stored session from the catalog."""
        if self.exercises is None:
            raise ValueError("no exercise catalog configured")
        plan = self.plans.fetch(plan_id)
        session = self._require_session(plan, path)
        catalog = self.exercises.get_many(p.exercise_id for p in session.exercises)
        self.generate_session_descriptions(session, catalog, unit_system)
        self.plans.save(plan)
        return session

    @staticmethod
    def get_session_by_path(plan: ProgramPlan, path: SessionPath) -> Optional[Session]:
        return path.resolve(plan)

    @staticmethod
    def get_all_sessions_with_paths(plan: ProgramPlan) -> list[dict]:
        return [
            {"session": session, "path": path, "date": day.date}
            for path, day, session in plan.iter_sessions()
        ]

    @classmethod
    def get_next_session_date(
        cls, plan: ProgramPlan, completed_sessions: set[str], today: str | None = None
    ) -> Optional[str]:
        """Date of the first session not yet completed, today when unscheduled."""
        for entry in cls.get_all_sessions_with_paths(plan):
            if entry["session"].id in completed_sessions:
                continue
            return entry["date"] or today or DateUtils.current_date()
        return None
