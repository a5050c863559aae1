from __future__ import annotations

import asyncio
import contextlib
import datetime
import inspect
import logging
from typing import Any, Callable, Optional

from date_utils import DateUtils
from db import AsyncWorkoutRepository, StorageError
from models import (
    ActiveWorkoutSession,
    CardioEntry,
    CardioSegment,
    FlexibilityEntry,
    PerformedSet,
    Session,
    SessionProgress,
    StrengthEntry,
    WorkoutLogEntry,
    WorkoutStats,
)
from workout_analysis import WorkoutAnalysis

logger = logging.getLogger(__name__)


class SessionStateError(RuntimeError):
    """Raised when an operation does not fit the current session state."""


def _utc_now() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


class WorkoutSessionManager:
    """Owns the single workout in progress and its auto-save task."""

    SECONDS_PER_PLANNED_SET = 120
    DEFAULT_SETS_PER_EXERCISE = 3
    SECONDS_PER_EXERCISE = 300

    def __init__(
        self,
        repository: AsyncWorkoutRepository,
        autosave_interval: float = 30.0,
        auto_save: bool = True,
        clock: Callable[[], datetime.datetime] = _utc_now,
    ) -> None:
        self.repository = repository
        self.autosave_interval = autosave_interval
        self.auto_save = auto_save
        self._clock = clock
        self.active: Optional[ActiveWorkoutSession] = None
        self.planned_session: Optional[Session] = None
        self._autosave_task: Optional[asyncio.Task] = None

    def _now(self) -> str:
        return self._clock().isoformat()

    def _require_session(self) -> ActiveWorkoutSession:
        if self.active is None:
            raise SessionStateError("no workout session in progress")
        return self.active

    def _require_open(self) -> ActiveWorkoutSession:
        active = self._require_session()
        if active.session_status not in ("active", "paused"):
            raise SessionStateError(f"workout session is {active.session_status}")
        return active

    def _touch(self) -> None:
        self.active.last_activity = self._now()

    @property
    def autosave_running(self) -> bool:
        return self._autosave_task is not None and not self._autosave_task.done()

    def _start_autosave(self) -> None:
        if not self.auto_save or self.autosave_interval <= 0 or self.autosave_running:
            return
        self._autosave_task = asyncio.create_task(self._autosave_loop())

    async def _stop_autosave(self) -> None:
        task, self._autosave_task = self._autosave_task, None
        if task is None or task.done():
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task

    async def _autosave_loop(self) -> None:
        while True:
            await asyncio.sleep(self.autosave_interval)
            if self.active is None or self.active.session_status != "active":
                continue
            try:
                await self.save_session()
            except StorageError as exc:
                logger.error(f"Auto-save of workout {self.active.workout_log.id} failed: {exc}")

    async def start_session(
        self, session: Optional[Session] = None, title: Optional[str] = None
    ) -> ActiveWorkoutSession:
        """Begin logging a workout, optionally following a planned session."""
        if self.active is not None and self.active.session_status in ("active", "paused"):
            raise SessionStateError("a workout session is already in progress")
        await self._stop_autosave()
        now = self._now()
        log = WorkoutLogEntry(
            date_time_start=now,
            session_plan_ref=session.id if session else None,
            session_title=session.title if session else title,
            session_notes="",
            created_at=now,
            updated_at=now,
        )
        self.planned_session = session
        self.active = ActiveWorkoutSession(
            workout_log=log,
            session_status="active",
            start_time=now,
            last_activity=now,
        )
        await self.save_session()
        self._start_autosave()
        logger.info(f"Workout session {self.active.id} started")
        return self.active

    def add_exercise_entry(
        self, exercise_id: str, exercise_name: str, entry_type: str = "strength"
    ) -> int:
        """Append an empty entry and return its index."""
        active = self._require_open()
        entries = active.workout_log.entries
        if entry_type == "strength":
            entry = StrengthEntry(
                exercise_id=exercise_id, exercise_name=exercise_name, order_index=len(entries)
            )
        elif entry_type == "cardio":
            entry = CardioEntry(mode=exercise_name)
        elif entry_type == "flexibility":
            entry = FlexibilityEntry(exercise_id=exercise_id, exercise_name=exercise_name)
        else:
            raise ValueError(f"unknown entry type: {entry_type}")
        entries.append(entry)
        self._touch()
        return len(entries) - 1

    def _entry(self, index: int, kind: type):
        entries = self._require_open().workout_log.entries
        if not 0 <= index < len(entries):
            raise IndexError(f"exercise entry {index} not found")
        entry = entries[index]
        if not isinstance(entry, kind):
            raise ValueError(f"exercise entry {index} is not a {kind.__name__}")
        return entry

    async def complete_set(self, exercise_index: int, performed: PerformedSet | dict) -> StrengthEntry:
        """Record a set, replacing any earlier set with the same number."""
        entry = self._entry(exercise_index, StrengthEntry)
        performed = PerformedSet.model_validate(performed)
        sets = [s for s in entry.performed_sets if s.set_number != performed.set_number]
        sets.append(performed)
        entry.performed_sets = sorted(sets, key=lambda s: s.set_number)
        self._touch()
        await self.save_session()
        return entry

    async def log_cardio_segment(self, exercise_index: int, segment: CardioSegment | dict) -> CardioEntry:
        """Record a cardio segment and refresh the entry totals."""
        entry = self._entry(exercise_index, CardioEntry)
        segment = CardioSegment.model_validate(segment)
        segments = [s for s in entry.segments if s.segment_number != segment.segment_number]
        segments.append(segment)
        entry.segments = sorted(segments, key=lambda s: s.segment_number)
        entry.total_duration_seconds = sum(s.duration_seconds for s in entry.segments)
        rates = [s.average_heart_rate_bpm for s in entry.segments if s.average_heart_rate_bpm]
        entry.average_heart_rate_bpm = round(sum(rates) / len(rates)) if rates else None
        peaks = [s.max_heart_rate_bpm for s in entry.segments if s.max_heart_rate_bpm]
        entry.max_heart_rate_bpm = max(peaks) if peaks else None
        self._touch()
        await self.save_session()
        return entry

    async def complete_exercise(self, exercise_index: int) -> int:
        """Advance the exercise pointer, staying put on the last entry."""
        active = self._require_open()
        next_index = exercise_index + 1
        if next_index < len(active.workout_log.entries):
            active.current_exercise_index = next_index
        else:
            active.current_exercise_index = exercise_index
        self._touch()
        await self.save_session()
        return active.current_exercise_index

    async def pause_session(self) -> None:
        if self.active is None or self.active.session_status != "active":
            return
        await self._stop_autosave()
        self.active.session_status = "paused"
        self.active.pause_time = self._now()
        self._touch()

    async def resume_session(self) -> None:
        if self.active is None or self.active.session_status != "paused":
            return
        now = self._clock()
        if self.active.pause_time:
            paused = (now - DateUtils.parse(self.active.pause_time)).total_seconds()
            self.active.pause_duration += max(0.0, paused)
        self.active.session_status = "active"
        self.active.pause_time = None
        self._touch()
        self._start_autosave()

    async def _finish(self, status: str, notes: Optional[str], rating: Optional[int]) -> WorkoutLogEntry:
        active = self._require_open()
        await self._stop_autosave()
        log = active.workout_log
        previous = (log.date_time_end, log.session_notes, log.overall_rating)
        log.date_time_end = self._now()
        log.session_notes = notes
        if rating is not None:
            log.overall_rating = rating
        try:
            saved = await self.save_session()
        except StorageError:
            log.date_time_end, log.session_notes, log.overall_rating = previous
            if active.session_status == "active":
                self._start_autosave()
            raise
        active.session_status = status
        logger.info(f"Workout session {active.id} {status}")
        return saved

    async def complete_session(
        self, session_notes: Optional[str] = None, overall_rating: Optional[int] = None
    ) -> WorkoutLogEntry:
        return await self._finish("completed", session_notes, overall_rating)

    async def abandon_session(self) -> WorkoutLogEntry:
        notes = (self._require_open().workout_log.session_notes or "") + " [Session abandoned]"
        return await self._finish("abandoned", notes, None)

    async def save_session(self) -> WorkoutLogEntry:
        """Persist the workout log of the current session."""
        active = self._require_session()
        log = active.workout_log
        saved = await self.repository.save(log)
        # entries may have changed while the write was awaited
        log.created_at = saved.created_at
        log.updated_at = saved.updated_at
        log.version = saved.version
        self._touch()
        return saved

    async def clear_session(self) -> None:
        await self._stop_autosave()
        self.active = None
        self.planned_session = None

    def _elapsed_seconds(self) -> int:
        active = self.active
        now = self._clock()
        paused = active.pause_duration
        if active.session_status == "paused" and active.pause_time:
            paused += (now - DateUtils.parse(active.pause_time)).total_seconds()
        elapsed = (now - DateUtils.parse(active.start_time)).total_seconds() - paused
        return max(0, int(elapsed))

    def get_session_progress(self) -> SessionProgress:
        """Estimate progress against the planned session, or 3 sets per exercise."""
        if self.active is None:
            return SessionProgress(
                exercises_completed=0,
                total_exercises=0,
                sets_completed=0,
                total_sets=0,
                elapsed_time=0,
                estimated_time_remaining=0,
            )
        entries = self.active.workout_log.entries
        strength = [e for e in entries if isinstance(e, StrengthEntry)]
        sets_completed = sum(len(e.performed_sets) for e in strength)
        completed = self.active.current_exercise_index
        planned = self.planned_session.exercises if self.planned_session else []
        if planned:
            total_exercises = max(len(planned), len(entries))
            total_sets = sum(len(p.sets or []) for p in planned)
            remaining = max(0, total_sets - sets_completed) * self.SECONDS_PER_PLANNED_SET
        else:
            total_exercises = len(entries)
            total_sets = len(strength) * self.DEFAULT_SETS_PER_EXERCISE
            remaining = max(0, total_exercises - completed) * self.SECONDS_PER_EXERCISE
        return SessionProgress(
            exercises_completed=completed,
            total_exercises=total_exercises,
            sets_completed=sets_completed,
            total_sets=total_sets,
            elapsed_time=self._elapsed_seconds(),
            estimated_time_remaining=remaining,
        )

    def get_workout_stats(self) -> WorkoutStats:
        if self.active is None:
            return WorkoutStats(
                total_volume=0,
                average_rpe=0,
                max_weight=0,
                total_reps=0,
                exercise_count=0,
                duration=0,
            )
        stats = WorkoutAnalysis.generate_workout_stats(self.active.workout_log)
        return stats.model_copy(update={"duration": self._elapsed_seconds()})


class RestTimer:
    """Countdown between sets, ticking once per ``tick`` seconds."""

    def __init__(
        self, on_complete: Optional[Callable[[], Any]] = None, tick: float = 1.0
    ) -> None:
        self.on_complete = on_complete
        self.tick = tick
        self.initial_time = 0
        self.time_remaining = 0
        self.is_active = False
        self.is_completed = False
        self._task: Optional[asyncio.Task] = None

    @property
    def progress(self) -> float:
        if self.initial_time <= 0:
            return 0.0
        return (self.initial_time - self.time_remaining) / self.initial_time

    def _cancel(self) -> None:
        task, self._task = self._task, None
        if task is not None and not task.done() and task is not asyncio.current_task():
            task.cancel()

    def _run(self) -> None:
        self.is_active = True
        self._task = asyncio.create_task(self._countdown())

    async def _countdown(self) -> None:
        while self.time_remaining > 0:
            await asyncio.sleep(self.tick)
            self.time_remaining -= 1
        self.is_active = False
        self.is_completed = True
        self._task = None
        if self.on_complete is not None:
            result = self.on_complete()
            if inspect.isawaitable(result):
                await result

    def start(self, seconds: int) -> None:
        if seconds <= 0:
            raise ValueError("rest time must be positive")
        self._cancel()
        self.initial_time = seconds
        self.time_remaining = seconds
        self.is_completed = False
        self._run()

    def pause(self) -> None:
        self._cancel()
        self.is_active = False

    def resume(self) -> None:
        if self.time_remaining > 0 and not self.is_active:
            self._run()

    def extend(self, seconds: int) -> None:
        self.time_remaining += seconds
        self.initial_time += seconds

    def skip(self) -> None:
        self._cancel()
        self.is_active = False
        self.time_remaining = 0
        self.is_completed = True

    def reset(self) -> None:
        self._cancel()
        self.is_active = False
        self.time_remaining = 0
        self.initial_time = 0
        self.is_completed = False

    async def wait(self) -> None:
        """Block until the running countdown ends."""
        if self._task is not None:
            with contextlib.suppress(asyncio.CancelledError):
                await self._task
