from __future__ import annotations

import logging
from typing import Optional

from config import YamlConfig
from db import (
    COLLECTIONS,
    AsyncWorkoutRepository,
    BaselineRepository,
    BodyMeasurementsRepository,
    DocumentStore,
    ExerciseRepository,
    GlossaryRepository,
    GoalRepository,
    MetricsRepository,
    PlanRepository,
    ProgressPhotosRepository,
    SettingsRepository,
    WorkoutRepository,
)
from planner_service import PlannerService
from settings_schema import ConfigSchema
from workout_session import SessionStateError, WorkoutSessionManager

logger = logging.getLogger(__name__)


class FitnessApp:
    """Application context wiring config, storage and services together."""

    def __init__(self, config_path: str = "fittrack.yaml", db_path: Optional[str] = None) -> None:
        self.yaml = YamlConfig(config_path)
        self._db_path_override = db_path
        self.config: Optional[ConfigSchema] = None

    @property
    def initialized(self) -> bool:
        return self.config is not None

    def init(self) -> "FitnessApp":
        """Resolve configuration and open every repository."""
        config = self.yaml.resolve()
        if self._db_path_override:
            config = config.model_copy(update={"db_path": self._db_path_override})
        self.config = config
        db_path = config.db_path
        self.store = DocumentStore(db_path)
        self.plans = PlanRepository(db_path)
        self.goals = GoalRepository(db_path)
        self.metrics = MetricsRepository(db_path)
        self.glossary = GlossaryRepository(db_path)
        self.exercises = ExerciseRepository(db_path)
        self.measurements = BodyMeasurementsRepository(db_path)
        self.photos = ProgressPhotosRepository(db_path)
        self.baselines = BaselineRepository(db_path)
        self.workouts = WorkoutRepository(db_path)
        self.settings = SettingsRepository(db_path)
        self.planner = PlannerService(self.plans, self.exercises)
        user_settings = self.settings.initialize()
        self.sessions = WorkoutSessionManager(
            AsyncWorkoutRepository(db_path),
            autosave_interval=config.autosave_interval,
            auto_save=user_settings.auto_save_workouts,
        )
        logger.info(f"Application initialized with database {db_path}")
        return self

    def reset(self) -> None:
        """Delete all stored data and restore default settings."""
        if not self.initialized:
            raise SessionStateError("application is not initialized")
        if self.sessions.autosave_running:
            raise SessionStateError("clear the active workout session before reset")
        for name in COLLECTIONS:
            self.store.clear(name)
        self.sessions.active = None
        self.sessions.planned_session = None
        self.settings.initialize()
        logger.info("Application data reset")
