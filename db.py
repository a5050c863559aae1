import sqlite3
import aiosqlite
import json
import logging
from collections import Counter
from contextlib import contextmanager, asynccontextmanager
from typing import Iterable, List, Optional, Tuple

from pydantic import BaseModel, ValidationError

from date_utils import DateUtils
from metrics_analysis import MetricsAnalysis
from models import (
    MEASUREMENT_SITES,
    AppSettings,
    BaselineTestEntry,
    BodyMeasurement,
    BodyMetricEntry,
    CompletedSession,
    Entity,
    ExerciseCatalogItem,
    FitnessGoal,
    GlossaryItem,
    PlanProgress,
    PlanSearchFilters,
    PlanStats,
    ProgramPlan,
    ProgressPhoto,
    Session,
    SessionPath,
    StrengthEntry,
    WorkoutLogEntry,
    new_id,
)
from settings_schema import SettingsSchema, validate_settings

logger = logging.getLogger(__name__)


class EntityValidationError(ValueError):
    """Raised when a document does not match its entity schema."""


class NotFoundError(ValueError):
    """Raised when an operation addresses an id that is not stored."""


class InvalidSessionPathError(ValueError):
    """Raised when a session path points outside the current plan tree."""


class InvalidTransitionError(ValueError):
    """Raised on an illegal goal status change."""


class StorageError(RuntimeError):
    """Raised when the underlying SQLite database fails a write."""


def _document_table(name: str) -> Tuple[str, List[str]]:
    return (
        f"""CREATE TABLE {name} (
                id TEXT PRIMARY KEY,
                data TEXT NOT NULL,
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL,
                version INTEGER NOT NULL DEFAULT 1
            );""",
        ["id", "data", "created_at", "updated_at", "version"],
    )


COLLECTION_MODELS = {
    "plans": ProgramPlan,
    "completed_sessions": CompletedSession,
    "goals": FitnessGoal,
    "glossary": GlossaryItem,
    "workouts": WorkoutLogEntry,
    "metrics": BodyMetricEntry,
    "body_measurements": BodyMeasurement,
    "progress_photos": ProgressPhoto,
    "baselines": BaselineTestEntry,
    "exercises": ExerciseCatalogItem,
    "settings": AppSettings,
}

COLLECTIONS = tuple(COLLECTION_MODELS)


class Database:
    """Provides SQLite connection management and schema initialization."""

    _TABLE_DEFINITIONS = {name: _document_table(name) for name in COLLECTIONS}

    def __init__(self, db_path: str = "fittrack.db") -> None:
        self._db_path = db_path
        try:
            self._ensure_schema()
        except sqlite3.Error as exc:
            logger.error(f"Failed to initialize database {db_path}: {exc}")
            raise StorageError(str(exc)) from exc

    @property
    def db_path(self) -> str:
        return self._db_path

    @contextmanager
    def _connection(self):
        connection = sqlite3.connect(self._db_path)
        try:
            yield connection
            connection.commit()
        finally:
            connection.close()

    def _ensure_schema(self) -> None:
        with self._connection() as conn:
            for table, (sql, columns) in self._TABLE_DEFINITIONS.items():
                self._ensure_table(conn, table, sql, columns)

    def _ensure_table(
        self, conn: sqlite3.Connection, table: str, sql: str, columns: List[str]
    ) -> None:
        cur = conn.execute(
            "SELECT name FROM sqlite_master WHERE type='table' AND name=?;", (table,)
        )
        if cur.fetchone() is None:
            conn.execute(sql)
            return

        cur = conn.execute(f"PRAGMA table_info({table});")
        existing_cols = [row[1] for row in cur.fetchall()]
        if existing_cols == columns:
            return

        conn.execute(f"ALTER TABLE {table} RENAME TO {table}_old;")
        conn.execute(sql)

        common = [c for c in existing_cols if c in columns]
        if common:
            cols = ", ".join(common)
            missing = [c for c in columns if c not in existing_cols]
            if missing:
                def default_val(col: str) -> str:
                    if col == "data":
                        return "'{}'"
                    if col == "version":
                        return "1"
                    if col in ("created_at", "updated_at"):
                        return "datetime('now')"
                    return "NULL"

                defaults = ", ".join(default_val(c) for c in missing)
                conn.execute(
                    f"INSERT INTO {table} ({cols}, {', '.join(missing)}) SELECT {cols}, {defaults} FROM {table}_old;"
                )
            else:
                conn.execute(
                    f"INSERT INTO {table} ({cols}) SELECT {cols} FROM {table}_old;"
                )
        conn.execute(f"DROP TABLE {table}_old;")


class BaseRepository(Database):
    """Base repository providing helper methods.

    Write failures are logged and raised as :class:`StorageError`; read
    failures are logged and degrade to an empty result.
    """

    def execute(self, query: str, params: Tuple = ()) -> int:
        try:
            with self._connection() as conn:
                cursor = conn.cursor()
                cursor.execute(query, params)
                return cursor.rowcount
        except sqlite3.Error as exc:
            logger.error(f"Storage write failed: {exc}")
            raise StorageError(str(exc)) from exc

    def executemany(self, query: str, rows: Iterable[Tuple]) -> None:
        try:
            with self._connection() as conn:
                conn.executemany(query, list(rows))
        except sqlite3.Error as exc:
            logger.error(f"Storage batch write failed: {exc}")
            raise StorageError(str(exc)) from exc

    def fetch_all(self, query: str, params: Tuple = ()) -> List[Tuple]:
        try:
            with self._connection() as conn:
                cursor = conn.cursor()
                cursor.execute(query, params)
                return cursor.fetchall()
        except sqlite3.Error as exc:
            logger.error(f"Storage read failed: {exc}")
            return []


def _check_collection(collection: str) -> None:
    if collection not in COLLECTION_MODELS:
        raise ValueError(f"unknown collection: {collection}")


def _document_row(document: dict) -> Tuple:
    now = DateUtils.current_datetime()
    return (
        document["id"],
        json.dumps(document, sort_keys=True),
        document.get("created_at") or now,
        document.get("updated_at") or now,
        int(document.get("version") or 1),
    )


_UPSERT = (
    "INSERT INTO {table} (id, data, created_at, updated_at, version) VALUES (?, ?, ?, ?, ?) "
    "ON CONFLICT(id) DO UPDATE SET data=excluded.data, created_at=excluded.created_at, "
    "updated_at=excluded.updated_at, version=excluded.version;"
)


class DocumentStore(BaseRepository):
    """JSON document collections, one table per collection."""

    def save(self, collection: str, document: dict) -> None:
        _check_collection(collection)
        self.execute(_UPSERT.format(table=collection), _document_row(document))

    def save_batch(self, collection: str, documents: Iterable[dict]) -> None:
        _check_collection(collection)
        self.executemany(
            _UPSERT.format(table=collection), (_document_row(d) for d in documents)
        )

    def get(self, collection: str, doc_id: str) -> Optional[dict]:
        _check_collection(collection)
        rows = self.fetch_all(f"SELECT data FROM {collection} WHERE id = ?;", (doc_id,))
        if not rows:
            return None
        return json.loads(rows[0][0])

    def get_all(self, collection: str) -> list[dict]:
        _check_collection(collection)
        rows = self.fetch_all(f"SELECT data FROM {collection} ORDER BY rowid;")
        return [json.loads(r[0]) for r in rows]

    def delete(self, collection: str, doc_id: str) -> bool:
        _check_collection(collection)
        return self.execute(f"DELETE FROM {collection} WHERE id = ?;", (doc_id,)) > 0

    def count(self, collection: str) -> int:
        _check_collection(collection)
        rows = self.fetch_all(f"SELECT COUNT(*) FROM {collection};")
        return int(rows[0][0]) if rows else 0

    def clear(self, collection: str) -> None:
        _check_collection(collection)
        self.execute(f"DELETE FROM {collection};")

    def write_collections(self, batches: dict[str, list[dict]], replace: bool = True) -> None:
        """Write several collections in one transaction.

        With ``replace`` each collection is emptied first; a failure rolls
        back every collection, leaving the previous contents in place.
        """
        for name in batches:
            _check_collection(name)
        try:
            with self._connection() as conn:
                for name, documents in batches.items():
                    if replace:
                        conn.execute(f"DELETE FROM {name};")
                    conn.executemany(
                        _UPSERT.format(table=name), [_document_row(d) for d in documents]
                    )
        except sqlite3.Error as exc:
            logger.error(f"Storage batch write failed: {exc}")
            raise StorageError(str(exc)) from exc


class AsyncDatabase(Database):
    """Provides asynchronous connection management."""

    @asynccontextmanager
    async def _async_connection(self):
        conn = await aiosqlite.connect(self._db_path)
        try:
            yield conn
            await conn.commit()
        finally:
            await conn.close()


class AsyncDocumentStore(AsyncDatabase):
    """Asynchronous variant of DocumentStore using aiosqlite."""

    async def execute(self, query: str, params: Tuple = ()) -> int:
        try:
            async with self._async_connection() as conn:
                cursor = await conn.execute(query, params)
                await conn.commit()
                return cursor.rowcount
        except sqlite3.Error as exc:
            logger.error(f"Storage write failed: {exc}")
            raise StorageError(str(exc)) from exc

    async def fetch_all(self, query: str, params: Tuple = ()) -> List[Tuple]:
        try:
            async with self._async_connection() as conn:
                cursor = await conn.execute(query, params)
                rows = await cursor.fetchall()
                return list(rows)
        except sqlite3.Error as exc:
            logger.error(f"Storage read failed: {exc}")
            return []

    async def save(self, collection: str, document: dict) -> None:
        _check_collection(collection)
        await self.execute(_UPSERT.format(table=collection), _document_row(document))

    async def get(self, collection: str, doc_id: str) -> Optional[dict]:
        _check_collection(collection)
        rows = await self.fetch_all(
            f"SELECT data FROM {collection} WHERE id = ?;", (doc_id,)
        )
        if not rows:
            return None
        return json.loads(rows[0][0])

    async def get_all(self, collection: str) -> list[dict]:
        _check_collection(collection)
        rows = await self.fetch_all(f"SELECT data FROM {collection} ORDER BY rowid;")
        return [json.loads(r[0]) for r in rows]

    async def delete(self, collection: str, doc_id: str) -> bool:
        _check_collection(collection)
        deleted = await self.execute(f"DELETE FROM {collection} WHERE id = ?;", (doc_id,))
        return deleted > 0

    async def count(self, collection: str) -> int:
        _check_collection(collection)
        rows = await self.fetch_all(f"SELECT COUNT(*) FROM {collection};")
        return int(rows[0][0]) if rows else 0

    async def clear(self, collection: str) -> None:
        _check_collection(collection)
        await self.execute(f"DELETE FROM {collection};")


def validate_entity(model: type[BaseModel], data) -> BaseModel:
    """Validate ``data`` against ``model`` raising EntityValidationError."""
    if isinstance(data, BaseModel):
        data = data.model_dump()
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        raise EntityValidationError(str(exc)) from exc


def stamp_entity(entity: Entity, existing: Optional[dict]) -> Entity:
    """Carry creation time over from ``existing`` and bump the version."""
    if existing is None:
        return entity
    return entity.model_copy(
        update={
            "created_at": existing.get("created_at", entity.created_at),
            "updated_at": DateUtils.current_datetime(),
            "version": int(existing.get("version", 1)) + 1,
        }
    )


class EntityRepository:
    """CRUD over one collection of validated entities."""

    collection = ""
    model: type[Entity] = Entity
    label = "entity"

    def __init__(self, db_path: str = "fittrack.db") -> None:
        self.store = DocumentStore(db_path)

    def _load(self, document: dict) -> Optional[Entity]:
        try:
            return self.model.model_validate(document)
        except ValidationError as exc:
            logger.error(f"Skipping malformed {self.label} {document.get('id')}: {exc}")
            return None

    def save(self, entity) -> Entity:
        entity = validate_entity(self.model, entity)
        entity = stamp_entity(entity, self.store.get(self.collection, entity.id))
        self.store.save(self.collection, entity.model_dump(mode="json"))
        return entity

    def save_batch(self, entities: Iterable) -> list[Entity]:
        validated = [validate_entity(self.model, e) for e in entities]
        self.store.save_batch(
            self.collection, (e.model_dump(mode="json") for e in validated)
        )
        return validated

    def create(self, data: dict) -> Entity:
        """Store ``data`` as a new entity with fresh id, timestamps and version."""
        fields = {k: v for k, v in data.items() if k not in Entity.model_fields}
        return self.save(validate_entity(self.model, fields))

    def update(self, entity_id: str, changes: dict) -> Entity:
        current = self.fetch(entity_id)
        data = current.model_dump()
        data.update({k: v for k, v in changes.items() if k not in Entity.model_fields})
        return self.save(data)

    def get_by_id(self, entity_id: str) -> Optional[Entity]:
        doc = self.store.get(self.collection, entity_id)
        if doc is None:
            return None
        return self._load(doc)

    def fetch(self, entity_id: str) -> Entity:
        entity = self.get_by_id(entity_id)
        if entity is None:
            raise NotFoundError(f"{self.label} not found")
        return entity

    def exists(self, entity_id: str) -> bool:
        return self.store.get(self.collection, entity_id) is not None

    def get_all(self) -> list:
        entities = (self._load(doc) for doc in self.store.get_all(self.collection))
        return [e for e in entities if e is not None]

    def delete(self, entity_id: str) -> None:
        if not self.store.delete(self.collection, entity_id):
            raise NotFoundError(f"{self.label} not found")

    def count(self) -> int:
        return self.store.count(self.collection)

    def clear(self) -> None:
        self.store.clear(self.collection)


class PlanRepository(EntityRepository):
    """Repository for workout plans and their completion log."""

    collection = "plans"
    model = ProgramPlan
    label = "plan"
    completed_collection = "completed_sessions"

    def delete(self, plan_id: str) -> None:
        super().delete(plan_id)
        for done in self.get_completed_sessions(plan_id):
            self.store.delete(self.completed_collection, done.id)

    def get_templates(self) -> list[ProgramPlan]:
        return [p for p in self.get_all() if p.is_template]

    def get_user_plans(self) -> list[ProgramPlan]:
        return [p for p in self.get_all() if not p.is_template]

    def search(self, filters: PlanSearchFilters | dict | None = None) -> list[ProgramPlan]:
        """Return plans matching every given filter, newest update first."""
        if filters is None:
            filters = PlanSearchFilters()
        elif isinstance(filters, dict):
            filters = PlanSearchFilters(**filters)
        results = [p for p in self.get_all() if self._matches(p, filters)]
        results.sort(key=lambda p: DateUtils.parse(p.updated_at), reverse=True)
        return results

    @staticmethod
    def _matches(plan: ProgramPlan, filters: PlanSearchFilters) -> bool:
        if filters.query:
            query = filters.query.lower()
            haystack = [plan.title, plan.description or "", *plan.tags]
            if not any(query in text.lower() for text in haystack):
                return False
        if filters.difficulty_level and plan.difficulty_level != filters.difficulty_level:
            return False
        duration = filters.duration_weeks
        if duration is not None:
            if duration.min is not None and plan.duration_weeks < duration.min:
                return False
            if duration.max is not None and plan.duration_weeks > duration.max:
                return False
        if filters.session_types:
            if not plan.session_types().intersection(filters.session_types):
                return False
        if filters.tags and not set(plan.tags).intersection(filters.tags):
            return False
        if filters.is_template is not None and plan.is_template != filters.is_template:
            return False
        return True

    def duplicate(self, plan_id: str, new_title: str) -> ProgramPlan:
        """Deep copy ``plan_id`` into a new non-template plan."""
        original = self.fetch(plan_id)
        now = DateUtils.current_datetime()
        copy = original.model_copy(
            deep=True,
            update={
                "id": new_id(),
                "title": new_title,
                "is_template": False,
                "created_at": now,
                "updated_at": now,
                "version": 1,
            },
        )
        return self.save(copy)

    def update_session(self, plan_id: str, path: SessionPath, changes: dict) -> Session:
        """Merge ``changes`` into the session at ``path`` and store the plan."""
        plan = self.fetch(plan_id)
        session = path.resolve(plan)
        if session is None:
            raise InvalidSessionPathError(f"invalid session path {path.model_dump()}")
        data = session.model_dump()
        data.update(changes)
        updated = validate_entity(Session, data)
        day = plan.phases[path.phase_index].weeks[path.week_index].days[path.day_index]
        day.sessions[path.session_index] = updated
        self.save(plan)
        return updated

    def mark_session_completed(
        self,
        plan_id: str,
        path: SessionPath,
        completion_date: str | None = None,
        actual_duration_minutes: int | None = None,
        completion_notes: str | None = None,
    ) -> CompletedSession:
        plan = self.fetch(plan_id)
        session = path.resolve(plan)
        if session is None:
            raise InvalidSessionPathError(f"invalid session path {path.model_dump()}")
        record = CompletedSession(
            session_id=session.id,
            completion_date=completion_date or DateUtils.current_datetime(),
            session_path=path,
            plan_id=plan_id,
            actual_duration_minutes=actual_duration_minutes,
            completion_notes=completion_notes,
        )
        self.store.save(self.completed_collection, record.model_dump(mode="json"))
        logger.info(f"Session {session.id} of plan {plan_id} marked completed")
        return record

    def get_completed_sessions(self, plan_id: str) -> list[CompletedSession]:
        records = []
        for doc in self.store.get_all(self.completed_collection):
            if doc.get("plan_id") != plan_id:
                continue
            try:
                records.append(CompletedSession.model_validate(doc))
            except ValidationError as exc:
                logger.error(f"Skipping malformed completed session: {exc}")
        records.sort(key=lambda r: DateUtils.parse(r.completion_date))
        return records

    def calculate_progress(self, plan_id: str) -> PlanProgress:
        """Return completion progress driven by what has been marked complete."""
        plan = self.fetch(plan_id)
        completed = self.get_completed_sessions(plan_id)
        total = sum(1 for _ in plan.iter_sessions())
        percentage = len(completed) / total * 100 if total else 0.0
        phase_index = week_index = 0
        last_date = None
        if completed:
            latest = completed[-1]
            phase_index = latest.session_path.phase_index
            week_index = latest.session_path.week_index
            last_date = latest.completion_date
        return PlanProgress(
            plan_id=plan_id,
            current_phase_index=phase_index,
            current_week_index=week_index,
            completed_sessions={r.session_id for r in completed},
            total_sessions=total,
            completed_count=len(completed),
            completion_percentage=percentage,
            last_session_date=last_date,
        )

    def get_stats(self, plan_id: str) -> PlanStats:
        plan = self.fetch(plan_id)
        by_type: Counter = Counter()
        unique: set[str] = set()
        total_sessions = total_exercises = minutes = 0
        for _path, _day, session in plan.iter_sessions():
            total_sessions += 1
            by_type[session.session_type] += 1
            minutes += session.estimated_duration_minutes
            for exercise in session.exercises:
                total_exercises += 1
                unique.add(exercise.exercise_id)
        return PlanStats(
            total_sessions=total_sessions,
            sessions_by_type=dict(by_type),
            total_exercises=total_exercises,
            unique_exercises=len(unique),
            estimated_total_duration_minutes=minutes,
            phases_count=len(plan.phases),
            weeks_per_phase=[phase.duration_weeks for phase in plan.phases],
        )


class GoalRepository(EntityRepository):
    """Repository for goal management."""

    collection = "goals"
    model = FitnessGoal
    label = "goal"

    _TRANSITIONS = {
        "active": {"paused", "completed", "abandoned"},
        "paused": {"active"},
    }

    def get_active_goals(self) -> list[FitnessGoal]:
        return [g for g in self.get_all() if g.status == "active"]

    def get_completed_goals(self) -> list[FitnessGoal]:
        return [g for g in self.get_all() if g.status == "completed"]

    def get_goals_by_category(self, category: str) -> list[FitnessGoal]:
        return [g for g in self.get_all() if g.category == category]

    def get_goals_by_metric(self, metric: str) -> list[FitnessGoal]:
        return [g for g in self.get_all() if g.metric_to_track == metric]

    def get_goals_due_soon(self, days: int = 30, today: str | None = None) -> list[FitnessGoal]:
        cutoff = DateUtils.add_days(today or DateUtils.current_date(), days)
        return [g for g in self.get_active_goals() if g.target_date <= cutoff]

    def get_overdue_goals(self, today: str | None = None) -> list[FitnessGoal]:
        current = today or DateUtils.current_date()
        return [
            g
            for g in self.get_active_goals()
            if g.target_date < current and g.completion_percentage < 100
        ]

    def update_goal_progress(self, goal_id: str, current_value: float) -> FitnessGoal:
        """Record ``current_value`` and recompute completion.

        Reaching 100% completes the goal; a completed goal never reverts.
        """
        goal = self.fetch(goal_id)
        percentage = MetricsAnalysis.calculate_goal_progress(goal, current_value)
        status = goal.status
        if percentage >= 100 and status in ("active", "paused"):
            status = "completed"
        changes = {
            "current_value": current_value,
            "completion_percentage": percentage,
            "status": status,
        }
        if goal.status == "completed":
            changes["completion_percentage"] = max(percentage, goal.completion_percentage)
        updated = self.update(goal_id, changes)
        if status == "completed" and goal.status != "completed":
            logger.info(f"Goal {goal_id} completed")
        return updated

    def _transition(self, goal_id: str, status: str) -> FitnessGoal:
        goal = self.fetch(goal_id)
        if status not in self._TRANSITIONS.get(goal.status, set()):
            raise InvalidTransitionError(f"cannot change goal from {goal.status} to {status}")
        return self.update(goal_id, {"status": status})

    def pause_goal(self, goal_id: str) -> FitnessGoal:
        return self._transition(goal_id, "paused")

    def resume_goal(self, goal_id: str) -> FitnessGoal:
        return self._transition(goal_id, "active")

    def complete_goal(self, goal_id: str) -> FitnessGoal:
        return self._transition(goal_id, "completed")

    def abandon_goal(self, goal_id: str) -> FitnessGoal:
        return self._transition(goal_id, "abandoned")

    def get_goals_needing_attention(self, today: str | None = None) -> list[FitnessGoal]:
        """Return active goals that are overdue or well behind schedule."""
        current = today or DateUtils.current_date()
        flagged = []
        for goal in self.get_active_goals():
            if goal.target_date < current and goal.completion_percentage < 100:
                flagged.append(goal)
                continue
            expected = MetricsAnalysis.expected_goal_progress(goal, current)
            if expected is not None and goal.completion_percentage < expected * 0.7:
                flagged.append(goal)
        return flagged

    def get_goal_completion_rate(self) -> int:
        goals = self.get_all()
        if not goals:
            return 0
        completed = sum(1 for g in goals if g.status == "completed")
        return round(completed / len(goals) * 100)

    def archive_old_goals(self, months: int = 12, today: str | None = None) -> int:
        """Delete completed goals whose target date is older than ``months``."""
        cutoff = DateUtils.add_days(today or DateUtils.current_date(), -months * 30)
        old = [g for g in self.get_completed_goals() if g.target_date < cutoff]
        for goal in old:
            self.delete(goal.id)
        if old:
            logger.info(f"Archived {len(old)} completed goals")
        return len(old)

    def get_goal_statistics(self, today: str | None = None) -> dict:
        goals = self.get_all()
        completed = [g for g in goals if g.status == "completed"]
        durations = [
            DateUtils.days_between(g.start_date, g.target_date) for g in completed
        ]
        durations = [d for d in durations if d > 0]
        categories = Counter(g.category for g in goals)
        return {
            "total": len(goals),
            "active": sum(1 for g in goals if g.status == "active"),
            "completed": len(completed),
            "overdue": len(self.get_overdue_goals(today)),
            "completion_rate": self.get_goal_completion_rate(),
            "average_days_to_complete": round(sum(durations) / len(durations)) if durations else 0,
            "most_common_category": categories.most_common(1)[0][0] if categories else "none",
        }


class MetricsRepository(EntityRepository):
    """Repository for body metric logs."""

    collection = "metrics"
    model = BodyMetricEntry
    label = "metric entry"

    LB_PER_KG = 2.205

    def get_by_date_range(self, start_date: str, end_date: str) -> list[BodyMetricEntry]:
        entries = [m for m in self.get_all() if start_date <= m.date <= end_date]
        return sorted(entries, key=lambda m: m.date)

    def get_latest(self) -> Optional[BodyMetricEntry]:
        entries = self.get_all()
        if not entries:
            return None
        return max(entries, key=lambda m: m.date)

    def get_recent_metrics(self, days: int = 30, today: str | None = None) -> list[BodyMetricEntry]:
        end = today or DateUtils.current_date()
        return self.get_by_date_range(DateUtils.days_ago(days, end), end)

    def get_weight_progression(self, days: int = 90, today: str | None = None) -> list[dict]:
        return [
            {"date": m.date, "weight": m.body_weight, "unit": m.weight_unit}
            for m in self.get_recent_metrics(days, today)
        ]

    def get_body_fat_progression(self, days: int = 90, today: str | None = None) -> list[dict]:
        return [
            {"date": m.date, "body_fat": m.body_fat_percent}
            for m in self.get_recent_metrics(days, today)
            if m.body_fat_percent is not None
        ]

    def get_weight_change(self, days: int = 30, today: str | None = None) -> Optional[dict]:
        """Compare the weight around ``days`` ago with the past week's weight."""
        end = today or DateUtils.current_date()
        start = DateUtils.days_ago(days, end)
        start_entries = self.get_by_date_range(DateUtils.days_ago(days + 7, end), start)
        end_entries = self.get_by_date_range(DateUtils.days_ago(7, end), end)
        if not start_entries or not end_entries:
            return None
        first = start_entries[-1]
        last = end_entries[-1]
        start_weight = first.body_weight
        if first.weight_unit != last.weight_unit:
            if last.weight_unit == "kg":
                start_weight = start_weight / self.LB_PER_KG
            else:
                start_weight = start_weight * self.LB_PER_KG
        change = last.body_weight - start_weight
        return {
            "change": round(change, 2),
            "change_percent": round(change / start_weight * 100, 2) if start_weight else 0.0,
            "unit": last.weight_unit,
            "start_weight": round(start_weight, 2),
            "end_weight": round(last.body_weight, 2),
        }

    def get_statistics(self) -> dict:
        entries = self.get_all()
        if not entries:
            return {
                "total_entries": 0,
                "average_weight": 0,
                "weight_unit": "lb",
                "average_body_fat": None,
                "average_muscle_mass": None,
                "date_range": None,
            }
        weights_lb = [
            m.body_weight * self.LB_PER_KG if m.weight_unit == "kg" else m.body_weight
            for m in entries
        ]
        fats = [m.body_fat_percent for m in entries if m.body_fat_percent is not None]
        muscles = [m.body_muscle_percent for m in entries if m.body_muscle_percent is not None]
        dates = sorted(m.date for m in entries)
        units = Counter(m.weight_unit for m in entries)
        return {
            "total_entries": len(entries),
            "average_weight": round(sum(weights_lb) / len(weights_lb), 2),
            "weight_unit": units.most_common(1)[0][0],
            "average_body_fat": round(sum(fats) / len(fats), 2) if fats else None,
            "average_muscle_mass": round(sum(muscles) / len(muscles), 2) if muscles else None,
            "date_range": {"start": dates[0], "end": dates[-1]},
        }

    def get_for_date(self, target_date: str) -> Optional[BodyMetricEntry]:
        """Return the entry closest to ``target_date``."""
        entries = self.get_all()
        if not entries:
            return None
        return min(entries, key=lambda m: abs(DateUtils.days_between(m.date, target_date)))

    def exists_for_date(self, date: str) -> bool:
        return any(m.date == date for m in self.get_all())

    def get_missing_dates(self, start_date: str, end_date: str) -> list[str]:
        logged = {m.date for m in self.get_by_date_range(start_date, end_date)}
        return [d for d in DateUtils.generate_date_range(start_date, end_date) if d not in logged]


class BodyMeasurementsRepository(EntityRepository):
    """Repository for circumference measurements."""

    collection = "body_measurements"
    model = BodyMeasurement
    label = "body measurement"

    CM_PER_INCH = 2.54

    @staticmethod
    def _check_site(body_part: str) -> None:
        if body_part not in MEASUREMENT_SITES:
            raise ValueError(f"unknown body part: {body_part}")

    def get_by_date_range(self, start_date: str, end_date: str) -> list[BodyMeasurement]:
        entries = [m for m in self.get_all() if start_date <= m.date <= end_date]
        return sorted(entries, key=lambda m: m.date)

    def get_latest(self) -> Optional[BodyMeasurement]:
        entries = self.get_all()
        if not entries:
            return None
        return max(entries, key=lambda m: m.date)

    def get_part_progression(
        self, body_part: str, days: int = 90, today: str | None = None
    ) -> list[dict]:
        self._check_site(body_part)
        end = today or DateUtils.current_date()
        return [
            {
                "date": m.date,
                "measurement": getattr(m.measurements, body_part),
                "unit": m.measurement_unit,
            }
            for m in self.get_by_date_range(DateUtils.days_ago(days, end), end)
            if getattr(m.measurements, body_part) is not None
        ]

    def get_measurement_change(
        self, body_part: str, days: int = 30, today: str | None = None
    ) -> Optional[dict]:
        """Compare the measurement around ``days`` ago with the past week's."""
        self._check_site(body_part)
        end = today or DateUtils.current_date()
        start = DateUtils.days_ago(days, end)

        def latest(entries: list[BodyMeasurement]) -> Optional[BodyMeasurement]:
            tracked = [m for m in entries if getattr(m.measurements, body_part) is not None]
            return tracked[-1] if tracked else None

        first = latest(self.get_by_date_range(DateUtils.days_ago(days + 7, end), start))
        last = latest(self.get_by_date_range(DateUtils.days_ago(7, end), end))
        if first is None or last is None:
            return None
        start_value = getattr(first.measurements, body_part)
        end_value = getattr(last.measurements, body_part)
        if first.measurement_unit != last.measurement_unit:
            if last.measurement_unit == "cm":
                start_value = start_value * self.CM_PER_INCH
            else:
                start_value = start_value / self.CM_PER_INCH
        change = end_value - start_value
        return {
            "change": round(change, 2),
            "change_percent": round(change / start_value * 100, 2),
            "unit": last.measurement_unit,
            "start_measurement": round(start_value, 2),
            "end_measurement": round(end_value, 2),
        }

    def get_all_measurement_changes(self, days: int = 30, today: str | None = None) -> dict:
        changes = {}
        for site in MEASUREMENT_SITES:
            change = self.get_measurement_change(site, days, today)
            if change:
                changes[site] = {k: change[k] for k in ("change", "change_percent", "unit")}
        return changes

    def get_for_date(self, target_date: str) -> Optional[BodyMeasurement]:
        """Return the entry closest to ``target_date``."""
        entries = self.get_all()
        if not entries:
            return None
        return min(entries, key=lambda m: abs(DateUtils.days_between(m.date, target_date)))

    def get_statistics(self) -> dict:
        entries = self.get_all()
        if not entries:
            return {
                "total_entries": 0,
                "most_tracked_parts": [],
                "average_measurements": {},
                "unit": "in",
                "date_range": None,
            }
        values: dict[str, list[float]] = {}
        for entry in entries:
            for site, value in entry.measurements.model_dump(exclude_none=True).items():
                values.setdefault(site, []).append(value)
        counts = Counter({site: len(v) for site, v in values.items()})
        dates = sorted(m.date for m in entries)
        units = Counter(m.measurement_unit for m in entries)
        return {
            "total_entries": len(entries),
            "most_tracked_parts": [{"part": p, "count": c} for p, c in counts.most_common(5)],
            "average_measurements": {
                site: round(sum(v) / len(v), 2) for site, v in values.items()
            },
            "unit": units.most_common(1)[0][0],
            "date_range": {"start": dates[0], "end": dates[-1]},
        }

    def exists_for_date(self, date: str) -> bool:
        return any(m.date == date for m in self.get_all())


class ProgressPhotosRepository(EntityRepository):
    """Repository for progress photo references."""

    collection = "progress_photos"
    model = ProgressPhoto
    label = "progress photo"

    PHOTO_TYPES = ("front", "side", "back", "custom")

    def get_by_date_range(self, start_date: str, end_date: str) -> list[ProgressPhoto]:
        photos = [p for p in self.get_all() if start_date <= p.date <= end_date]
        return sorted(photos, key=lambda p: p.date)

    def get_by_type(self, photo_type: str) -> list[ProgressPhoto]:
        return [p for p in self.get_all() if p.photo_type == photo_type]

    def get_by_measurement_id(self, measurement_id: str) -> list[ProgressPhoto]:
        return [p for p in self.get_all() if p.measurements_id == measurement_id]

    def get_latest_by_type(self) -> dict[str, Optional[ProgressPhoto]]:
        photos = self.get_all()
        latest: dict[str, Optional[ProgressPhoto]] = {}
        for photo_type in self.PHOTO_TYPES:
            of_type = [p for p in photos if p.photo_type == photo_type]
            latest[photo_type] = max(of_type, key=lambda p: p.date) if of_type else None
        return latest

    def get_progress_comparison(
        self, photo_type: str, months: int = 6, today: str | None = None
    ) -> list[ProgressPhoto]:
        end = today or DateUtils.current_date()
        photos = self.get_by_date_range(DateUtils.days_ago(months * 30, end), end)
        return [p for p in photos if p.photo_type == photo_type]

    def cleanup_old_photos(self, months_old: int = 24, today: str | None = None) -> int:
        """Thin out old photos to the latest one per type and month."""
        cutoff = DateUtils.days_ago(months_old * 30, today)
        groups: dict[tuple[str, str], list[ProgressPhoto]] = {}
        for photo in self.get_by_date_range("0001-01-01", cutoff):
            groups.setdefault((photo.photo_type, photo.date[:7]), []).append(photo)
        deleted = 0
        for photos in groups.values():
            keep = max(photos, key=lambda p: p.date)
            for photo in photos:
                if photo.id != keep.id:
                    self.store.delete(self.collection, photo.id)
                    deleted += 1
        if deleted:
            logger.info(f"Removed {deleted} old progress photos")
        return deleted


class BaselineRepository(EntityRepository):
    """Repository for monthly baseline fitness tests."""

    collection = "baselines"
    model = BaselineTestEntry
    label = "baseline test"

    CARDIO_TESTS = {
        "rockport": ("rockport_time_mm_ss", "seconds"),
        "twelve_minute": ("twelve_minute_distance", None),
        "continuous_jog": ("longest_continuous_jog_minutes", "minutes"),
        "heart_rate_recovery": ("best_one_minute_heart_rate_drop_bpm", "bpm"),
    }
    BODYWEIGHT_TESTS = {
        "pull_up": ("pull_up_max_reps", "reps"),
        "push_up": ("push_up_max_reps", "reps"),
        "plank": ("plank_max_seconds", "seconds"),
    }
    IMPROVEMENT_FIELDS = (
        "bench_press_1rm_lb",
        "squat_1rm_lb",
        "deadlift_1rm_lb",
        "overhead_press_1rm_lb",
        "twelve_minute_distance",
    )

    def _by_month(self, field: str) -> list[BaselineTestEntry]:
        tracked = [b for b in self.get_all() if getattr(b, field) is not None]
        return sorted(tracked, key=lambda b: b.month)

    def get_by_month(self, month: str) -> Optional[BaselineTestEntry]:
        return next((b for b in self.get_all() if b.month == month), None)

    def get_latest(self) -> Optional[BaselineTestEntry]:
        entries = self.get_all()
        if not entries:
            return None
        return max(entries, key=lambda b: b.test_date)

    def get_by_date_range(self, start_date: str, end_date: str) -> list[BaselineTestEntry]:
        return [b for b in self.get_all() if start_date <= b.test_date <= end_date]

    def get_cardio_progression(self, test_type: str) -> list[dict]:
        if test_type not in self.CARDIO_TESTS:
            raise ValueError(f"unknown cardio test: {test_type}")
        field, unit = self.CARDIO_TESTS[test_type]
        progression = []
        for baseline in self._by_month(field):
            value = getattr(baseline, field)
            if test_type == "rockport":
                value = DateUtils.mm_ss_to_seconds(value)
            elif test_type == "twelve_minute":
                unit = baseline.twelve_minute_distance_unit
            progression.append({"month": baseline.month, "value": value, "unit": unit})
        return progression

    def get_strength_progression(self, exercise: str) -> list[dict]:
        field = f"{exercise}_1rm_lb"
        if field not in BaselineTestEntry.model_fields:
            raise ValueError(f"unknown strength test: {exercise}")
        return [{"month": b.month, "value": getattr(b, field)} for b in self._by_month(field)]

    def get_bodyweight_progression(self, exercise: str) -> list[dict]:
        if exercise not in self.BODYWEIGHT_TESTS:
            raise ValueError(f"unknown bodyweight test: {exercise}")
        field, unit = self.BODYWEIGHT_TESTS[exercise]
        return [
            {"month": b.month, "value": getattr(b, field), "unit": unit}
            for b in self._by_month(field)
        ]

    def get_improvement_stats(
        self, field: str, months: int = 6, today: str | None = None
    ) -> Optional[dict]:
        """Change between the first and last test of the last ``months``."""
        if field not in self.IMPROVEMENT_FIELDS:
            raise ValueError(f"unsupported improvement field: {field}")
        cutoff = DateUtils.month_key(DateUtils.days_ago(months * 30, today))
        recent = sorted(
            (b for b in self.get_all() if b.month >= cutoff), key=lambda b: b.month
        )
        if len(recent) < 2:
            return None
        first, last = recent[0], recent[-1]
        start_value = getattr(first, field)
        end_value = getattr(last, field)
        if start_value is None or end_value is None:
            return None
        unit = last.twelve_minute_distance_unit if field == "twelve_minute_distance" else "lb"
        improvement = end_value - start_value
        return {
            "improvement": round(improvement, 2),
            "improvement_percent": round(improvement / start_value * 100, 2),
            "start_value": start_value,
            "end_value": end_value,
            "unit": unit,
        }

    def get_current_month(self, today: str | None = None) -> Optional[BaselineTestEntry]:
        return self.get_by_month(DateUtils.month_key(today or DateUtils.current_date()))

    def exists_for_current_month(self, today: str | None = None) -> bool:
        return self.get_current_month(today) is not None

    def get_next_test_date(self, today: str | None = None) -> str:
        """First day of the month after the latest test, today without tests."""
        latest = self.get_latest()
        if latest is None:
            return today or DateUtils.current_date()
        return DateUtils.next_month_start(latest.test_date)

    def get_statistics(self) -> dict:
        entries = self.get_all()
        if not entries:
            return {
                "total_tests": 0,
                "months_covered": 0,
                "average_tests_per_month": 0,
                "most_recent_test": None,
                "oldest_test": None,
                "completion_rate": {"cardio": 0, "strength": 0, "flexibility": 0},
            }
        dates = sorted(b.test_date for b in entries)
        months = {b.month for b in entries}
        cardio = sum(1 for b in entries if b.rockport_time_mm_ss or b.twelve_minute_distance)
        strength = sum(
            1
            for b in entries
            if b.bench_press_1rm_lb or b.squat_1rm_lb or b.deadlift_1rm_lb or b.overhead_press_1rm_lb
        )
        flexibility = sum(
            1 for b in entries if b.sit_and_reach_inches or b.overhead_reach_test_pass
        )
        total = len(entries)
        return {
            "total_tests": total,
            "months_covered": len(months),
            "average_tests_per_month": total / len(months),
            "most_recent_test": dates[-1],
            "oldest_test": dates[0],
            "completion_rate": {
                "cardio": round(cardio / total * 100),
                "strength": round(strength / total * 100),
                "flexibility": round(flexibility / total * 100),
            },
        }


class GlossaryRepository(EntityRepository):
    """Repository for glossary terms; related terms are matched by name."""

    collection = "glossary"
    model = GlossaryItem
    label = "glossary item"

    def search(
        self,
        query: str | None = None,
        category: str | None = None,
        difficulty: str | None = None,
    ) -> list[GlossaryItem]:
        results = []
        for item in self.get_all():
            if query:
                q = query.lower()
                fields = [item.term, item.plain_definition, item.category, *item.related_terms]
                if not any(q in text.lower() for text in fields):
                    continue
            if category and item.category != category:
                continue
            if difficulty and item.difficulty_level != difficulty:
                continue
            results.append(item)
        return sorted(results, key=lambda i: i.term.lower())

    def get_by_category(self, category: str) -> list[GlossaryItem]:
        return [i for i in self.get_all() if i.category == category]

    def find_by_term(self, term: str) -> Optional[GlossaryItem]:
        wanted = term.lower()
        for item in self.get_all():
            if item.term.lower() == wanted:
                return item
        return None

    def get_related_terms(self, term: str) -> list[GlossaryItem]:
        """Return items that list ``term`` among their related terms."""
        wanted = term.lower()
        return [
            i for i in self.get_all() if any(r.lower() == wanted for r in i.related_terms)
        ]


class ExerciseRepository(EntityRepository):
    """Repository for the exercise catalog."""

    collection = "exercises"
    model = ExerciseCatalogItem
    label = "exercise"

    BODYWEIGHT_EQUIPMENT = ("bodyweight", "none")

    def search_by_name(self, query: str) -> list[ExerciseCatalogItem]:
        """Match ``query`` against names, beginner names and aliases."""
        q = query.lower()
        results = []
        for exercise in self.get_all():
            names = [exercise.name, exercise.beginner_friendly_name or "", *exercise.aliases]
            if any(q in name.lower() for name in names):
                results.append(exercise)
        return sorted(results, key=lambda e: e.name.lower())

    def get_many(self, exercise_ids: Iterable[str]) -> list[ExerciseCatalogItem]:
        """Return the exercises found for ``exercise_ids``, in that order."""
        found = (self.get_by_id(i) for i in exercise_ids)
        return [e for e in found if e is not None]

    def get_by_movement_pattern(self, pattern: str) -> list[ExerciseCatalogItem]:
        return [e for e in self.get_all() if e.movement_pattern == pattern]

    def get_by_equipment(self, equipment: Iterable[str]) -> list[ExerciseCatalogItem]:
        wanted = {item.lower() for item in equipment}
        return [
            e for e in self.get_all() if wanted & {item.lower() for item in e.equipment}
        ]

    def get_by_muscle_groups(self, muscles: Iterable[str]) -> list[ExerciseCatalogItem]:
        wanted = {m.lower() for m in muscles}
        results = []
        for exercise in self.get_all():
            worked = {m.lower() for m in exercise.primary_muscles + exercise.secondary_muscles}
            if wanted & worked:
                results.append(exercise)
        return results

    def get_by_difficulty_level(self, difficulty: str) -> list[ExerciseCatalogItem]:
        return [e for e in self.get_all() if e.difficulty_level == difficulty]

    def get_by_type(self, exercise_type: str) -> list[ExerciseCatalogItem]:
        return [e for e in self.get_all() if e.exercise_type == exercise_type]

    def get_beginner_friendly(self) -> list[ExerciseCatalogItem]:
        return self.get_by_difficulty_level("beginner")

    def get_bodyweight_exercises(self) -> list[ExerciseCatalogItem]:
        def no_gear(exercise: ExerciseCatalogItem) -> bool:
            return all(
                any(word in item.lower() for word in self.BODYWEIGHT_EQUIPMENT)
                for item in exercise.equipment
            )

        return [e for e in self.get_all() if no_gear(e)]

    @staticmethod
    def similarity(base: ExerciseCatalogItem, other: ExerciseCatalogItem) -> int:
        score = 0
        if base.movement_pattern and base.movement_pattern == other.movement_pattern:
            score += 10
        score += 5 * len(set(base.primary_muscles) & set(other.primary_muscles))
        score += 2 * len(set(base.secondary_muscles) & set(other.secondary_muscles))
        if base.difficulty_level == other.difficulty_level:
            score += 3
        score += len(set(base.equipment) & set(other.equipment))
        return score

    def get_similar_exercises(self, exercise_id: str, limit: int = 5) -> list[ExerciseCatalogItem]:
        """Rank other exercises by shared pattern, muscles, difficulty and equipment."""
        base = self.fetch(exercise_id)
        scored = [
            (self.similarity(base, e), e) for e in self.get_all() if e.id != base.id
        ]
        scored = [pair for pair in scored if pair[0] > 0]
        scored.sort(key=lambda pair: pair[0], reverse=True)
        return [e for _score, e in scored[:limit]]

    def get_grouped_by_movement_pattern(self) -> dict[str, list[ExerciseCatalogItem]]:
        groups: dict[str, list[ExerciseCatalogItem]] = {}
        for exercise in self.get_all():
            groups.setdefault(exercise.movement_pattern or "other", []).append(exercise)
        return groups

    def get_most_popular(
        self, limit: int = 10, usage: dict[str, int] | None = None
    ) -> list[ExerciseCatalogItem]:
        """Most used exercises by ``usage`` counts, else beginner ones first."""
        exercises = self.get_all()
        if usage:
            exercises.sort(key=lambda e: usage.get(e.id, 0), reverse=True)
        else:
            exercises.sort(key=lambda e: (e.difficulty_level != "beginner", e.name.lower()))
        return exercises[:limit]

    def get_statistics(self) -> dict:
        exercises = self.get_all()
        return {
            "total": len(exercises),
            "by_type": dict(Counter(e.exercise_type for e in exercises)),
            "by_difficulty": dict(Counter(e.difficulty_level for e in exercises)),
            "by_movement_pattern": dict(
                Counter(e.movement_pattern or "other" for e in exercises)
            ),
            "bodyweight": len(self.get_bodyweight_exercises()),
        }


class WorkoutRepository(EntityRepository):
    """Repository for logged workouts."""

    collection = "workouts"
    model = WorkoutLogEntry
    label = "workout"

    @staticmethod
    def _date(workout: WorkoutLogEntry) -> str:
        return workout.date_time_start[:10]

    def get_by_exercise(self, exercise_id: str) -> list[WorkoutLogEntry]:
        return [
            w
            for w in self.get_all()
            if any(getattr(e, "exercise_id", None) == exercise_id for e in w.entries)
        ]

    def get_by_date_range(self, start_date: str, end_date: str) -> list[WorkoutLogEntry]:
        return [w for w in self.get_all() if start_date <= self._date(w) <= end_date]

    def get_recent_sessions(self, limit: int = 10) -> list[WorkoutLogEntry]:
        workouts = sorted(
            self.get_all(), key=lambda w: DateUtils.parse(w.date_time_start), reverse=True
        )
        return workouts[:limit]

    def get_by_session_plan(self, session_plan_ref: str) -> list[WorkoutLogEntry]:
        return [w for w in self.get_all() if w.session_plan_ref == session_plan_ref]

    def get_week_workouts(self, date: str) -> list[WorkoutLogEntry]:
        start = DateUtils.week_start(date)
        return self.get_by_date_range(start, DateUtils.add_days(start, 6))

    def get_current_streak(self, today: str | None = None) -> int:
        """Count consecutive workout days ending today or yesterday."""
        dates = {self._date(w) for w in self.get_all()}
        current = today or DateUtils.current_date()
        if current not in dates:
            current = DateUtils.add_days(current, -1)
            if current not in dates:
                return 0
        streak = 0
        while current in dates:
            streak += 1
            current = DateUtils.add_days(current, -1)
        return streak

    def get_exercise_history(
        self, exercise_id: str, limit: int = 10
    ) -> list[tuple[WorkoutLogEntry, StrengthEntry]]:
        history = []
        workouts = sorted(
            self.get_by_exercise(exercise_id),
            key=lambda w: DateUtils.parse(w.date_time_start),
            reverse=True,
        )
        for workout in workouts:
            for entry in workout.entries:
                if getattr(entry, "exercise_id", None) == exercise_id:
                    history.append((workout, entry))
                    break
        return history[:limit]


class AsyncWorkoutRepository:
    """Asynchronous workout persistence used while a session is running."""

    collection = "workouts"

    def __init__(self, db_path: str = "fittrack.db") -> None:
        self.store = AsyncDocumentStore(db_path)

    async def save(self, workout: WorkoutLogEntry) -> WorkoutLogEntry:
        workout = validate_entity(WorkoutLogEntry, workout)
        workout = stamp_entity(workout, await self.store.get(self.collection, workout.id))
        await self.store.save(self.collection, workout.model_dump(mode="json"))
        return workout

    async def get_by_id(self, workout_id: str) -> Optional[WorkoutLogEntry]:
        doc = await self.store.get(self.collection, workout_id)
        if doc is None:
            return None
        return WorkoutLogEntry.model_validate(doc)


class SettingsRepository(EntityRepository):
    """Repository for the single application settings record."""

    collection = "settings"
    model = AppSettings
    label = "settings"
    SETTINGS_ID = "app-settings-v1"

    def initialize(self) -> AppSettings:
        """Return stored settings, creating the defaults when absent."""
        existing = self.get_by_id(self.SETTINGS_ID)
        if existing is not None:
            return existing
        return self.save(AppSettings(id=self.SETTINGS_ID))

    def get_settings(self) -> AppSettings:
        return self.initialize()

    def save_settings(self, settings: AppSettings | dict) -> AppSettings:
        data = settings.model_dump() if isinstance(settings, BaseModel) else dict(settings)
        data["id"] = self.SETTINGS_ID
        return self.save(data)

    def update_setting(self, key: str, value) -> AppSettings:
        if key not in SettingsSchema.model_fields:
            raise ValueError(f"unknown setting: {key}")
        current = self.initialize()
        values = self._values(current)
        values[key] = value
        validate_settings(values)
        return self.update(self.SETTINGS_ID, {key: value})

    def reset_to_defaults(self) -> AppSettings:
        self.initialize()
        return self.update(self.SETTINGS_ID, SettingsSchema().model_dump())

    @staticmethod
    def _values(settings: AppSettings) -> dict:
        return {k: getattr(settings, k) for k in SettingsSchema.model_fields}

    def export_settings(self) -> str:
        return json.dumps(self._values(self.initialize()), indent=2, sort_keys=True)

    def import_settings(self, payload: str) -> AppSettings:
        try:
            data = json.loads(payload)
        except json.JSONDecodeError as exc:
            raise EntityValidationError(f"invalid settings JSON: {exc}") from exc
        if not isinstance(data, dict):
            raise EntityValidationError("settings JSON must be an object")
        data = {k: v for k, v in data.items() if k in SettingsSchema.model_fields}
        validate_settings(data)
        self.initialize()
        settings = self.update(self.SETTINGS_ID, data)
        logger.info("Settings imported")
        return settings


EXPORT_FORMAT_VERSION = 1


def export_collections(store: DocumentStore, collections: Iterable[str] | None = None) -> str:
    """Serialize whole collections to a JSON document."""
    names = list(collections) if collections is not None else list(COLLECTIONS)
    for name in names:
        _check_collection(name)
    payload = {
        "data_version": EXPORT_FORMAT_VERSION,
        "exported_at": DateUtils.current_datetime(),
        "collections": {name: store.get_all(name) for name in names},
    }
    return json.dumps(payload, indent=2, sort_keys=True)


def import_collections(store: DocumentStore, payload: str, replace: bool = True) -> dict[str, int]:
    """Load collections produced by :func:`export_collections`.

    Every document is validated before anything is written, and all
    collections are written in a single transaction. Returns the number of
    documents imported per collection.
    """
    try:
        data = json.loads(payload)
    except json.JSONDecodeError as exc:
        raise EntityValidationError(f"invalid export JSON: {exc}") from exc
    collections = data.get("collections") if isinstance(data, dict) else None
    if not isinstance(collections, dict):
        raise EntityValidationError("export is missing 'collections'")
    for name, documents in collections.items():
        _check_collection(name)
        for doc in documents:
            validate_entity(COLLECTION_MODELS[name], doc)
    store.write_collections(collections, replace=replace)
    counts: dict[str, int] = {}
    for name, documents in collections.items():
        counts[name] = len(documents)
        logger.info(f"Imported {len(documents)} documents into {name}")
    return counts
