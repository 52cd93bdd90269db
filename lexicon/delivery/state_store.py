"""
SQLite State Store for the vocabulary trainer.

Provides portable persistence for:
- StudyRecords per (learner, word)
- Completed test results
- Learner profiles

Database location: ~/.lexicon/state.db (configurable)

The connection is blocking; the async StorageBackend methods hand each call
to a worker thread.
"""

from __future__ import annotations

import asyncio
import json
import sqlite3
from pathlib import Path

from loguru import logger

from lexicon.core.models import LearnerProfile, StudyRecord, TestLevel, TestResult, parse_datetime


class StateStore:
    """
    SQLite-backed StorageBackend.

    Handles:
    - Study records (mastery, counts, review timestamps)
    - Test results with weak-area tags
    - Learner profile (level, experience, streak, achievements)
    """

    DEFAULT_DB_PATH = Path.home() / ".lexicon" / "state.db"

    def __init__(self, db_path: Path | None = None):
        """
        Initialize the state store.

        Args:
            db_path: Custom database path (defaults to ~/.lexicon/state.db)
        """
        self.db_path = db_path or self.DEFAULT_DB_PATH
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        self._conn: sqlite3.Connection | None = None
        self._init_schema()

        logger.info(f"StateStore initialized at {self.db_path}")

    @property
    def conn(self) -> sqlite3.Connection:
        """Get or create database connection."""
        if self._conn is None:
            # Calls arrive from asyncio.to_thread workers, one at a time
            self._conn = sqlite3.connect(str(self.db_path), check_same_thread=False)
            self._conn.row_factory = sqlite3.Row
        return self._conn

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    def _init_schema(self) -> None:
        """Initialize database schema."""
        cursor = self.conn.cursor()

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS study_records (
                id TEXT PRIMARY KEY,
                learner_id TEXT NOT NULL,
                word_id TEXT NOT NULL,
                mastery_score REAL NOT NULL DEFAULT 0,
                review_count INTEGER NOT NULL DEFAULT 0,
                correct_count INTEGER NOT NULL DEFAULT 0,
                last_review_at TEXT NOT NULL,
                next_review_at TEXT NOT NULL,
                study_time_ms INTEGER DEFAULT 0,
                created_at TEXT,
                UNIQUE (learner_id, word_id)
            )
        """)

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS test_results (
                id TEXT PRIMARY KEY,
                test_id TEXT NOT NULL,
                learner_id TEXT NOT NULL,
                level TEXT NOT NULL,
                score INTEGER NOT NULL,
                max_score INTEGER NOT NULL,
                accuracy REAL NOT NULL,
                time_spent_ms INTEGER NOT NULL,
                completed_at TEXT NOT NULL,
                passed BOOLEAN DEFAULT 0,
                weak_areas TEXT DEFAULT '[]'
            )
        """)

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS learner_profiles (
                learner_id TEXT PRIMARY KEY,
                username TEXT NOT NULL,
                level INTEGER DEFAULT 1,
                experience INTEGER DEFAULT 0,
                streak INTEGER DEFAULT 0,
                achievements TEXT DEFAULT '[]',
                total_words_studied INTEGER DEFAULT 0,
                total_study_time_ms INTEGER DEFAULT 0,
                tests_taken INTEGER DEFAULT 0,
                daily_goal INTEGER DEFAULT 20,
                created_at TEXT,
                last_active_at TEXT
            )
        """)

        # Index for due-record queries
        cursor.execute("""
            CREATE INDEX IF NOT EXISTS idx_study_records_next_review
            ON study_records(learner_id, next_review_at)
        """)

        cursor.execute("""
            CREATE INDEX IF NOT EXISTS idx_test_results_learner
            ON test_results(learner_id)
        """)

        self.conn.commit()

    # =========================================================================
    # Row mapping
    # =========================================================================

    @staticmethod
    def _record_from_row(row: sqlite3.Row) -> StudyRecord:
        return StudyRecord.from_dict(dict(row))

    @staticmethod
    def _result_from_row(row: sqlite3.Row) -> TestResult:
        return TestResult(
            id=row["id"],
            test_id=row["test_id"],
            learner_id=row["learner_id"],
            level=TestLevel(row["level"]),
            score=row["score"],
            max_score=row["max_score"],
            accuracy=row["accuracy"],
            time_spent_ms=row["time_spent_ms"],
            completed_at=parse_datetime(row["completed_at"]),
            passed=bool(row["passed"]),
            weak_areas=tuple(json.loads(row["weak_areas"] or "[]")),
        )

    @staticmethod
    def _profile_from_row(row: sqlite3.Row) -> LearnerProfile:
        data = dict(row)
        data["achievements"] = json.loads(data["achievements"] or "[]")
        return LearnerProfile.from_dict(data)

    # =========================================================================
    # Blocking operations
    # =========================================================================

    def _get_record(self, word_id: str, learner_id: str) -> StudyRecord | None:
        cursor = self.conn.cursor()
        cursor.execute(
            "SELECT * FROM study_records WHERE learner_id = ? AND word_id = ?",
            (learner_id, word_id),
        )
        row = cursor.fetchone()
        return self._record_from_row(row) if row else None

    def _put_record(self, record: StudyRecord) -> None:
        data = record.to_dict()
        cursor = self.conn.cursor()
        cursor.execute(
            """
            INSERT OR REPLACE INTO study_records
            (id, learner_id, word_id, mastery_score, review_count, correct_count,
             last_review_at, next_review_at, study_time_ms, created_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                data["id"],
                data["learner_id"],
                data["word_id"],
                data["mastery_score"],
                data["review_count"],
                data["correct_count"],
                data["last_review_at"],
                data["next_review_at"],
                data["study_time_ms"],
                data["created_at"],
            ),
        )
        self.conn.commit()

    def _get_records_by_learner(self, learner_id: str) -> list[StudyRecord]:
        cursor = self.conn.cursor()
        cursor.execute(
            "SELECT * FROM study_records WHERE learner_id = ? ORDER BY created_at, id",
            (learner_id,),
        )
        return [self._record_from_row(row) for row in cursor.fetchall()]

    def _put_test_result(self, result: TestResult) -> None:
        cursor = self.conn.cursor()
        cursor.execute(
            """
            INSERT OR REPLACE INTO test_results
            (id, test_id, learner_id, level, score, max_score, accuracy,
             time_spent_ms, completed_at, passed, weak_areas)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                result.id,
                result.test_id,
                result.learner_id,
                result.level.value,
                result.score,
                result.max_score,
                result.accuracy,
                result.time_spent_ms,
                result.completed_at.isoformat(),
                result.passed,
                json.dumps(list(result.weak_areas)),
            ),
        )
        self.conn.commit()

    def _get_test_results(self, learner_id: str) -> list[TestResult]:
        cursor = self.conn.cursor()
        cursor.execute(
            "SELECT * FROM test_results WHERE learner_id = ? ORDER BY completed_at",
            (learner_id,),
        )
        return [self._result_from_row(row) for row in cursor.fetchall()]

    def _get_learner_profile(self, learner_id: str) -> LearnerProfile | None:
        cursor = self.conn.cursor()
        cursor.execute("SELECT * FROM learner_profiles WHERE learner_id = ?", (learner_id,))
        row = cursor.fetchone()
        return self._profile_from_row(row) if row else None

    def _put_learner_profile(self, profile: LearnerProfile) -> None:
        data = profile.to_dict()
        cursor = self.conn.cursor()
        cursor.execute(
            """
            INSERT OR REPLACE INTO learner_profiles
            (learner_id, username, level, experience, streak, achievements,
             total_words_studied, total_study_time_ms, tests_taken, daily_goal,
             created_at, last_active_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                data["learner_id"],
                data["username"],
                data["level"],
                data["experience"],
                data["streak"],
                json.dumps(data["achievements"]),
                data["total_words_studied"],
                data["total_study_time_ms"],
                data["tests_taken"],
                data["daily_goal"],
                data["created_at"],
                data["last_active_at"],
            ),
        )
        self.conn.commit()

    def _reset_learner(self, learner_id: str) -> None:
        cursor = self.conn.cursor()
        cursor.execute("DELETE FROM study_records WHERE learner_id = ?", (learner_id,))
        cursor.execute("DELETE FROM test_results WHERE learner_id = ?", (learner_id,))
        self.conn.commit()

        profile = self._get_learner_profile(learner_id)
        if profile is not None:
            self._put_learner_profile(profile.reset_progress())
        logger.info(f"Progress reset for learner {learner_id}")

    # =========================================================================
    # StorageBackend
    # =========================================================================

    async def get_record(self, word_id: str, learner_id: str) -> StudyRecord | None:
        return await asyncio.to_thread(self._get_record, word_id, learner_id)

    async def put_record(self, record: StudyRecord) -> None:
        await asyncio.to_thread(self._put_record, record)

    async def get_records_by_learner(self, learner_id: str) -> list[StudyRecord]:
        return await asyncio.to_thread(self._get_records_by_learner, learner_id)

    async def put_test_result(self, result: TestResult) -> None:
        await asyncio.to_thread(self._put_test_result, result)

    async def get_test_results(self, learner_id: str) -> list[TestResult]:
        return await asyncio.to_thread(self._get_test_results, learner_id)

    async def get_learner_profile(self, learner_id: str) -> LearnerProfile | None:
        return await asyncio.to_thread(self._get_learner_profile, learner_id)

    async def put_learner_profile(self, profile: LearnerProfile) -> None:
        await asyncio.to_thread(self._put_learner_profile, profile)

    async def reset_learner(self, learner_id: str) -> None:
        await asyncio.to_thread(self._reset_learner, learner_id)
