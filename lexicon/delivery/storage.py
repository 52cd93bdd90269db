"""
Storage collaborator contract and an in-memory implementation.

The session managers only see ``StorageBackend``. Two implementations ship:
- InMemoryStore: dict-backed, used by tests and throwaway runs
- StateStore (state_store.py): SQLite file under the data directory

Export/import move a learner's data as a JSON-serializable snapshot.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime
from typing import Any, Protocol

from loguru import logger

from lexicon.core.errors import PersistenceError, ValidationError
from lexicon.core.models import LearnerProfile, StudyRecord, TestResult, utcnow


class StorageBackend(Protocol):
    """Async persistence used by the session managers."""

    async def get_record(self, word_id: str, learner_id: str) -> StudyRecord | None:
        ...

    async def put_record(self, record: StudyRecord) -> None:
        ...

    async def get_records_by_learner(self, learner_id: str) -> list[StudyRecord]:
        ...

    async def put_test_result(self, result: TestResult) -> None:
        ...

    async def get_test_results(self, learner_id: str) -> list[TestResult]:
        ...

    async def get_learner_profile(self, learner_id: str) -> LearnerProfile | None:
        ...

    async def put_learner_profile(self, profile: LearnerProfile) -> None:
        ...

    async def reset_learner(self, learner_id: str) -> None:
        """Delete records and results, reset profile counters."""
        ...


class InMemoryStore:
    """
    Dict-backed StorageBackend.

    Stored objects are serialized on write and rebuilt on read so callers
    never share mutable state with the store.

    Args:
        fail_on: Method names that raise OSError when called
    """

    def __init__(self, fail_on: Iterable[str] | None = None):
        self.fail_on: set[str] = set(fail_on or ())
        self._records: dict[tuple[str, str], dict[str, Any]] = {}
        self._results: dict[str, dict[str, dict[str, Any]]] = {}
        self._profiles: dict[str, dict[str, Any]] = {}

    def _check(self, operation: str) -> None:
        if operation in self.fail_on:
            raise OSError(f"simulated failure in {operation}")

    # =========================================================================
    # Study records
    # =========================================================================

    async def get_record(self, word_id: str, learner_id: str) -> StudyRecord | None:
        self._check("get_record")
        data = self._records.get((learner_id, word_id))
        return StudyRecord.from_dict(data) if data else None

    async def put_record(self, record: StudyRecord) -> None:
        self._check("put_record")
        self._records[(record.learner_id, record.word_id)] = record.to_dict()

    async def get_records_by_learner(self, learner_id: str) -> list[StudyRecord]:
        self._check("get_records_by_learner")
        return [
            StudyRecord.from_dict(data)
            for (owner, _), data in self._records.items()
            if owner == learner_id
        ]

    # =========================================================================
    # Test results
    # =========================================================================

    async def put_test_result(self, result: TestResult) -> None:
        self._check("put_test_result")
        self._results.setdefault(result.learner_id, {})[result.id] = result.to_dict()

    async def get_test_results(self, learner_id: str) -> list[TestResult]:
        self._check("get_test_results")
        return [TestResult.from_dict(data) for data in self._results.get(learner_id, {}).values()]

    # =========================================================================
    # Profiles
    # =========================================================================

    async def get_learner_profile(self, learner_id: str) -> LearnerProfile | None:
        self._check("get_learner_profile")
        data = self._profiles.get(learner_id)
        return LearnerProfile.from_dict(data) if data else None

    async def put_learner_profile(self, profile: LearnerProfile) -> None:
        self._check("put_learner_profile")
        self._profiles[profile.learner_id] = profile.to_dict()

    async def reset_learner(self, learner_id: str) -> None:
        self._check("reset_learner")
        for key in [k for k in self._records if k[0] == learner_id]:
            del self._records[key]
        self._results.pop(learner_id, None)

        data = self._profiles.get(learner_id)
        if data:
            self._profiles[learner_id] = LearnerProfile.from_dict(data).reset_progress().to_dict()
        logger.info(f"Progress reset for learner {learner_id}")


# =============================================================================
# Export / Import
# =============================================================================


async def export_data(
    store: StorageBackend,
    learner_id: str,
    now: datetime | None = None,
) -> dict[str, Any]:
    """Snapshot of one learner's profile, study records and test results."""
    try:
        profile = await store.get_learner_profile(learner_id)
        records = await store.get_records_by_learner(learner_id)
        results = await store.get_test_results(learner_id)
    except Exception as e:
        raise PersistenceError("export", str(e)) from e

    return {
        "profile": profile.to_dict() if profile else None,
        "study_records": {r.id: r.to_dict() for r in records},
        "test_results": [r.to_dict() for r in results],
        "exported_at": (now or utcnow()).isoformat(),
    }


async def import_data(store: StorageBackend, payload: dict[str, Any]) -> dict[str, int]:
    """
    Load a snapshot produced by ``export_data``.

    Returns:
        Counts of imported profiles, records and results

    Raises:
        ValidationError: Payload is not a snapshot or holds malformed entries
    """
    if not isinstance(payload, dict):
        raise ValidationError("Import payload must be an object")

    try:
        profile = LearnerProfile.from_dict(payload["profile"]) if payload.get("profile") else None
        records = [StudyRecord.from_dict(d) for d in (payload.get("study_records") or {}).values()]
        results = [TestResult.from_dict(d) for d in payload.get("test_results") or []]
    except (KeyError, TypeError, ValueError) as e:
        raise ValidationError(f"Malformed import payload: {e}") from e

    try:
        if profile:
            await store.put_learner_profile(profile)
        for record in records:
            await store.put_record(record)
        for result in results:
            await store.put_test_result(result)
    except Exception as e:
        raise PersistenceError("import", str(e)) from e

    logger.info(f"Imported {len(records)} study records and {len(results)} test results")
    return {
        "profiles": 1 if profile else 0,
        "study_records": len(records),
        "test_results": len(results),
    }
