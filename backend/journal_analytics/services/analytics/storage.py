"""
Snapshot storage contract and an in-memory implementation.

Features:
- Idempotent create-or-replace keyed by (user, period type, scope)
- Lookup by scope and listing by period type
- Daily range retrieval for reports
- Per-user cleanup

Persistence technology is left to the caller; any backend satisfying
``SnapshotStore`` can be handed to ``AnalyticsService``. Backends report
their own failures as ``StorageError``.
"""

import threading
from datetime import date
from typing import Any, Dict, List, Optional, Protocol, Tuple

from journal_analytics.core.enums import PeriodType
from journal_analytics.core.errors.base import NotFoundError, ValidationError
from journal_analytics.core.errors.decorators import error_handler
from journal_analytics.core.logging.logger import get_logger
from journal_analytics.models.analytics import AnalyticsSnapshot, DayScope, Scope

logger = get_logger(__name__)


class SnapshotStore(Protocol):
    """Storage collaborator for analytics snapshots."""

    def upsert(self, snapshot: AnalyticsSnapshot) -> bool:
        """Create or fully replace the snapshot stored under ``snapshot.key``. Returns True on create."""
        ...

    def get(self, user_id: str, scope: Scope) -> Optional[AnalyticsSnapshot]:
        ...

    def list_snapshots(
        self, user_id: str, period_type: Optional[PeriodType] = None
    ) -> List[AnalyticsSnapshot]:
        ...

    def delete_user(self, user_id: str) -> int:
        ...


class InMemorySnapshotStore:
    """
    Thread-safe dictionary-backed ``SnapshotStore``.

    Writing the same snapshot twice leaves the store unchanged; a newer
    snapshot for the same key replaces the old one without merging.
    """

    def __init__(self) -> None:
        self._records: Dict[Tuple[Any, ...], AnalyticsSnapshot] = {}
        self._lock = threading.Lock()
        self.logger = get_logger("snapshot_storage")

    @staticmethod
    def _key(user_id: str, scope: Scope) -> Tuple[Any, ...]:
        return (user_id, scope.period_type.value) + scope.key

    def upsert(self, snapshot: AnalyticsSnapshot) -> bool:
        with self._lock:
            created = snapshot.key not in self._records
            self._records[snapshot.key] = snapshot
        self.logger.debug(
            "Stored analytics snapshot",
            extra={"key": list(snapshot.key), "is_new": created}
        )
        return created

    def get(self, user_id: str, scope: Scope) -> Optional[AnalyticsSnapshot]:
        with self._lock:
            return self._records.get(self._key(user_id, scope))

    @error_handler(
        context_extractor=lambda self, user_id, scope: {
            "user_id": user_id,
            "scope": list(scope.key),
        },
        log_message="Snapshot lookup failed"
    )
    def require(self, user_id: str, scope: Scope) -> AnalyticsSnapshot:
        """
        Get a snapshot that must exist.

        Raises:
            NotFoundError: If nothing is stored for (user, scope).
        """
        snapshot = self.get(user_id, scope)
        if snapshot is None:
            raise NotFoundError(
                "No analytics snapshot found",
                context={"user_id": user_id, "period_type": scope.period_type.value}
            )
        return snapshot

    def list_snapshots(
        self, user_id: str, period_type: Optional[PeriodType] = None
    ) -> List[AnalyticsSnapshot]:
        """Snapshots of a user ordered by scope key, optionally of one period type."""
        with self._lock:
            matches = [
                snapshot for key, snapshot in self._records.items()
                if key[0] == user_id and (period_type is None or key[1] == period_type.value)
            ]
        return sorted(matches, key=lambda s: (s.period_type.value,) + s.scope.key)

    @error_handler(
        context_extractor=lambda self, user_id, start_date, end_date: {
            "user_id": user_id,
            "start_date": str(start_date),
            "end_date": str(end_date),
        },
        log_message="Failed to retrieve daily snapshots"
    )
    def get_daily_range(self, user_id: str, start_date: date, end_date: date) -> List[AnalyticsSnapshot]:
        """
        Daily snapshots with ``start_date <= date <= end_date``, ascending.

        Raises:
            ValidationError: If the range is inverted.
        """
        if start_date > end_date:
            raise ValidationError(
                "Invalid date range",
                context={"start_date": str(start_date), "end_date": str(end_date)}
            )
        return [
            snapshot for snapshot in self.list_snapshots(user_id, PeriodType.DAY)
            if isinstance(snapshot.scope, DayScope) and start_date <= snapshot.scope.date <= end_date
        ]

    def delete_user(self, user_id: str) -> int:
        with self._lock:
            keys = [key for key in self._records if key[0] == user_id]
            for key in keys:
                del self._records[key]
        self.logger.info(
            "Deleted user snapshots",
            extra={"user_id": user_id, "deleted_count": len(keys)}
        )
        return len(keys)

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)
