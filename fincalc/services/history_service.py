"""Calculation history - a small persistence port injected into the routers.

``HistoryStore`` is the interface; ``InMemoryHistoryStore`` is the default
bounded implementation.  The optional PostgreSQL audit table in
``fincalc.models.db_models`` is written alongside it, not instead of it.
"""

from __future__ import annotations

import json
import logging
import threading
from abc import ABC, abstractmethod
from collections import deque
from datetime import datetime, timezone
from typing import Any, Deque, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError

from fincalc.config import settings
from fincalc.database import get_session
from fincalc.models.db_models import CalculationAudit
from fincalc.models.domain import CalculationRecord

logger = logging.getLogger(__name__)


class HistoryStore(ABC):
    """Append-only store of ``CalculationRecord`` objects."""

    @abstractmethod
    def append(self, record: CalculationRecord) -> None:
        ...

    @abstractmethod
    def list(self, limit: Optional[int] = None) -> List[CalculationRecord]:
        """Most recent first."""


class InMemoryHistoryStore(HistoryStore):
    """Keeps the newest *max_entries* records; safe across threads."""

    def __init__(self, max_entries: int = settings.HISTORY_MAX_ENTRIES) -> None:
        self._records: Deque[CalculationRecord] = deque(maxlen=max_entries)
        self._lock = threading.Lock()

    def append(self, record: CalculationRecord) -> None:
        with self._lock:
            self._records.append(record)

    def list(self, limit: Optional[int] = None) -> List[CalculationRecord]:
        with self._lock:
            records = list(reversed(self._records))
        return records if limit is None else records[:limit]

    def clear(self) -> None:
        with self._lock:
            self._records.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)


def make_record(kind: str, inputs: Dict[str, Any], outputs: Dict[str, Any]) -> CalculationRecord:
    return CalculationRecord(
        kind=kind,
        inputs=inputs,
        outputs=outputs,
        recorded_at=datetime.now(timezone.utc),
    )


_store: HistoryStore = InMemoryHistoryStore()


def get_history_store() -> HistoryStore:
    """FastAPI dependency; override with ``app.dependency_overrides`` in tests."""
    return _store


async def record_calculation(
    store: HistoryStore,
    endpoint: str,
    kind: str,
    inputs: Dict[str, Any],
    outputs: Dict[str, Any],
) -> CalculationRecord:
    """Append to *store* and, when PostgreSQL is up, write a ``CalculationAudit`` row."""
    record = make_record(kind, inputs, outputs)
    store.append(record)

    try:
        async with get_session() as session:
            if session is not None:
                session.add(
                    CalculationAudit(
                        endpoint=endpoint,
                        kind=kind,
                        inputs=json.dumps(inputs, default=str),
                        outputs=json.dumps(outputs, default=str),
                    )
                )
    except SQLAlchemyError as exc:
        logger.debug("Could not persist %s audit row: %s", kind, exc)
    return record
