import traceback
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

import asyncpg

from pgmapper.config import ConnectionConfig


@dataclass
class QueryLog:
    """Represents a logged query"""

    query: str
    params: list[Any]
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))
    stack_trace: str | None = None

    def __repr__(self) -> str:
        return f"QueryLog(query={self.query!r}, params={self.params!r}, timestamp={self.timestamp})"


class QueryTracker:
    """Tracks queries executed during a context"""

    def __init__(self):
        self.queries: list[QueryLog] = []
        self._enabled: bool = False

    def enable(self):
        self._enabled = True

    def disable(self):
        self._enabled = False

    def is_enabled(self) -> bool:
        return self._enabled

    def log_query(self, query: str, params: list[Any], stack_trace: str | None = None):
        """Log a query with its parameters and optional stack trace"""
        if self._enabled:
            self.queries.append(
                QueryLog(query=query, params=list(params), stack_trace=stack_trace)
            )

    def get_queries(self) -> list[QueryLog]:
        """Get all logged queries"""
        return self.queries.copy()

    def clear(self):
        self.queries.clear()

    def count(self) -> int:
        return len(self.queries)

    def to_dict(self) -> list[dict[str, Any]]:
        """Convert logged queries to a list of dictionaries"""
        return [
            {
                "query": log.query,
                "params": log.params,
                "timestamp": log.timestamp.isoformat(),
                "stack_trace": log.stack_trace,
            }
            for log in self.queries
        ]


_query_tracker: ContextVar[QueryTracker | None] = ContextVar(
    "query_tracker", default=None
)


def get_query_tracker() -> QueryTracker | None:
    """Get the current query tracker from context"""
    return _query_tracker.get()


def log_query(query: str, params: list[Any]):
    """Log a query to the current query tracker if available"""
    tracker = _query_tracker.get()
    if tracker:
        # Skip this frame and the executor method that called it
        relevant_stack = traceback.extract_stack()[:-2]
        tracker.log_query(query, params, "".join(traceback.format_list(relevant_stack)))


@asynccontextmanager
async def track_queries() -> AsyncIterator[QueryTracker]:
    """Context manager recording every statement executed inside it.

    async with track_queries() as tracker:
        await mapper.insert(user)
        assert tracker.count() == 1
    """
    current_tracker = _query_tracker.get()

    if current_tracker:
        # Already have a tracker, just enable it
        was_enabled = current_tracker.is_enabled()
        current_tracker.enable()
        try:
            yield current_tracker
        finally:
            if not was_enabled:
                current_tracker.disable()
    else:
        tracker = QueryTracker()
        tracker.enable()
        token = _query_tracker.set(tracker)
        try:
            yield tracker
        finally:
            _query_tracker.reset(token)


@asynccontextmanager
async def open_connection(config: ConnectionConfig) -> AsyncIterator[asyncpg.Connection]:
    """Open one connection for the duration of the block.

    The connection is closed when the block exits, whether it exits normally
    or through an exception.
    """
    conn = await asyncpg.connect(config.dsn_string())
    try:
        yield conn
    finally:
        await conn.close()
