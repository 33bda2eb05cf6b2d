from collections.abc import Mapping, Sequence
from typing import Any, Protocol

from pgmapper.config import ConnectionConfig
from pgmapper.db_context import log_query, open_connection
from pgmapper.exceptions import ExecutionFailure
from pgmapper.logging import get_logger

logger = get_logger(__name__)


class Executor(Protocol):
    """Runs one statement per call"""

    async def execute_update(self, query: str, params: Sequence[Any]) -> int:
        """Run a write statement and return the number of affected rows"""
        ...

    async def execute_query(
        self, query: str, params: Sequence[Any]
    ) -> list[Mapping[str, Any]]:
        """Run a query and return all of its rows"""
        ...


def affected_rows(status: str) -> int:
    """Parse the row count from a command status such as ``INSERT 0 1``"""
    last = status.split()[-1] if status else ""
    return int(last) if last.isdigit() else 0


class DatabaseOperations:
    """Executor opening a fresh asyncpg connection for every statement"""

    def __init__(self, config: ConnectionConfig | None = None):
        self.config = config or ConnectionConfig()

    async def execute_update(self, query: str, params: Sequence[Any]) -> int:
        """Execute a write statement and return the affected row count"""
        log_query(query, list(params))
        try:
            async with open_connection(self.config) as conn:
                status = await conn.execute(query, *params)
        except Exception as exc:
            logger.error("statement_failed", query=query, error=str(exc))
            raise ExecutionFailure(query, params) from exc

        count = affected_rows(status)
        logger.debug("statement_executed", query=query, rows=count)
        return count

    async def execute_query(
        self, query: str, params: Sequence[Any]
    ) -> list[Mapping[str, Any]]:
        """Execute query and fetch all rows"""
        log_query(query, list(params))
        try:
            async with open_connection(self.config) as conn:
                rows = await conn.fetch(query, *params)
        except Exception as exc:
            logger.error("statement_failed", query=query, error=str(exc))
            raise ExecutionFailure(query, params) from exc

        logger.debug("statement_executed", query=query, rows=len(rows))
        return rows
