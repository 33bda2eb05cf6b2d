from collections.abc import Sequence
from typing import Any

import pytest

from pgmapper.config import MapperConfig
from pgmapper.mapper import Mapper


class RecordingExecutor:
    """In-memory executor recording every statement it receives."""

    def __init__(self):
        self.calls: list[tuple[str, list[Any]]] = []
        self.rowcount = 1
        self.rows: list[dict[str, Any]] = []

    async def execute_update(self, query: str, params: Sequence[Any]) -> int:
        self.calls.append((query, list(params)))
        return self.rowcount

    async def execute_query(
        self, query: str, params: Sequence[Any]
    ) -> list[dict[str, Any]]:
        self.calls.append((query, list(params)))
        return list(self.rows)

    @property
    def last_query(self) -> str:
        return self.calls[-1][0]

    @property
    def last_params(self) -> list[Any]:
        return self.calls[-1][1]


@pytest.fixture
def executor():
    return RecordingExecutor()


@pytest.fixture
def mapper(executor):
    """Mapper sending bound parameters"""
    return Mapper(executor)


@pytest.fixture
def literal_mapper(executor):
    """Mapper embedding values as SQL literals"""
    return Mapper(executor, MapperConfig(literal_sql=True))
