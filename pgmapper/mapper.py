"""Mapper class"""

from typing import Any, TypeVar

from pgmapper.config import ConnectionConfig, MapperConfig
from pgmapper.database_operations import DatabaseOperations, Executor
from pgmapper.instantiator import Instantiator
from pgmapper.logging import get_logger
from pgmapper.metadata import describe
from pgmapper.statements import Statement, StatementBuilder

logger = get_logger(__name__)

T = TypeVar("T")


class Mapper:
    """Persists and loads entities declared with @table, Id and Column.

    Every operation sends exactly one statement through the executor, which
    owns the connection for the duration of that statement. The mapper keeps
    no reference to the entities it is given or returns.

    Usage:
        mapper = Mapper(DatabaseOperations(ConnectionConfig.from_env()))
        await mapper.insert(User(1, "Ann", 30))
        user = await mapper.select_by_id(User, 1)
    """

    def __init__(self, executor: Executor, config: MapperConfig | None = None):
        self.executor = executor
        self.config = config or MapperConfig()

    @classmethod
    def from_config(
        cls,
        connection: ConnectionConfig | None = None,
        config: MapperConfig | None = None,
    ) -> "Mapper":
        """Create a mapper executing through asyncpg"""
        return cls(DatabaseOperations(connection), config)

    def statements(self, entity_class: type) -> StatementBuilder:
        """Return the statement builder for an entity class"""
        return StatementBuilder(
            describe(entity_class),
            default_schema=self.config.default_schema,
            insert_ids=self.config.insert_ids,
        )

    def _prepare(self, statement: Statement) -> tuple[str, list[Any]]:
        """Pick the bound or literal form of a statement"""
        if not self.config.literal_sql:
            return statement.query, list(statement.params)

        for value in statement.params:
            if isinstance(value, str) and "'" in value:
                logger.warning(
                    "literal_value_contains_quote", query=statement.query, value=value
                )
        return statement.to_sql(), []

    async def _execute_update(self, statement: Statement) -> bool:
        query, params = self._prepare(statement)
        return await self.executor.execute_update(query, params) == 1

    async def _execute_query(self, statement: Statement) -> list[Any]:
        query, params = self._prepare(statement)
        return await self.executor.execute_query(query, params)

    # Write operations: True iff exactly one row was affected
    async def insert(self, entity: Any) -> bool:
        return await self._execute_update(self.statements(type(entity)).insert(entity))

    async def update(self, entity: Any) -> bool:
        return await self._execute_update(self.statements(type(entity)).update(entity))

    async def delete(self, entity: Any) -> bool:
        """Delete the row matching every mapped field of the entity"""
        return await self._execute_update(self.statements(type(entity)).delete(entity))

    async def delete_by_id(self, entity_class: type[T], entity_id: Any) -> bool:
        """Delete the row whose first Id column equals entity_id"""
        return await self._execute_update(
            self.statements(entity_class).delete_by_id(entity_id)
        )

    # Read operations
    async def select_all(self, entity_class: type[T]) -> list[T]:
        """Load every row of the entity's table"""
        # Resolved before the query runs so a missing constructor fails even on empty tables
        instantiator: Instantiator[T] = Instantiator(describe(entity_class))
        rows = await self._execute_query(self.statements(entity_class).select_all())
        return instantiator.map_rows_to_entities(rows)

    async def select_by_id(self, entity_class: type[T], entity_id: Any) -> T | None:
        """Load the entity whose first Id column equals entity_id, or None.

        When several rows match (composite keys), every row is built and the
        last one is returned.
        """
        instantiator: Instantiator[T] = Instantiator(describe(entity_class))
        statement = self.statements(entity_class).select_by_id(entity_id)
        rows = await self._execute_query(statement)
        entities = instantiator.map_rows_to_entities(rows)
        if not entities:
            return None
        if len(entities) > 1:
            logger.warning(
                "select_by_id_multiple_rows", query=statement.query, rows=len(entities)
            )
        return entities[-1]
