"""pgmapper: annotation-driven object mapping for PostgreSQL"""

from pgmapper.config import ConnectionConfig, MapperConfig
from pgmapper.database_operations import DatabaseOperations, Executor
from pgmapper.db_context import QueryLog, QueryTracker, get_query_tracker, track_queries
from pgmapper.exceptions import (
    ConstructorNotFound,
    ExecutionFailure,
    IdNotFound,
    InvalidAnnotatedFieldException,
    MapperError,
    MissingTableMetadata,
)
from pgmapper.instantiator import Instantiator
from pgmapper.mapper import Mapper
from pgmapper.metadata import (
    ClassDescriptor,
    Column,
    FieldDescriptor,
    FieldRole,
    Id,
    TableBinding,
    describe,
    table,
)
from pgmapper.statements import Statement, StatementBuilder, render_value

__all__ = [
    "Mapper",
    "MapperConfig",
    "ConnectionConfig",
    "DatabaseOperations",
    "Executor",
    "Instantiator",
    "Statement",
    "StatementBuilder",
    "render_value",
    "table",
    "Id",
    "Column",
    "TableBinding",
    "FieldRole",
    "FieldDescriptor",
    "ClassDescriptor",
    "describe",
    "QueryLog",
    "QueryTracker",
    "track_queries",
    "get_query_tracker",
    "MapperError",
    "MissingTableMetadata",
    "InvalidAnnotatedFieldException",
    "IdNotFound",
    "ConstructorNotFound",
    "ExecutionFailure",
]
