"""
SQL synthesis for mapped entities.
The goal is to produce statements without execution.
"""

import re
from dataclasses import dataclass
from numbers import Number
from typing import Any

from pgmapper.exceptions import IdNotFound, InvalidAnnotatedFieldException
from pgmapper.metadata import ClassDescriptor, FieldDescriptor

# A $n inside an identifier such as t$1 is not a placeholder
_PLACEHOLDER = re.compile(r"(?<![\w$])\$(\d+)")


def render_value(value: Any) -> str:
    """Render a value as a SQL literal.

    Numbers are rendered bare, ``None`` as NULL and anything else as a
    single-quoted string. Embedded quotes are NOT escaped.
    """
    if value is None:
        return "NULL"
    if isinstance(value, Number) and not isinstance(value, bool):
        return str(value)
    return f"'{value}'"


@dataclass(frozen=True)
class Statement:
    """A SQL statement with ``$n`` placeholders and its parameters"""

    query: str
    params: tuple[Any, ...] = ()

    def to_sql(self) -> str:
        """Return the statement with every placeholder replaced by its literal"""

        def replace_param(match: re.Match) -> str:
            return render_value(self.params[int(match.group(1)) - 1])

        return _PLACEHOLDER.sub(replace_param, self.query)


class _Params:
    """Collects parameters and hands out their placeholders"""

    def __init__(self):
        self.values: list[Any] = []

    def add(self, value: Any) -> str:
        self.values.append(value)
        return f"${len(self.values)}"

    def condition(self, column: str, value: Any) -> str:
        # col=NULL never matches
        if value is None:
            return f"{column} IS NULL"
        return f"{column}={self.add(value)}"


class StatementBuilder:
    """
    Builds the statements for one entity class.

    Usage:
        builder = StatementBuilder(describe(User))
        builder.insert(user).to_sql()
        # INSERT INTO public.users (name,age) VALUES('Ann',30);
    """

    def __init__(
        self,
        descriptor: ClassDescriptor,
        default_schema: str | None = None,
        insert_ids: bool = False,
    ):
        self.descriptor = descriptor
        self.insert_ids = insert_ids
        self.table_name = descriptor.table.qualified_name(default_schema)

    def _require_id_fields(self) -> list[FieldDescriptor]:
        ids = self.descriptor.id_fields
        if not ids:
            raise InvalidAnnotatedFieldException(
                self.descriptor.entity_class, "no field is annotated with Id"
            )
        return ids

    def _where(self, fields: list[FieldDescriptor], entity: Any, params: _Params) -> str:
        return " AND ".join(
            params.condition(f.column, f.value_of(entity)) for f in fields  # type: ignore[arg-type]
        )

    def insert(self, entity: Any) -> Statement:
        """INSERT of the Column fields; Id fields are left to the server unless insert_ids is set"""
        fields = (
            self.descriptor.mapped_fields
            if self.insert_ids
            else self.descriptor.column_fields
        )
        if not fields:
            return Statement(f"INSERT INTO {self.table_name} DEFAULT VALUES;")

        params = _Params()
        columns = ",".join(f.column for f in fields)  # type: ignore[misc]
        placeholders = ",".join(params.add(f.value_of(entity)) for f in fields)
        return Statement(
            f"INSERT INTO {self.table_name} ({columns}) VALUES({placeholders});",
            tuple(params.values),
        )

    def update(self, entity: Any) -> Statement:
        """UPDATE every Column field, matching on all Id fields"""
        ids = self._require_id_fields()
        columns = self.descriptor.column_fields
        if not columns:
            raise InvalidAnnotatedFieldException(
                self.descriptor.entity_class, "no field is annotated with Column"
            )

        params = _Params()
        set_clause = ",".join(
            f"{f.column}={params.add(f.value_of(entity))}" for f in columns
        )
        where_clause = self._where(ids, entity, params)
        return Statement(
            f"UPDATE {self.table_name} SET {set_clause} WHERE {where_clause};",
            tuple(params.values),
        )

    def delete(self, entity: Any) -> Statement:
        """DELETE matching every mapped field of the instance"""
        fields = self.descriptor.mapped_fields
        if not fields:
            raise InvalidAnnotatedFieldException(
                self.descriptor.entity_class, "no field is annotated with Id or Column"
            )

        params = _Params()
        where_clause = self._where(fields, entity, params)
        return Statement(
            f"DELETE FROM {self.table_name} WHERE {where_clause};",
            tuple(params.values),
        )

    def delete_by_id(self, entity_id: Any) -> Statement:
        """DELETE matching the first Id field only"""
        ids = self.descriptor.id_fields
        if not ids:
            raise IdNotFound(self.descriptor.entity_class)

        params = _Params()
        return Statement(
            f"DELETE FROM {self.table_name} WHERE {params.condition(ids[0].column, entity_id)};",  # type: ignore[arg-type]
            tuple(params.values),
        )

    def select_all(self) -> Statement:
        if not self.descriptor.projection:
            raise InvalidAnnotatedFieldException(
                self.descriptor.entity_class, "no field is annotated with Id or Column"
            )
        columns = ",".join(self.descriptor.projection)
        return Statement(f"SELECT {columns} FROM {self.table_name}")

    def select_by_id(self, entity_id: Any) -> Statement:
        id_column = self.descriptor.id_field().column
        params = _Params()
        return Statement(
            f"{self.select_all().query} WHERE {params.condition(id_column, entity_id)}",  # type: ignore[arg-type]
            tuple(params.values),
        )
