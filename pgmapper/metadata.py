from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from functools import cache
from inspect import get_annotations
from typing import Annotated, Any, ClassVar, get_args, get_origin

from pydantic import BaseModel

from pgmapper.exceptions import InvalidAnnotatedFieldException, MissingTableMetadata


class FieldRole(str, Enum):
    ID = "id"
    COLUMN = "column"
    UNMAPPED = "unmapped"


class ColumnBinding:
    """Marker placed in ``Annotated`` metadata to bind a field to a column.

    Usage:
        @table("users", schema="public")
        @dataclass
        class User:
            id: Annotated[int, Id("id")]
            name: Annotated[str, Column("name")]
            age: Annotated[int, Column()]  # column named after the field
    """

    role: ClassVar[FieldRole]

    def __init__(self, column_name: str | None = None):
        """
        Args:
            column_name: The actual database column name, defaults to the field name
        """
        self._column_name = column_name

    @property
    def column(self) -> str | None:
        """Return the bound database column name, if one was given."""
        return self._column_name

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._column_name!r})"


class Id(ColumnBinding):
    """Primary key column"""

    role = FieldRole.ID


class Column(ColumnBinding):
    """Ordinary column"""

    role = FieldRole.COLUMN


@dataclass(frozen=True)
class TableBinding:
    """Table a class is persisted to.

    ``factory`` is an optional row-to-entity function receiving a
    ``{field_name: value}`` dict; when set it replaces constructor lookup.
    """

    name: str
    schema: str | None = None
    factory: Callable[[dict[str, Any]], Any] | None = None

    def qualified_name(self, default_schema: str | None = None) -> str:
        schema = self.schema or default_schema
        return f"{schema}.{self.name}" if schema else self.name


def table(
    name: str,
    schema: str | None = None,
    *,
    factory: Callable[[dict[str, Any]], Any] | None = None,
):
    """Class decorator binding an entity class to ``schema.name``."""

    def decorator(cls: type) -> type:
        cls.__table__ = TableBinding(name=name, schema=schema, factory=factory)  # type: ignore[attr-defined]
        return cls

    return decorator


@dataclass(frozen=True)
class FieldDescriptor:
    name: str
    role: FieldRole
    column: str | None = None

    @property
    def is_mapped(self) -> bool:
        return self.role is not FieldRole.UNMAPPED

    def value_of(self, entity: Any) -> Any:
        return getattr(entity, self.name)


@dataclass(frozen=True)
class ClassDescriptor:
    """Table binding plus the fields of an entity class in declaration order"""

    entity_class: type
    table: TableBinding
    fields: tuple[FieldDescriptor, ...]

    @property
    def id_fields(self) -> list[FieldDescriptor]:
        return [f for f in self.fields if f.role is FieldRole.ID]

    @property
    def column_fields(self) -> list[FieldDescriptor]:
        return [f for f in self.fields if f.role is FieldRole.COLUMN]

    @property
    def mapped_fields(self) -> list[FieldDescriptor]:
        """Id and Column fields in declaration order.

        This order is the SELECT projection, the order values are read from
        rows and the order of constructor arguments.
        """
        return [f for f in self.fields if f.is_mapped]

    @property
    def projection(self) -> list[str]:
        return [f.column for f in self.mapped_fields]  # type: ignore[misc]

    def id_field(self) -> FieldDescriptor:
        """Return the first Id field, raising if the class declares none"""
        ids = self.id_fields
        if not ids:
            raise InvalidAnnotatedFieldException(
                self.entity_class, "no field is annotated with Id"
            )
        return ids[0]


def _classify(name: str, markers: Any) -> FieldDescriptor:
    for marker in markers:
        if isinstance(marker, ColumnBinding):
            return FieldDescriptor(name, marker.role, marker.column or name)
    return FieldDescriptor(name, FieldRole.UNMAPPED)


def _declared_fields(entity_class: type) -> list[FieldDescriptor]:
    # pydantic keeps Annotated metadata on FieldInfo
    if issubclass(entity_class, BaseModel):
        return [
            _classify(name, info.metadata)
            for name, info in entity_class.model_fields.items()
        ]

    hints: dict[str, Any] = {}
    for klass in reversed(entity_class.__mro__):
        hints.update(get_annotations(klass, eval_str=True))

    fields = []
    for name, hint in hints.items():
        if name.startswith("__") or get_origin(hint) is ClassVar:
            continue
        markers = get_args(hint)[1:] if get_origin(hint) is Annotated else ()
        fields.append(_classify(name, markers))
    return fields


@cache
def describe(entity_class: type) -> ClassDescriptor:
    """Build (once per class) the descriptor of an entity class.

    Fields are scanned in declaration order, base classes first.

    Raises:
        MissingTableMetadata: if the class was not decorated with @table
    """
    binding = getattr(entity_class, "__table__", None)
    if not isinstance(binding, TableBinding):
        raise MissingTableMetadata(entity_class)

    return ClassDescriptor(
        entity_class=entity_class,
        table=binding,
        fields=tuple(_declared_fields(entity_class)),
    )
