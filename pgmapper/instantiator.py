import inspect
from collections.abc import Callable, Iterable, Mapping
from typing import Any, Generic, TypeVar

from pydantic import BaseModel

from pgmapper.exceptions import ConstructorNotFound
from pgmapper.metadata import ClassDescriptor

_POSITIONAL = (
    inspect.Parameter.POSITIONAL_ONLY,
    inspect.Parameter.POSITIONAL_OR_KEYWORD,
)


def _accepts_positional(signature: inspect.Signature, arity: int) -> bool:
    params = list(signature.parameters.values())
    positional = [p for p in params if p.kind in _POSITIONAL]
    if any(p.kind is inspect.Parameter.VAR_POSITIONAL for p in params):
        required = [p for p in positional if p.default is inspect.Parameter.empty]
        return len(required) <= arity
    return len(positional) == arity


def resolve_constructor(entity_class: type, arity: int) -> Callable[..., Any]:
    """Return a callable building ``entity_class`` from ``arity`` positional arguments.

    Raises:
        ConstructorNotFound: if the class constructor takes another number of arguments
    """
    try:
        signature = inspect.signature(entity_class)
    except (TypeError, ValueError) as exc:
        raise ConstructorNotFound(entity_class, arity) from exc

    if not _accepts_positional(signature, arity):
        raise ConstructorNotFound(entity_class, arity)
    return entity_class


T = TypeVar("T")


class Instantiator(Generic[T]):
    """Rebuilds entities from rows, reading columns in projection order.

    The build strategy is resolved once:
    - the table binding's factory, given ``{field_name: value}``
    - ``model_validate`` for pydantic models, given ``{field_name: value}``
    - the class constructor, given the values positionally
    """

    def __init__(self, descriptor: ClassDescriptor):
        self.descriptor = descriptor
        self.entity_class: type[T] = descriptor.entity_class
        self._fields = descriptor.mapped_fields
        self._build = self._resolve()

    def _resolve(self) -> Callable[[list[Any]], T]:
        factory = self.descriptor.table.factory
        if factory is not None:
            return lambda values: factory(self._by_name(values))

        if issubclass(self.entity_class, BaseModel):
            model = self.entity_class
            return lambda values: model.model_validate(self._by_name(values))

        constructor = resolve_constructor(self.entity_class, len(self._fields))
        return lambda values: constructor(*values)

    def _by_name(self, values: list[Any]) -> dict[str, Any]:
        return {f.name: value for f, value in zip(self._fields, values)}

    def map_row_to_entity(self, row: Mapping[str, Any]) -> T:
        """Map database row to entity"""
        return self._build([row[f.column] for f in self._fields])  # type: ignore[index]

    def map_rows_to_entities(self, rows: Iterable[Mapping[str, Any]]) -> list[T]:
        """Map database rows to entities"""
        return [self.map_row_to_entity(row) for row in rows]
