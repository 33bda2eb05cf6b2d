"""Errors raised by the mapper"""

from collections.abc import Sequence
from typing import Any


class MapperError(Exception):
    """Base class for every error raised by pgmapper"""


class MissingTableMetadata(MapperError):
    """The class carries no @table binding"""

    def __init__(self, entity_class: type):
        self.entity_class = entity_class
        super().__init__(
            f"{entity_class.__qualname__} has no table binding; decorate it with @table"
        )


class InvalidAnnotatedFieldException(MapperError):
    """A required Id or Column field is missing from the class"""

    def __init__(self, entity_class: type, message: str):
        self.entity_class = entity_class
        super().__init__(f"{entity_class.__qualname__}: {message}")


class IdNotFound(MapperError):
    """Delete by id was requested on a class without an Id field"""

    def __init__(self, entity_class: type):
        self.entity_class = entity_class
        super().__init__(f"{entity_class.__qualname__} declares no Id field")


class ConstructorNotFound(MapperError):
    """No constructor takes as many positional arguments as the projection has columns"""

    def __init__(self, entity_class: type, arity: int):
        self.entity_class = entity_class
        self.arity = arity
        super().__init__(
            f"{entity_class.__qualname__} has no constructor accepting {arity} positional arguments"
        )


class ExecutionFailure(MapperError):
    """The database rejected or failed to run a statement.

    The driver exception is chained as ``__cause__``.
    """

    def __init__(self, query: str, params: Sequence[Any]):
        self.query = query
        self.params = list(params)
        # Parameters may hold secrets, they stay off the message
        super().__init__(f"Statement failed: {query!r} ({len(self.params)} params)")
