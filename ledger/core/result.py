"""
Tagged results for ledger operations.

Every mutating service call returns exactly one of:

- ``Ok(value)``                          the operation succeeded
- ``ValidationError(field, message, code)``  bad input, shown next to a field
- ``StorageError(cause)``                the store failed, nothing was committed

Validation failures are returned, never raised, so callers can render them
inline. ``NotFound`` covers lookups of ids that do not exist for the caller.
"""

from dataclasses import dataclass
from typing import Any, Generic, TypeVar, Union

T = TypeVar("T")


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T


@dataclass(frozen=True)
class ValidationError:
    field: str
    message: str
    code: str = "invalid"

    def to_dict(self) -> dict:
        return {"field": self.field, "message": self.message, "code": self.code}


@dataclass(frozen=True)
class StorageError:
    cause: Exception

    @property
    def message(self) -> str:
        return str(self.cause) or self.cause.__class__.__name__


@dataclass(frozen=True)
class NotFound:
    kind: str
    id: str

    @property
    def message(self) -> str:
        return f"{self.kind.capitalize()} not found"


Result = Union[Ok[Any], ValidationError, StorageError, NotFound]


def is_ok(result: Result) -> bool:
    return isinstance(result, Ok)
