"""Success-or-failure values returned by the aggregation engine."""

from dataclasses import dataclass
from typing import Generic, TypeVar, Union

from pennywise.domain.errors import DomainError

T = TypeVar("T")


@dataclass(frozen=True)
class Ok(Generic[T]):
    """Successful computation carrying its value."""

    value: T

    def unwrap(self) -> T:
        return self.value


@dataclass(frozen=True)
class Err:
    """Failed computation carrying the domain error that describes it."""

    error: DomainError

    def unwrap(self):
        raise self.error


Result = Union[Ok[T], Err]
