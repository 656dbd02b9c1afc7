from dataclasses import dataclass
from typing import Generic, TypeVar, Union

from .errors import NewsClientError


T = TypeVar("T")

_DEFAULT_FAILURE_MESSAGE = "An unexpected error occurred"


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T


@dataclass(frozen=True)
class Failure:
    error: NewsClientError

    @property
    def message(self) -> str:
        """Human readable description suitable for display."""
        return str(self.error) or _DEFAULT_FAILURE_MESSAGE


Result = Union[Ok[T], Failure]
