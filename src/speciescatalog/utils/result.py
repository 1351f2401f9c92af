"""Tagged result types for operations that can fail without raising.

Repository and search calls return ``Ok(value)`` or ``Err(message)`` so call
sites branch on an explicit tag instead of probing response shapes.
"""

from dataclasses import dataclass
from typing import Generic, TypeVar, Union

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """Successful outcome carrying a payload."""

    value: T

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True, slots=True)
class Err:
    """Failed outcome carrying a human-readable message."""

    message: str

    @property
    def ok(self) -> bool:
        return False


Result = Union[Ok[T], Err]
