"""Tagged results for pipeline stages.

Each stage returns one of:

    Ok(value, notes)   the stage produced a value; ``notes`` carries
                       non-fatal observations (e.g. extra faces found)
    Warned(reason)     a business outcome with nothing to use
                       (no face, no match); the run continues
    Fatal(error)       an infrastructure or input failure; the run stops

The orchestrator logs ``notes`` and ``Warned`` reasons and raises the error
held by ``Fatal``.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, NoReturn, Tuple, TypeVar, Union

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    value: T
    notes: Tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class Warned:
    reason: str


@dataclass(frozen=True, slots=True)
class Fatal:
    error: Exception

    def raise_error(self) -> NoReturn:
        raise self.error


Outcome = Union[Ok[T], Warned, Fatal]


__all__ = ["Fatal", "Ok", "Outcome", "Warned"]
