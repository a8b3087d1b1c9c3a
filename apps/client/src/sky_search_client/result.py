"""Tagged success / failure values returned by session operations."""

from __future__ import annotations

from dataclasses import dataclass

from .errors import ErrorKind, SkySearchError


@dataclass(frozen=True, slots=True)
class Ok[T]:
    value: T


@dataclass(frozen=True, slots=True)
class Err:
    kind: ErrorKind
    message: str

    @classmethod
    def from_exception(cls, exc: SkySearchError) -> Err:
        return cls(kind=exc.kind, message=exc.message)


type Result[T] = Ok[T] | Err
