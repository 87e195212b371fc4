from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar

T = TypeVar("T")


class ErrorKind(str, Enum):
    VALIDATION = "validation"
    AUTHORIZATION = "authorization"
    CONFLICT = "conflict"
    NOT_FOUND = "not_found"
    BACKEND = "backend"


@dataclass(slots=True)
class Outcome(Generic[T]):
    """Discriminated result of a core operation.

    ``error`` is the human-readable reason shown to a user, ``code`` is a stable
    machine-readable reason for callers that branch on it.
    """

    ok: bool
    value: T | None = None
    error: str | None = None
    kind: ErrorKind | None = None
    code: str | None = None

    @classmethod
    def success(cls, value: T) -> Outcome[T]:
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, kind: ErrorKind, error: str, code: str | None = None) -> Outcome[T]:
        return cls(ok=False, error=error, kind=kind, code=code)
