from __future__ import annotations

import functools
from dataclasses import dataclass
from typing import Any, Callable, Generic, Optional, TypeVar

from .enums import ErrorKind
from .exceptions import DomainError

T = TypeVar("T")


@dataclass(frozen=True)
class ActionResult(Generic[T]):
    """Discriminated outcome of a core operation.

    Expected business failures come back as ``success=False`` with a kind;
    only unexpected store errors escape as exceptions.
    """

    success: bool
    data: Optional[T] = None
    kind: Optional[ErrorKind] = None
    message: Optional[str] = None

    @classmethod
    def ok(cls, data: T = None, message: Optional[str] = None) -> "ActionResult[T]":
        return cls(success=True, data=data, message=message)

    @classmethod
    def failure(cls, kind: ErrorKind, message: str) -> "ActionResult[T]":
        return cls(success=False, kind=kind, message=message)

    def to_dict(self) -> dict:
        if self.success:
            return {"success": True, "data": self.data, "message": self.message}
        return {"success": False, "error": self.message, "code": self.kind.value if self.kind else None}


def as_result(func: Callable[..., Any]) -> Callable[..., ActionResult]:
    """Run ``func`` and fold DomainError into a failed ActionResult."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs) -> ActionResult:
        try:
            return ActionResult.ok(func(*args, **kwargs))
        except DomainError as e:
            return ActionResult.failure(e.kind, str(e))

    return wrapper
