from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar, Union

T = TypeVar("T")


@dataclass(frozen=True)
class ApiSuccess(Generic[T]):
    data: T
    success: bool = True


@dataclass(frozen=True)
class ApiFailure:
    error: str
    status: int | None = None
    success: bool = False


ApiResult = Union[ApiSuccess[T], ApiFailure]
