"""Query Result - Standardized Result Format

Every query/CRUD operation returns one of these instead of raising.
Exactly one of ``data`` / ``error`` is non-null.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

from voter_registry.engine.cursor import Cursor
from voter_registry.engine.errors import ClassifiedError


T = TypeVar("T")


@dataclass(frozen=True)
class OperationResult(Generic[T]):
    """단건 작업 결과 (fetch_by_id / insert / update / remove / export)"""

    data: Optional[T] = None
    error: Optional[ClassifiedError] = None

    def __post_init__(self) -> None:
        if (self.data is None) == (self.error is None):
            raise ValueError("exactly one of data/error must be set")

    @property
    def is_success(self) -> bool:
        return self.error is None

    @classmethod
    def ok(cls, data: T) -> "OperationResult[T]":
        return cls(data=data)

    @classmethod
    def fail(cls, error: ClassifiedError) -> "OperationResult[T]":
        return cls(error=error)


@dataclass(frozen=True)
class PageResult(Generic[T]):
    """Offset 페이지 결과

    Attributes:
        data: 페이지 레코드 (범위를 넘으면 빈 리스트)
        count: 필터에 맞는 전체 레코드 수 (슬라이스와 무관)
        error: 분류된 오류
    """

    data: Optional[list[T]] = None
    count: Optional[int] = None
    error: Optional[ClassifiedError] = None

    def __post_init__(self) -> None:
        if (self.data is None) == (self.error is None):
            raise ValueError("exactly one of data/error must be set")

    @property
    def is_success(self) -> bool:
        return self.error is None

    @classmethod
    def ok(cls, data: list[T], count: int) -> "PageResult[T]":
        return cls(data=data, count=count)

    @classmethod
    def fail(cls, error: ClassifiedError) -> "PageResult[T]":
        return cls(error=error)


@dataclass(frozen=True)
class KeysetResult(Generic[T]):
    """Keyset 배치 결과

    Attributes:
        data: 배치 레코드
        next_cursor: 다음 배치 커서, 끝이면 None (더 요청하지 말 것)
        error: 분류된 오류
    """

    data: Optional[list[T]] = None
    next_cursor: Optional[Cursor] = None
    error: Optional[ClassifiedError] = None

    def __post_init__(self) -> None:
        if (self.data is None) == (self.error is None):
            raise ValueError("exactly one of data/error must be set")

    @property
    def is_success(self) -> bool:
        return self.error is None

    @property
    def is_last(self) -> bool:
        return self.next_cursor is None

    @classmethod
    def ok(cls, data: list[T], next_cursor: Optional[Cursor]) -> "KeysetResult[T]":
        return cls(data=data, next_cursor=next_cursor)

    @classmethod
    def fail(cls, error: ClassifiedError) -> "KeysetResult[T]":
        return cls(error=error)
