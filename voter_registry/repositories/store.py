"""VoterStore - 원격 테이블 저장소 계약

조회 레이어는 저장소를 이 Protocol 로만 다룹니다.
구현체는 실패 시 StoreError(code, message) 를 raise 합니다.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional, Protocol

from voter_registry.engine.cursor import Cursor
from voter_registry.engine.filters import Predicate


# (컬럼, 내림차순 여부)
OrderBy = tuple[tuple[str, bool], ...]

NEWEST_FIRST: OrderBy = (("created_at", True), ("id", True))

# 저장소가 부여하는 필드 (insert/update 페이로드에서 제외)
STORE_ASSIGNED_FIELDS = frozenset({"id", "created_at", "updated_at"})


@dataclass(frozen=True)
class StoreQuery:
    """저장소 독립적인 조회 요청

    Attributes:
        predicates: AND 로 결합되는 필터 술어
        order: 정렬 컬럼
        limit: 최대 행 수
        offset: 건너뛸 행 수 (offset 페이지네이션)
        after: 이 커서 이후 행만 (keyset 페이지네이션)
        count: 필터 전체 개수(exact count) 동반 요청 여부
    """

    predicates: tuple[Predicate, ...] = ()
    order: OrderBy = NEWEST_FIRST
    limit: Optional[int] = None
    offset: int = 0
    after: Optional[Cursor] = None
    count: bool = False


@dataclass
class StoreResponse:
    rows: list[dict[str, Any]] = field(default_factory=list)
    count: Optional[int] = None


class VoterStore(Protocol):
    async def select(self, query: StoreQuery) -> StoreResponse:
        ...

    async def select_one(self, record_id: str) -> dict[str, Any]:
        ...

    async def insert(self, values: dict[str, Any]) -> dict[str, Any]:
        ...

    async def update(self, record_id: str, values: dict[str, Any]) -> dict[str, Any]:
        ...

    async def delete(self, record_id: str) -> dict[str, Any]:
        ...

    async def ping(self) -> bool:
        ...
