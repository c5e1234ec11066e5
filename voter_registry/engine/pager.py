"""Pager - Offset / Keyset 페이지네이션

두 전략은 위치 추적 방식만 다릅니다. 필터 변환, 정렬, 오류 분류는
Pager 기반 클래스가 공유합니다.

- OffsetPager: 번호 페이지 + 전체 개수. 동시 쓰기에 대해 스냅샷 격리되지
  않으므로 페이지 사이에 삽입/삭제가 있으면 레코드가 누락되거나 중복될 수 있습니다.
- KeysetPager: (created_at, id) 커서 기준 다음 배치. 이미 반환된 범위 밖의
  쓰기는 누락/중복을 일으키지 않습니다.
"""

from __future__ import annotations

import math
from typing import Any, Optional

from voter_registry.core.exceptions import StoreError
from voter_registry.engine.cursor import Cursor
from voter_registry.engine.errors import ClassifiedError, invalid_argument
from voter_registry.engine.filters import FilterSpec
from voter_registry.engine.guard import run_guarded
from voter_registry.engine.result import KeysetResult, PageResult
from voter_registry.repositories.store import NEWEST_FIRST, StoreQuery, VoterStore
from voter_registry.schemas.voter_schema import VoterRecord


def total_pages(count: int, page_size: int) -> int:
    """ceil(count / page_size), 최소 1 ("1 / 0 페이지" 방지)"""
    if page_size <= 0:
        raise ValueError("page_size must be positive")
    return max(1, math.ceil(count / page_size))


def _is_positive_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


class Pager:
    """페이지네이션 공통 기반"""

    order = NEWEST_FIRST

    def __init__(self, store: VoterStore, timeout_s: float, max_page_size: int):
        self.store = store
        self.timeout_s = timeout_s
        self.max_page_size = max_page_size

    def _build_query(self, filters: Optional[FilterSpec], **options: Any) -> StoreQuery:
        spec = filters or FilterSpec()
        return StoreQuery(predicates=spec.predicates(), order=self.order, **options)

    def _check_size(self, name: str, value: Any) -> Optional[ClassifiedError]:
        if not _is_positive_int(value):
            return invalid_argument(f"{name} must be a positive integer, got {value!r}")
        if value > self.max_page_size:
            return invalid_argument(f"{name} must be <= {self.max_page_size}, got {value}")
        return None

    async def _select(self, operation: str, query: StoreQuery):
        async def call():
            response = await self.store.select(query)
            if query.count and response.count is None:
                raise StoreError("exact count missing from store response")
            return [VoterRecord.model_validate(row) for row in response.rows], response.count

        return await run_guarded(operation, call, self.timeout_s)


class OffsetPager(Pager):
    """번호 페이지 조회 (page ≥ 1)"""

    async def fetch(
        self, page: int, page_size: int, filters: Optional[FilterSpec] = None
    ) -> PageResult[VoterRecord]:
        """[(page-1)*page_size, page*page_size) 범위 + 전체 개수

        범위를 넘는 페이지는 오류가 아니라 빈 data 와 올바른 count 를 돌려줍니다.
        """
        if not _is_positive_int(page):
            return PageResult.fail(invalid_argument(f"page must be >= 1, got {page!r}"))
        error = self._check_size("page_size", page_size)
        if error:
            return PageResult.fail(error)

        query = self._build_query(
            filters,
            offset=(page - 1) * page_size,
            limit=page_size,
            count=True,
        )
        value, error = await self._select("fetch_page", query)
        if error:
            return PageResult.fail(error)

        records, count = value
        return PageResult.ok(records, count)


class KeysetPager(Pager):
    """커서 기반 배치 조회 (created_at DESC, id DESC)"""

    async def fetch(
        self,
        limit: int,
        cursor: Optional[Cursor] = None,
        filters: Optional[FilterSpec] = None,
    ) -> KeysetResult[VoterRecord]:
        """커서 이후 최대 limit 건

        next_cursor 는 마지막 레코드로 만들고, limit 보다 적게 오면 None (끝).
        """
        error = self._check_size("limit", limit)
        if error:
            return KeysetResult.fail(error)

        query = self._build_query(filters, limit=limit, after=cursor)
        value, error = await self._select("fetch_keyset", query)
        if error:
            return KeysetResult.fail(error)

        records, _ = value
        next_cursor = Cursor.from_record(records[-1]) if len(records) == limit else None
        return KeysetResult.ok(records, next_cursor)
