"""인메모리 유권자 저장소 (로컬 개발/테스트용)"""
import copy
import uuid
from datetime import datetime, timezone
from typing import Any, Iterable, Optional

from voter_registry.core.exceptions import StoreError, StoreNotFoundException
from voter_registry.core.logging import logger
from voter_registry.repositories.store import (
    STORE_ASSIGNED_FIELDS,
    StoreQuery,
    StoreResponse,
)


class InMemoryVoterStore:
    """리스트 기반 저장소

    - id: uuid4 문자열, 재사용되지 않음
    - created_at: 삽입 순서대로 단조 비감소
    - cpf: unique (위반 시 SQLSTATE 23505)
    """

    def __init__(self, rows: Optional[Iterable[dict[str, Any]]] = None):
        self._rows: list[dict[str, Any]] = []
        self._issued_ids: set[str] = set()
        self._last_created_at: Optional[datetime] = None
        for row in rows or ():
            self._load(row)

    def _load(self, row: dict[str, Any]) -> None:
        """created_at/id 가 주어진 초기 행 적재"""
        row = dict(row)
        row.setdefault("id", self._new_id())
        row.setdefault("created_at", self._next_timestamp())
        row.setdefault("updated_at", row["created_at"])
        row.setdefault("interacao", False)
        self._issued_ids.add(row["id"])
        if self._last_created_at is None or row["created_at"] > self._last_created_at:
            self._last_created_at = row["created_at"]
        self._rows.append(row)

    def _new_id(self) -> str:
        while True:
            candidate = str(uuid.uuid4())
            if candidate not in self._issued_ids:
                return candidate

    def _next_timestamp(self) -> datetime:
        now = datetime.now(timezone.utc)
        if self._last_created_at is not None and now < self._last_created_at:
            now = self._last_created_at
        self._last_created_at = now
        return now

    def _find(self, record_id: str) -> dict[str, Any]:
        for row in self._rows:
            if row["id"] == record_id:
                return row
        raise StoreNotFoundException(record_id)

    def _check_unique(self, values: dict[str, Any], exclude_id: Optional[str] = None) -> None:
        cpf = values.get("cpf")
        if not cpf:
            return
        for row in self._rows:
            if row["id"] != exclude_id and row.get("cpf") == cpf:
                raise StoreError(
                    'duplicate key value violates unique constraint "eleitores_cpf_key"',
                    code="23505",
                )

    async def select(self, query: StoreQuery) -> StoreResponse:
        matching = [
            row for row in self._rows
            if all(p.matches(row) for p in query.predicates)
        ]
        total = len(matching) if query.count else None

        if query.after is not None:
            matching = [
                row for row in matching
                if query.after.is_before(row["created_at"], row["id"])
            ]

        # 다중 컬럼 정렬: 뒤 컬럼부터 안정 정렬
        for column, descending in reversed(query.order):
            matching.sort(key=lambda row: row.get(column), reverse=descending)

        start = query.offset
        end = None if query.limit is None else start + query.limit
        rows = [copy.deepcopy(row) for row in matching[start:end]]
        return StoreResponse(rows=rows, count=total)

    async def select_one(self, record_id: str) -> dict[str, Any]:
        return copy.deepcopy(self._find(record_id))

    async def insert(self, values: dict[str, Any]) -> dict[str, Any]:
        payload = {k: v for k, v in values.items() if k not in STORE_ASSIGNED_FIELDS}
        self._check_unique(payload)
        row = {"interacao": False, **payload}
        row["id"] = self._new_id()
        row["created_at"] = self._next_timestamp()
        row["updated_at"] = row["created_at"]
        self._issued_ids.add(row["id"])
        self._rows.append(row)
        logger.debug(f"[MemoryStore] Inserted voter {row['id']}")
        return copy.deepcopy(row)

    async def update(self, record_id: str, values: dict[str, Any]) -> dict[str, Any]:
        row = self._find(record_id)
        payload = {k: v for k, v in values.items() if k not in STORE_ASSIGNED_FIELDS}
        self._check_unique(payload, exclude_id=record_id)
        row.update(payload)
        row["updated_at"] = datetime.now(timezone.utc)
        return copy.deepcopy(row)

    async def delete(self, record_id: str) -> dict[str, Any]:
        row = self._find(record_id)
        self._rows.remove(row)
        return copy.deepcopy(row)

    async def ping(self) -> bool:
        return True
