"""유권자 서비스 - UI 레이어에 노출되는 조회/CRUD 진입점

모든 메서드는 예외를 던지지 않고 결과 객체(data 또는 error)를 반환합니다.
필터/페이지 변경마다 새 조회를 발행하는 pull 모델이며 구독/백그라운드
갱신은 없습니다. 요청 중복 제거나 취소도 하지 않으므로, 응답 순서가
뒤바뀔 수 있는 호출자는 오래된 응답을 스스로 버려야 합니다.
"""
import csv
import io
import json
from typing import Any, AsyncIterator, Iterable, Mapping, Optional, Union

from pydantic import BaseModel, ValidationError

from voter_registry.core.config import settings
from voter_registry.core.logging import logger
from voter_registry.engine.cursor import Cursor
from voter_registry.engine.errors import invalid_argument
from voter_registry.engine.filters import FilterSpec, build_filter_spec
from voter_registry.engine.guard import run_guarded
from voter_registry.engine.pager import KeysetPager, OffsetPager
from voter_registry.engine.result import KeysetResult, OperationResult, PageResult
from voter_registry.repositories.store import VoterStore
from voter_registry.schemas.voter_schema import (
    LoadedStats,
    VoterCreate,
    VoterRecord,
    VoterUpdate,
)


EXPORT_FIELDS = list(VoterRecord.model_fields.keys())
EXPORT_FORMATS = ("csv", "json")


def _validation_detail(e: ValidationError) -> str:
    return "; ".join(
        f"{'.'.join(str(p) for p in err['loc']) or 'payload'}: {err['msg']}"
        for err in e.errors()
    )


def _as_payload(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(exclude_unset=True)
    if isinstance(value, Mapping):
        return dict(value)
    return value


def summarize_loaded(records: Iterable[VoterRecord]) -> LoadedStats:
    """로드된 레코드 통계 (전체 개수가 아니라 현재 페이지 기준)"""
    records = list(records)
    with_interaction = sum(1 for r in records if r.interacao)
    return LoadedStats(
        total=len(records),
        with_interaction=with_interaction,
        without_interaction=len(records) - with_interaction,
        last_created_at=max((r.created_at for r in records), default=None),
    )


class VoterService:
    """유권자 조회/CRUD 서비스"""

    def __init__(
        self,
        store: VoterStore,
        timeout_s: Optional[float] = None,
        max_page_size: Optional[int] = None,
    ):
        self.store = store
        self.timeout_s = timeout_s or settings.store_timeout_s
        self.max_page_size = max_page_size or settings.max_page_size
        self.offset_pager = OffsetPager(store, self.timeout_s, self.max_page_size)
        self.keyset_pager = KeysetPager(store, self.timeout_s, self.max_page_size)

    # ------------------------------------------------------------------
    # 조회
    # ------------------------------------------------------------------

    @staticmethod
    def build_filter_spec(ui_state: Any = None) -> FilterSpec:
        return build_filter_spec(ui_state)

    async def fetch_page(
        self,
        page: int = 1,
        page_size: Optional[int] = None,
        filters: Optional[FilterSpec] = None,
    ) -> PageResult[VoterRecord]:
        size = settings.default_page_size if page_size is None else page_size
        return await self.offset_pager.fetch(page, size, filters)

    async def fetch_keyset(
        self,
        limit: Optional[int] = None,
        cursor: Optional[Cursor] = None,
        filters: Optional[FilterSpec] = None,
    ) -> KeysetResult[VoterRecord]:
        size = settings.default_page_size if limit is None else limit
        return await self.keyset_pager.fetch(size, cursor, filters)

    async def iter_voters(
        self, filters: Optional[FilterSpec] = None, batch_size: Optional[int] = None
    ) -> AsyncIterator[VoterRecord]:
        """필터에 맞는 전체 레코드를 keyset 배치로 순회

        오류가 나면 로그를 남기고 순회를 멈춥니다 (예외 없음).
        """
        cursor: Optional[Cursor] = None
        while True:
            result = await self.fetch_keyset(batch_size, cursor, filters)
            if result.error:
                logger.warning(f"[VoterService] Iteration stopped: {result.error.code}")
                return
            for record in result.data:
                yield record
            if result.next_cursor is None:
                return
            cursor = result.next_cursor

    async def export(
        self, filters: Optional[FilterSpec] = None, format: str = "csv"
    ) -> OperationResult[str]:
        """필터에 맞는 레코드 내보내기

        Format options:
        - csv: CSV 형식 (헤더 포함)
        - json: JSON 배열
        """
        if format not in EXPORT_FORMATS:
            return OperationResult.fail(invalid_argument(f"format must be one of {EXPORT_FORMATS}"))

        # 순회 중 오류를 결과로 돌려주기 위해 배치를 직접 돈다
        records: list[VoterRecord] = []
        cursor: Optional[Cursor] = None
        while True:
            result = await self.fetch_keyset(None, cursor, filters)
            if result.error:
                return OperationResult.fail(result.error)
            records.extend(result.data)
            if result.next_cursor is None:
                break
            cursor = result.next_cursor

        rows = [r.model_dump(mode="json") for r in records]
        logger.info(f"[VoterService] Exporting {len(rows)} voters as {format}")

        if format == "json":
            return OperationResult.ok(json.dumps(rows, ensure_ascii=False, indent=2))

        output = io.StringIO()
        writer = csv.DictWriter(output, fieldnames=EXPORT_FIELDS)
        writer.writeheader()
        writer.writerows(rows)
        return OperationResult.ok(output.getvalue())

    @staticmethod
    def summarize_loaded(records: Iterable[VoterRecord]) -> LoadedStats:
        return summarize_loaded(records)

    # ------------------------------------------------------------------
    # CRUD
    # ------------------------------------------------------------------

    @staticmethod
    def _check_id(record_id: Any) -> Optional[str]:
        if record_id is None:
            return None
        record_id = str(record_id).strip()
        return record_id or None

    async def fetch_by_id(self, record_id: str) -> OperationResult[VoterRecord]:
        """ID로 유권자 조회"""
        record_id = self._check_id(record_id)
        if record_id is None:
            return OperationResult.fail(invalid_argument("id must not be empty"))

        async def call() -> VoterRecord:
            return VoterRecord.model_validate(await self.store.select_one(record_id))

        value, error = await run_guarded("fetch_by_id", call, self.timeout_s, single_record=True)
        return OperationResult.fail(error) if error else OperationResult.ok(value)

    async def insert(self, record: Union[Mapping[str, Any], BaseModel]) -> OperationResult[VoterRecord]:
        """유권자 등록 (id/created_at 은 저장소가 부여)"""
        try:
            payload = VoterCreate.model_validate(_as_payload(record))
        except ValidationError as e:
            return OperationResult.fail(invalid_argument(_validation_detail(e)))

        values = payload.model_dump(mode="json")

        async def call() -> VoterRecord:
            return VoterRecord.model_validate(await self.store.insert(values))

        value, error = await run_guarded("insert", call, self.timeout_s)
        if error:
            return OperationResult.fail(error)
        logger.info(f"[VoterService] Voter created: {value.id}")
        return OperationResult.ok(value)

    async def update(
        self, record_id: str, partial: Union[Mapping[str, Any], BaseModel]
    ) -> OperationResult[VoterRecord]:
        """보낸 필드만 수정 (updated_at 은 저장소가 갱신)"""
        record_id = self._check_id(record_id)
        if record_id is None:
            return OperationResult.fail(invalid_argument("id must not be empty"))

        try:
            payload = VoterUpdate.model_validate(_as_payload(partial))
        except ValidationError as e:
            return OperationResult.fail(invalid_argument(_validation_detail(e)))

        values = payload.model_dump(mode="json", exclude_unset=True)
        if not values:
            return OperationResult.fail(invalid_argument("nothing to update"))

        async def call() -> VoterRecord:
            return VoterRecord.model_validate(await self.store.update(record_id, values))

        value, error = await run_guarded("update", call, self.timeout_s, single_record=True)
        return OperationResult.fail(error) if error else OperationResult.ok(value)

    async def remove(self, record_id: str) -> OperationResult[VoterRecord]:
        """유권자 삭제, 삭제된 레코드 반환"""
        record_id = self._check_id(record_id)
        if record_id is None:
            return OperationResult.fail(invalid_argument("id must not be empty"))

        async def call() -> VoterRecord:
            return VoterRecord.model_validate(await self.store.delete(record_id))

        value, error = await run_guarded("remove", call, self.timeout_s, single_record=True)
        if error:
            return OperationResult.fail(error)
        logger.info(f"[VoterService] Voter removed: {record_id}")
        return OperationResult.ok(value)
