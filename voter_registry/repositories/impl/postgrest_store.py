"""PostgREST(Supabase 호환) 유권자 저장소

HTTP 테이블 API 로 필터/정렬/페이지/카운트를 위임합니다.

인코딩 규칙:
    - 정확 일치:    regiao=eq.Sul
    - 부분 일치:    cidade=ilike.*reci*
    - OR 그룹:      or=(nome.ilike.*ana*,email.ilike.*ana*,cpf.eq.ana)
    - OR 그룹 여러 개: and=(or(...),or(...))
    - 정렬:         order=created_at.desc,id.desc
    - 카운트:       Prefer: count=exact → Content-Range: 0-49/1234
"""
import re
from datetime import datetime, timezone
from typing import Any, Optional

import httpx

from voter_registry.core.exceptions import (
    StoreConnectionException,
    StoreError,
    StoreNotFoundException,
    StoreTimeoutException,
)
from voter_registry.core.logging import logger
from voter_registry.engine.cursor import Cursor
from voter_registry.engine.filters import Predicate, PredicateKind
from voter_registry.repositories.store import (
    STORE_ASSIGNED_FIELDS,
    StoreQuery,
    StoreResponse,
)


# or=(...) 내부에서 값을 따옴표로 감싸야 하는 예약 문자
_RESERVED = re.compile(r'[,.:()"\\\s]')
_CONTENT_RANGE = re.compile(r"^(?:\d+-\d+|\*)/(\d+|\*)$")

SINGLE_OBJECT = "application/vnd.pgrst.object+json"


def quote_value(value: str) -> str:
    if _RESERVED.search(value):
        escaped = value.replace("\\", "\\\\").replace('"', '\\"')
        return f'"{escaped}"'
    return value


def _literal(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, datetime):
        # '+00:00' 의 '+' 는 쿼리스트링에서 공백으로 해석될 수 있어 'Z' 표기 사용
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.strftime("%Y-%m-%dT%H:%M:%S.%fZ")
    return str(value)


def _condition(predicate: Predicate) -> str:
    """OR 그룹 내부용 column.op.value 표기"""
    if predicate.kind is PredicateKind.ANY_OF:
        return f"or({','.join(_condition(p) for p in predicate.predicates)})"
    if predicate.kind is PredicateKind.SUBSTRING:
        return f"{predicate.column}.ilike.{quote_value(f'*{predicate.value}*')}"
    return f"{predicate.column}.eq.{quote_value(_literal(predicate.value))}"


def keyset_group(cursor: Cursor) -> str:
    ts = quote_value(_literal(cursor.created_at))
    record_id = quote_value(cursor.id)
    return f"or(created_at.lt.{ts},and(created_at.eq.{ts},id.lt.{record_id}))"


def encode_query(query: StoreQuery) -> list[tuple[str, str]]:
    """StoreQuery → PostgREST 쿼리 파라미터"""
    params: list[tuple[str, str]] = [("select", "*")]
    groups: list[str] = []

    for predicate in query.predicates:
        if predicate.kind is PredicateKind.ANY_OF:
            groups.append(_condition(predicate))
        elif predicate.kind is PredicateKind.SUBSTRING:
            params.append((predicate.column, f"ilike.*{predicate.value}*"))
        else:
            params.append((predicate.column, f"eq.{_literal(predicate.value)}"))

    if query.after is not None:
        groups.append(keyset_group(query.after))

    if len(groups) == 1:
        # "or(...)" → or=(...)
        params.append(("or", groups[0][2:]))
    elif groups:
        params.append(("and", f"({','.join(groups)})"))

    if query.order:
        params.append(("order", ",".join(
            f"{column}.{'desc' if descending else 'asc'}" for column, descending in query.order
        )))
    if query.limit is not None:
        params.append(("limit", str(query.limit)))
    if query.offset:
        params.append(("offset", str(query.offset)))
    return params


def parse_content_range(header: Optional[str]) -> Optional[int]:
    """'0-49/1234' 또는 '*/1234' → 1234"""
    if not header:
        return None
    match = _CONTENT_RANGE.match(header.strip())
    if not match or match.group(1) == "*":
        return None
    return int(match.group(1))


class PostgrestVoterStore:
    """httpx 기반 PostgREST 클라이언트"""

    def __init__(
        self,
        base_url: str,
        api_key: Optional[str] = None,
        table: str = "eleitores",
        timeout_s: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        headers = {"Accept": "application/json"}
        if api_key:
            headers["apikey"] = api_key
            headers["Authorization"] = f"Bearer {api_key}"
        self.table = table
        self.timeout_s = timeout_s
        self.client = client or httpx.AsyncClient(
            base_url=f"{base_url.rstrip('/')}/rest/v1",
            headers=headers,
            timeout=timeout_s,
        )

    async def aclose(self) -> None:
        await self.client.aclose()

    async def _request(
        self,
        operation: str,
        method: str,
        params: Optional[list[tuple[str, str]]] = None,
        headers: Optional[dict[str, str]] = None,
        json: Any = None,
    ) -> httpx.Response:
        try:
            response = await self.client.request(
                method, f"/{self.table}", params=params, headers=headers, json=json
            )
        except httpx.TimeoutException as e:
            logger.warning(f"[PostgREST] {operation} timeout: {type(e).__name__}")
            raise StoreTimeoutException(operation, self.timeout_s)
        except httpx.HTTPError as e:
            logger.warning(f"[PostgREST] {operation} transport error: {type(e).__name__}")
            raise StoreConnectionException(str(e) or type(e).__name__)
        return response

    @staticmethod
    def _error(response: httpx.Response) -> StoreError:
        try:
            body = response.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}
        message = body.get("message") or response.text or f"HTTP {response.status_code}"
        return StoreError(
            message,
            code=body.get("code"),
            details={
                "status": response.status_code,
                "details": body.get("details"),
                "hint": body.get("hint"),
            },
        )

    @staticmethod
    def _payload(values: dict[str, Any]) -> dict[str, Any]:
        return {k: v for k, v in values.items() if k not in STORE_ASSIGNED_FIELDS}

    async def select(self, query: StoreQuery) -> StoreResponse:
        headers = {"Prefer": "count=exact"} if query.count else None
        response = await self._request("select", "GET", params=encode_query(query), headers=headers)

        # 범위를 넘는 offset: 오류가 아니라 빈 페이지 + 전체 개수
        if response.status_code == 416:
            total = parse_content_range(response.headers.get("Content-Range"))
            if total is not None:
                return StoreResponse(rows=[], count=total)
        if response.is_error:
            raise self._error(response)

        total = parse_content_range(response.headers.get("Content-Range")) if query.count else None
        return StoreResponse(rows=response.json(), count=total)

    async def select_one(self, record_id: str) -> dict[str, Any]:
        response = await self._request(
            "select_one", "GET",
            params=[("select", "*"), ("id", f"eq.{record_id}")],
            headers={"Accept": SINGLE_OBJECT},
        )
        if response.is_error:
            raise self._error(response)
        return response.json()

    async def _write(self, operation: str, method: str, record_id: Optional[str], values: Any) -> dict[str, Any]:
        params = [("select", "*")]
        if record_id is not None:
            params.append(("id", f"eq.{record_id}"))
        response = await self._request(
            operation, method, params=params,
            headers={"Prefer": "return=representation"}, json=values,
        )
        if response.is_error:
            raise self._error(response)
        rows = response.json()
        if not rows:
            raise StoreNotFoundException(record_id or "")
        return rows[0]

    async def insert(self, values: dict[str, Any]) -> dict[str, Any]:
        return await self._write("insert", "POST", None, [self._payload(values)])

    async def update(self, record_id: str, values: dict[str, Any]) -> dict[str, Any]:
        return await self._write("update", "PATCH", record_id, self._payload(values))

    async def delete(self, record_id: str) -> dict[str, Any]:
        return await self._write("delete", "DELETE", record_id, None)

    async def ping(self) -> bool:
        response = await self._request("ping", "GET", params=[("select", "id"), ("limit", "1")])
        if response.is_error:
            raise self._error(response)
        return True
