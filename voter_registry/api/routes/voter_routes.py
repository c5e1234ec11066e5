"""Voter Routes - HTTP Layer

HTTP 요청을 VoterService 로 위임하는 단순한 Translator 역할만 수행합니다.
분류된 오류는 공통 envelope + HTTP 상태 코드로 변환합니다.
"""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, Query
from fastapi.responses import JSONResponse, Response

from voter_registry.core.config import settings
from voter_registry.core.exceptions import InvalidCursorException
from voter_registry.core.logging import logger
from voter_registry.engine.cursor import Cursor
from voter_registry.engine.errors import ClassifiedError, ErrorKind, invalid_argument
from voter_registry.engine.filters import FilterSpec, build_filter_spec
from voter_registry.engine.pager import total_pages
from voter_registry.repositories.impl import create_store
from voter_registry.schemas.voter_schema import (
    ApiResponse,
    KeysetResponse,
    PageResponse,
    UIFilterState,
    VoterRecord,
)
from voter_registry.services.voter_service import VoterService, summarize_loaded

router = APIRouter(prefix="/api/v1", tags=["voters"])

HTTP_STATUS: dict[ErrorKind, int] = {
    ErrorKind.INVALID_ARGUMENT: 400,
    ErrorKind.PERMISSION_DENIED: 403,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.DUPLICATE_ENTRY: 409,
    ErrorKind.REFERENTIAL_ERROR: 409,
    ErrorKind.TIMEOUT: 504,
    ErrorKind.SCHEMA_ERROR: 500,
    ErrorKind.UNKNOWN: 500,
}

EXPORT_MEDIA_TYPES = {"csv": "text/csv; charset=utf-8", "json": "application/json"}

# 싱글톤 서비스
_voter_service: Optional[VoterService] = None


def get_voter_service() -> VoterService:
    """VoterService 싱글톤"""
    global _voter_service
    if _voter_service is None:
        _voter_service = VoterService(create_store())
    return _voter_service


def get_filter_spec(
    regiao: str = "",
    cidade: str = "",
    genero: str = "",
    religiao: str = "",
    interacao: str = Query("", description="'' | 'true' | 'false'"),
    search: str = Query("", max_length=200, description="이름, 이메일 또는 CPF"),
) -> FilterSpec:
    """쿼리스트링 필터 → FilterSpec"""
    return build_filter_spec(UIFilterState(
        regiao=regiao,
        cidade=cidade,
        genero=genero,
        religiao=religiao,
        interacao=interacao,
        search=search,
    ))


def _error_fields(error: ClassifiedError) -> Dict[str, Any]:
    return {
        "status": "error",
        "message": error.message,
        "error_code": error.code,
        "detail": error.detail,
    }


def _error_response(error: ClassifiedError, model: Any = ApiResponse, **extra: Any) -> JSONResponse:
    body = model(**_error_fields(error), **extra)
    return JSONResponse(status_code=HTTP_STATUS[error.kind], content=body.model_dump(mode="json"))


def _record_response(result, message: str, status_code: int = 200):
    if result.error:
        return _error_response(result.error)
    body = ApiResponse[VoterRecord](status="success", data=result.data, message=message)
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"))


@router.get("/voters", response_model=PageResponse)
async def list_voters(
    page: int = 1,
    page_size: Optional[int] = None,
    filters: FilterSpec = Depends(get_filter_spec),
    service: VoterService = Depends(get_voter_service),
):
    """번호 페이지 조회 (offset)"""
    result = await service.fetch_page(page=page, page_size=page_size, filters=filters)
    size = settings.default_page_size if page_size is None else page_size

    if result.error:
        return _error_response(
            result.error, PageResponse,
            page=max(page, 1), page_size=max(size, 1),
        )

    return PageResponse(
        status="success",
        data=result.data,
        count=result.count,
        page=page,
        page_size=size,
        total_pages=total_pages(result.count, size),
        stats=summarize_loaded(result.data),
        message="ok",
    )


@router.get("/voters/keyset", response_model=KeysetResponse)
async def list_voters_keyset(
    limit: Optional[int] = None,
    cursor: Optional[str] = None,
    filters: FilterSpec = Depends(get_filter_spec),
    service: VoterService = Depends(get_voter_service),
):
    """커서 기반 다음 배치 조회 (keyset)"""
    position: Optional[Cursor] = None
    if cursor:
        try:
            position = Cursor.decode(cursor)
        except InvalidCursorException as e:
            logger.warning(f"[API] Invalid cursor: {e.error_code}")
            return _error_response(invalid_argument(e.message), KeysetResponse)

    result = await service.fetch_keyset(limit=limit, cursor=position, filters=filters)
    if result.error:
        return _error_response(result.error, KeysetResponse)

    return KeysetResponse(
        status="success",
        data=result.data,
        next_cursor=result.next_cursor.encode() if result.next_cursor else None,
        message="ok",
    )


@router.get("/voters/export")
async def export_voters(
    format: str = "csv",
    filters: FilterSpec = Depends(get_filter_spec),
    service: VoterService = Depends(get_voter_service),
):
    """필터에 맞는 유권자 내보내기 (csv | json)"""
    result = await service.export(filters=filters, format=format)
    if result.error:
        return _error_response(result.error)
    return Response(
        content=result.data,
        media_type=EXPORT_MEDIA_TYPES[format],
        headers={"Content-Disposition": f'attachment; filename="eleitores.{format}"'},
    )


@router.get("/voters/{voter_id}", response_model=ApiResponse[VoterRecord])
async def get_voter(voter_id: str, service: VoterService = Depends(get_voter_service)):
    return _record_response(await service.fetch_by_id(voter_id), "ok")


@router.post("/voters", response_model=ApiResponse[VoterRecord], status_code=201)
async def create_voter(
    payload: Dict[str, Any] = Body(...),
    service: VoterService = Depends(get_voter_service),
):
    return _record_response(await service.insert(payload), "Eleitor cadastrado com sucesso", status_code=201)


@router.patch("/voters/{voter_id}", response_model=ApiResponse[VoterRecord])
async def update_voter(
    voter_id: str,
    payload: Dict[str, Any] = Body(...),
    service: VoterService = Depends(get_voter_service),
):
    return _record_response(await service.update(voter_id, payload), "Eleitor atualizado")


@router.delete("/voters/{voter_id}", response_model=ApiResponse[VoterRecord])
async def delete_voter(voter_id: str, service: VoterService = Depends(get_voter_service)):
    return _record_response(await service.remove(voter_id), "Eleitor removido")
