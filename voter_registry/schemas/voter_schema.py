"""Pydantic 스키마 정의 (Validation Enhanced)"""
from datetime import date, datetime
from typing import Any, Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator


REQUIRED_FIELDS = ("nome", "regiao", "cidade", "genero")

T = TypeVar("T")


def _blank_to_none(v: Any) -> Any:
    """폼은 비어 있는 입력을 ''로 보냄 → None (unique 컬럼 cpf 충돌 방지)"""
    if isinstance(v, str):
        v = v.strip()
        return v or None
    return v


class VoterRecord(BaseModel):
    """저장소에서 읽은 유권자 레코드"""
    model_config = ConfigDict(extra="ignore", from_attributes=True)

    id: str = Field(..., min_length=1, description="저장소가 부여한 불변 ID")
    nome: str
    regiao: str
    cidade: str
    genero: str
    email: Optional[str] = None
    cpf: Optional[str] = None
    telefone: Optional[str] = None
    instagram: Optional[str] = None
    facebook: Optional[str] = None
    tiktok: Optional[str] = None
    bairro: Optional[str] = None
    cep: Optional[str] = None
    endereco: Optional[str] = None
    religiao: Optional[str] = None
    profissao: Optional[str] = None
    escola: Optional[str] = None
    observacoes: Optional[str] = None
    interacao: bool = False
    data_nascimento: Optional[date] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v: Any) -> Any:
        return str(v) if v is not None else v


class VoterFields(BaseModel):
    """입력 공통 필드 (id/created_at/updated_at 은 저장소가 부여하므로 무시)"""
    model_config = ConfigDict(extra="ignore")

    email: Optional[str] = Field(None, max_length=255)
    cpf: Optional[str] = Field(None, max_length=14, description="CPF (000.000.000-00)")
    telefone: Optional[str] = Field(None, max_length=30)
    instagram: Optional[str] = Field(None, max_length=120)
    facebook: Optional[str] = Field(None, max_length=120)
    tiktok: Optional[str] = Field(None, max_length=120)
    bairro: Optional[str] = Field(None, max_length=120)
    cep: Optional[str] = Field(None, max_length=10)
    endereco: Optional[str] = Field(None, max_length=255)
    religiao: Optional[str] = Field(None, max_length=50)
    profissao: Optional[str] = Field(None, max_length=120)
    escola: Optional[str] = Field(None, max_length=255)
    observacoes: Optional[str] = None
    data_nascimento: Optional[date] = None

    @field_validator(
        "email", "cpf", "telefone", "instagram", "facebook", "tiktok", "bairro",
        "cep", "endereco", "religiao", "profissao", "escola", "observacoes",
        "data_nascimento",
        mode="before",
    )
    @classmethod
    def blank_optional(cls, v: Any) -> Any:
        return _blank_to_none(v)


class VoterCreate(VoterFields):
    """유권자 등록 요청"""
    nome: str = Field(..., min_length=1, max_length=255, description="이름 (필수)")
    regiao: str = Field(..., min_length=1, max_length=50, description="지역 (필수)")
    cidade: str = Field(..., min_length=1, max_length=120, description="도시 (필수)")
    genero: str = Field(..., min_length=1, max_length=20, description="성별 (필수)")
    interacao: bool = False

    @field_validator(*REQUIRED_FIELDS, mode="before")
    @classmethod
    def strip_required(cls, v: Any) -> Any:
        return v.strip() if isinstance(v, str) else v


class VoterUpdate(VoterFields):
    """유권자 부분 수정 요청 (보낸 필드만 반영)"""
    nome: Optional[str] = Field(None, min_length=1, max_length=255)
    regiao: Optional[str] = Field(None, min_length=1, max_length=50)
    cidade: Optional[str] = Field(None, min_length=1, max_length=120)
    genero: Optional[str] = Field(None, min_length=1, max_length=20)
    interacao: Optional[bool] = None

    @field_validator(*REQUIRED_FIELDS, mode="before")
    @classmethod
    def strip_required(cls, v: Any) -> Any:
        if v is None:
            raise ValueError("required field cannot be cleared")
        return v.strip() if isinstance(v, str) else v

    @field_validator("interacao", mode="before")
    @classmethod
    def interacao_not_null(cls, v: Any) -> Any:
        if v is None:
            raise ValueError("interacao cannot be null")
        return v


class UIFilterState(BaseModel):
    """UI 필터 상태 (모든 값은 문자열, '' = 선택 안 함)"""
    regiao: str = ""
    cidade: str = ""
    genero: str = ""
    religiao: str = ""
    interacao: str = Field("", description="'' | 'true' | 'false'")
    search: str = Field("", max_length=200, description="이름, 이메일 또는 CPF")


class LoadedStats(BaseModel):
    """현재 로드된 페이지 통계 (대시보드 카드)"""
    total: int = Field(..., ge=0)
    with_interaction: int = Field(..., ge=0)
    without_interaction: int = Field(..., ge=0)
    last_created_at: Optional[datetime] = None


class ApiResponse(BaseModel, Generic[T]):
    """공통 응답 envelope"""
    status: str = Field(..., description="success or error")
    data: Optional[T] = None
    message: str = ""
    error_code: Optional[str] = Field(None, description="에러 코드 (error 시)")
    detail: Optional[str] = Field(None, description="저장소 원본 메시지 (error 시)")


class PageResponse(BaseModel):
    """Offset 페이지 응답"""
    status: str
    data: Optional[List[VoterRecord]] = None
    count: Optional[int] = Field(None, ge=0, description="필터 전체 개수")
    page: int = Field(..., ge=1)
    page_size: int = Field(..., ge=1)
    total_pages: Optional[int] = Field(None, ge=1)
    stats: Optional[LoadedStats] = None
    message: str = ""
    error_code: Optional[str] = None
    detail: Optional[str] = None


class KeysetResponse(BaseModel):
    """Keyset 배치 응답"""
    status: str
    data: Optional[List[VoterRecord]] = None
    next_cursor: Optional[str] = Field(None, description="다음 배치 토큰, 끝이면 null")
    message: str = ""
    error_code: Optional[str] = None
    detail: Optional[str] = None


class HealthResponse(BaseModel):
    status: str
    store_backend: str
    timestamp: datetime
    version: str
