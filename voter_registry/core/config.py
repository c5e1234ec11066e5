"""설정 관리 - 환경 변수 로드 및 검증"""
from typing import Optional
from pydantic_settings import BaseSettings
from pydantic import field_validator


STORE_BACKENDS = ("memory", "sqlalchemy", "postgrest")


class Settings(BaseSettings):
    """애플리케이션 설정"""

    # 저장소 선택: memory | sqlalchemy | postgrest
    store_backend: str = "memory"

    # SQLAlchemy 저장소 (SQLite 로컬, Postgres 운영)
    database_url: str = "sqlite:///./data/eleitores.sqlite"

    # PostgREST(Supabase 호환) 저장소
    postgrest_url: str = ""
    postgrest_api_key: Optional[str] = None
    voter_table: str = "eleitores"

    # 저장소 단일 요청 하드 캡 (초). 초과 시 Timeout 으로 분류됩니다.
    store_timeout_s: float = 10.0

    # 페이지네이션
    default_page_size: int = 50
    max_page_size: int = 1000

    # API
    api_title: str = "Cadastro de Eleitores"
    api_version: str = "1.0.0"
    api_description: str = "Filtros, paginação por offset/keyset e CRUD de eleitores."

    # 로깅
    log_level: str = "INFO"

    @field_validator("store_backend")
    @classmethod
    def validate_store_backend(cls, v: str) -> str:
        v = (v or "").strip().lower()
        if v not in STORE_BACKENDS:
            raise ValueError(f"store_backend must be one of {STORE_BACKENDS}")
        return v

    @field_validator("store_timeout_s")
    @classmethod
    def validate_store_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("store_timeout_s must be positive")
        return v

    @field_validator("default_page_size", "max_page_size")
    @classmethod
    def validate_page_sizes(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("page sizes must be positive")
        return v

    @field_validator("postgrest_url")
    @classmethod
    def validate_postgrest_url(cls, v: str) -> str:
        v = (v or "").strip().rstrip("/")
        if v and not v.startswith(("http://", "https://")):
            raise ValueError("postgrest_url must start with http:// or https://")
        return v

    class Config:
        env_file = ".env"
        case_sensitive = False


settings = Settings()
