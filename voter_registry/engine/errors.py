"""Error Classifier - 저장소 원본 오류를 고정된 도메인 오류 분류로 변환

저장소 메시지 문자열 매칭은 본질적으로 불안정하므로 이 모듈 밖에서는
하지 않습니다. 구조화된 오류 코드가 생기면 이 파일만 바꾸면 됩니다.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Optional


class ErrorKind(str, Enum):
    """도메인 오류 분류"""

    INVALID_ARGUMENT = "InvalidArgument"
    NOT_FOUND = "NotFound"
    DUPLICATE_ENTRY = "DuplicateEntry"
    SCHEMA_ERROR = "SchemaError"
    REFERENTIAL_ERROR = "ReferentialError"
    TIMEOUT = "Timeout"
    PERMISSION_DENIED = "PermissionDenied"
    UNKNOWN = "Unknown"


# Postgres SQLSTATE / PostgREST 코드
UNIQUE_VIOLATION_CODES = frozenset({"23505"})
SCHEMA_ERROR_CODES = frozenset({"42P01", "3F000", "PGRST205", "PGRST106"})
FOREIGN_KEY_CODES = frozenset({"23503"})
NOT_FOUND_CODES = frozenset({"PGRST116"})

NOT_FOUND_MARKERS = ("not found", "0 rows", "no rows")

# UI 에 그대로 보여줄 메시지 (pt-BR)
USER_MESSAGES: dict[ErrorKind, str] = {
    ErrorKind.INVALID_ARGUMENT: "Parâmetros inválidos.",
    ErrorKind.NOT_FOUND: "Eleitor não encontrado.",
    ErrorKind.DUPLICATE_ENTRY: "Já existe um eleitor cadastrado com estes dados.",
    ErrorKind.SCHEMA_ERROR: "Erro de configuração do banco de dados.",
    ErrorKind.REFERENTIAL_ERROR: "O registro está vinculado a outros dados.",
    ErrorKind.TIMEOUT: "O servidor demorou para responder. Tente novamente.",
    ErrorKind.PERMISSION_DENIED: "Você não tem permissão para esta operação.",
    ErrorKind.UNKNOWN: "Erro inesperado ao acessar os eleitores.",
}


@dataclass(frozen=True)
class ClassifiedError:
    """분류된 오류 값

    Attributes:
        kind: 오류 분류
        code: 기계가 읽는 코드 (ErrorKind 값)
        message: 사람이 읽는 메시지
        detail: 저장소 원본 메시지 (기술 상세, 선택)
    """

    kind: ErrorKind
    message: str
    detail: Optional[str] = None

    @property
    def code(self) -> str:
        return self.kind.value

    def to_dict(self) -> dict[str, Optional[str]]:
        return {"code": self.code, "message": self.message, "detail": self.detail}


def make_error(kind: ErrorKind, detail: Optional[str] = None, message: Optional[str] = None) -> ClassifiedError:
    return ClassifiedError(kind=kind, message=message or USER_MESSAGES[kind], detail=detail)


def invalid_argument(detail: str) -> ClassifiedError:
    return make_error(ErrorKind.INVALID_ARGUMENT, detail=detail)


def _raw_parts(error: Any) -> tuple[Optional[str], str]:
    """다양한 형태의 원본 오류에서 (code, message) 추출"""
    if error is None:
        return None, ""
    if isinstance(error, Mapping):
        code, message = error.get("code"), error.get("message")
    else:
        code = getattr(error, "code", None)
        message = getattr(error, "message", None)
        if message is None:
            message = str(error)
    code = str(code).strip() if code not in (None, "") else None
    return code, "" if message is None else str(message)


def classify_store_error(error: Any, single_record: bool = False) -> ClassifiedError:
    """원본 저장소 오류 → ClassifiedError

    우선순위:
        1. unique 위반 코드 → DuplicateEntry
        2. 테이블/스키마 없음 코드 → SchemaError
        3. FK 위반 코드 → ReferentialError
        4. (단건 작업) not found → NotFound
        5. 메시지에 "timeout" → Timeout
        6. 메시지에 "permission" → PermissionDenied
        7. 그 외 → Unknown

    Args:
        error: StoreError, code/message 속성을 가진 객체, 매핑 또는 예외
        single_record: 단건 조회/수정/삭제 여부 (NotFound 판별 활성화)

    Returns:
        ClassifiedError: 예외를 던지지 않습니다
    """
    try:
        code, message = _raw_parts(error)
    except Exception:
        code, message = None, repr(error)

    lowered = message.lower()
    detail = message or None

    if code in UNIQUE_VIOLATION_CODES:
        return make_error(ErrorKind.DUPLICATE_ENTRY, detail)
    if code in SCHEMA_ERROR_CODES:
        return make_error(ErrorKind.SCHEMA_ERROR, detail)
    if code in FOREIGN_KEY_CODES:
        return make_error(ErrorKind.REFERENTIAL_ERROR, detail)
    if single_record and (code in NOT_FOUND_CODES or any(m in lowered for m in NOT_FOUND_MARKERS)):
        return make_error(ErrorKind.NOT_FOUND, detail)
    if "timeout" in lowered:
        return make_error(ErrorKind.TIMEOUT, detail)
    if "permission" in lowered:
        return make_error(ErrorKind.PERMISSION_DENIED, detail)
    return make_error(ErrorKind.UNKNOWN, detail)
