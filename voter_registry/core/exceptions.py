"""커스텀 예외 정의 (Structured Exception Hierarchy)

저장소 어댑터 내부에서만 raise 됩니다. 조회/CRUD 레이어는 이 예외를
ClassifiedError 값으로 변환해 반환하며 호출자에게 다시 던지지 않습니다.
"""
from typing import Any, Optional


# 기본 예외 클래스
class VoterRegistryException(Exception):
    """기본 예외 클래스 - 모든 커스텀 예외의 부모"""
    def __init__(self, message: str, error_code: str = "UNKNOWN_ERROR", details: Optional[dict[str, Any]] = None):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)

    def __str__(self) -> str:
        return f"[{self.error_code}] {self.message}"


# 저장소 관련 예외
class StoreError(VoterRegistryException):
    """원격 저장소가 돌려준 원본 오류 (code + message)

    code 는 저장소 고유 코드(SQLSTATE, PGRST***)이며 없을 수 있습니다.
    """
    def __init__(self, message: str, code: Optional[str] = None, details: Optional[dict[str, Any]] = None):
        self.code = code
        super().__init__(message, code or "STORE_ERROR", details)


class StoreNotFoundException(StoreError):
    """단건 조회/수정/삭제 대상이 없을 때"""
    def __init__(self, record_id: str, details: Optional[dict[str, Any]] = None):
        message = f"Voter not found (0 rows) for id: {record_id}"
        super().__init__(message, "PGRST116", details or {"id": record_id})


class StoreTimeoutException(StoreError):
    """저장소 요청 타임아웃"""
    def __init__(self, operation: str, timeout_s: float, details: Optional[dict[str, Any]] = None):
        message = f"Store request '{operation}' timeout after {timeout_s}s"
        super().__init__(message, None,
                         details or {"operation": operation, "timeout_s": timeout_s})


class StoreConnectionException(StoreError):
    """저장소 연결 실패"""
    def __init__(self, reason: str, details: Optional[dict[str, Any]] = None):
        message = f"Store connection failed: {reason}"
        super().__init__(message, None, details or {"reason": reason})


# 유효성 검증 관련 예외
class ValidationException(VoterRegistryException):
    """유효성 검증 예외"""
    def __init__(self, field: str, reason: str, details: Optional[dict[str, Any]] = None):
        message = f"Validation failed for '{field}': {reason}"
        super().__init__(message, "VALIDATION_ERROR",
                         details or {"field": field, "reason": reason})


class InvalidCursorException(ValidationException):
    """해석할 수 없는 커서 토큰"""
    def __init__(self, reason: str, details: Optional[dict[str, Any]] = None):
        super().__init__("cursor", reason, details)
