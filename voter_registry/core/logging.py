"""로깅 설정 (개인정보 마스킹)

유권자 레코드에는 CPF, 이메일, 전화번호가 들어 있으므로 로그에 남기기 전에
가립니다. 명시적으로는 sanitize_for_log 를, 모든 레코드에는 PersonalDataFilter 를
적용합니다.
"""
import logging
import os
import re
import sys
from typing import Optional

from voter_registry.core.config import settings


LOGGER_NAME = "voter_registry"

# Production 환경에서는 DEBUG 로그 비활성화
IS_PRODUCTION = os.getenv("ENVIRONMENT", "development") == "production"

_MASKS = (
    (re.compile(r"[\w.+-]+@[\w-]+(\.[\w-]+)+"), "***@***"),
    (re.compile(r"(?<![\w.-])\d{3}\.?\d{3}\.?\d{3}-?\d{2}(?![\w-])"), "***.***.***-**"),
    (re.compile(r"(?<![\w-])\(?\d{2}\)?\s?\d{4,5}-?\d{4}(?![\w-])"), "(**) *****-****"),
    (re.compile(r"(?i)(apikey|authorization)([=:\s]+)(bearer\s+)?\S+"), r"\1\2\3***"),
)


def mask_personal_data(text: str) -> str:
    for pattern, replacement in _MASKS:
        text = pattern.sub(replacement, text)
    return text


class PersonalDataFilter(logging.Filter):
    """포맷된 메시지에서 CPF/이메일/전화번호/API 키 마스킹"""

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        masked = mask_personal_data(message)
        if masked != message:
            record.msg, record.args = masked, None
        return True


def _resolve_level(level: Optional[str]) -> int:
    name = (level or settings.log_level).upper()
    if IS_PRODUCTION and name == "DEBUG":
        name = "INFO"
    return getattr(logging, name, logging.INFO)


def setup_logging(level: Optional[str] = None) -> logging.Logger:
    """voter_registry 로거 초기화 (중복 핸들러 방지)"""
    logger = logging.getLogger(LOGGER_NAME)
    log_level = _resolve_level(level)
    logger.setLevel(log_level)

    if IS_PRODUCTION:
        fmt = "%(asctime)s - %(levelname)s - %(message)s"
    else:
        fmt = "%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s"

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(fmt=fmt, datefmt="%Y-%m-%d %H:%M:%S"))
        handler.addFilter(PersonalDataFilter())
        logger.addHandler(handler)

    for handler in logger.handlers:
        handler.setLevel(log_level)

    return logger


logger = setup_logging()


def sanitize_for_log(value: str, max_length: int = 100) -> str:
    """민감 정보 제거 후 로깅용 문자열 반환

    Args:
        value: 로깅할 문자열 (저장소 원본 메시지 등)
        max_length: 최대 길이

    Returns:
        마스킹 후 max_length 로 자른 문자열
    """
    if not value:
        return "[empty]"

    result = mask_personal_data(str(value))
    if len(result) > max_length:
        result = result[:max_length] + "..."
    return result
