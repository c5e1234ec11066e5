"""저장소 호출 가드 - 타임아웃 하드 캡 + 오류 분류

재시도는 하지 않습니다. 실패는 호출당 정확히 한 번 분류되어 반환됩니다.
"""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable, Optional

from voter_registry.core.exceptions import StoreError, StoreTimeoutException
from voter_registry.core.logging import logger, sanitize_for_log
from voter_registry.engine.errors import ClassifiedError, classify_store_error


async def run_guarded(
    operation: str,
    call: Callable[[], Awaitable[Any]],
    timeout_s: float,
    single_record: bool = False,
) -> tuple[Any, Optional[ClassifiedError]]:
    """저장소 호출 실행

    타임아웃은 호출자의 대기만 끝냅니다. asyncio.to_thread 로 실행 중인 동기 작업
    (SqlAlchemyVoterStore) 은 스레드에서 계속 돌기 때문에, Timeout 을 받은
    insert / update / remove 가 뒤늦게 커밋될 수 있습니다. 재시도 전에 fetch_by_id
    나 목록 조회로 실제 반영 여부를 확인해야 합니다.

    Returns:
        (결과, None) 또는 (None, ClassifiedError)
    """
    try:
        return await asyncio.wait_for(call(), timeout=timeout_s), None
    except asyncio.TimeoutError:
        raw: Any = StoreTimeoutException(operation, timeout_s)
    except StoreError as e:
        raw = e
    except Exception as e:
        logger.error(f"[Query] Unexpected error in {operation}: {type(e).__name__}: {e}", exc_info=True)
        raw = e

    error = classify_store_error(raw, single_record=single_record)
    logger.warning(
        f"[Query] {operation} failed: {error.code} "
        f"(detail: {sanitize_for_log(error.detail or '', max_length=200)})"
    )
    return None, error
