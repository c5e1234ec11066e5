"""헬스 체크 엔드포인트"""
import asyncio
from datetime import datetime

from fastapi import APIRouter, Depends

from voter_registry import __version__
from voter_registry.api.routes.voter_routes import get_voter_service
from voter_registry.core.config import settings
from voter_registry.core.exceptions import StoreError
from voter_registry.core.logging import logger
from voter_registry.schemas.voter_schema import HealthResponse
from voter_registry.services.voter_service import VoterService

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health_check(service: VoterService = Depends(get_voter_service)):
    """
    헬스 체크 엔드포인트

    - 서버 상태
    - 저장소 연결 상태 (store_timeout_s 안에 ping)
    """
    store_ok = False
    try:
        store_ok = await asyncio.wait_for(service.store.ping(), timeout=service.timeout_s)
    except asyncio.TimeoutError:
        logger.warning(f"Store health check timeout after {service.timeout_s}s")
    except StoreError as e:
        logger.warning(f"Store health check failed: {e.error_code}")
    except Exception as e:
        logger.error(f"Unexpected store error: {e}")

    return HealthResponse(
        status="ok" if store_ok else "error",
        store_backend=settings.store_backend,
        timestamp=datetime.now(),
        version=__version__,
    )


@router.get("/")
async def root():
    """루트 엔드포인트"""
    return {
        "service": settings.api_title,
        "version": __version__,
        "docs": "/docs"
    }
