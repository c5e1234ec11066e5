"""FastAPI 앱 팩토리"""
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from voter_registry.api import health_router, voter_router
from voter_registry.api.routes import voter_routes
from voter_registry.core.config import settings
from voter_registry.core.logging import logger
from voter_registry.engine.errors import invalid_argument


@asynccontextmanager
async def lifespan(app: FastAPI):
    """애플리케이션 생명주기

    저장소는 첫 요청 때 get_voter_service 가 만들고, 종료 시 닫습니다.
    """
    logger.info(f"Starting application (store backend: {settings.store_backend})")
    yield
    logger.info("Shutting down application...")
    service = voter_routes._voter_service
    aclose = getattr(service.store, "aclose", None) if service else None
    if aclose is not None:
        await aclose()


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """쿼리/경로 파라미터 형식 오류도 InvalidArgument envelope 로 응답"""
    detail = "; ".join(
        f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors()
    )
    error = invalid_argument(detail)
    logger.warning(f"[API] Invalid request {request.url.path}: {detail}")
    return JSONResponse(
        status_code=400,
        content={
            "status": "error",
            "data": None,
            "message": error.message,
            "error_code": error.code,
            "detail": error.detail,
        },
    )


def create_app() -> FastAPI:
    """
    FastAPI 앱 생성 (Factory Pattern)

    Returns:
        FastAPI 앱 인스턴스
    """
    app = FastAPI(
        title=settings.api_title,
        description=settings.api_description,
        version=settings.api_version,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST", "PATCH", "DELETE"],
        allow_headers=["*"],
    )
    app.add_exception_handler(RequestValidationError, request_validation_handler)

    app.include_router(health_router)
    app.include_router(voter_router)

    return app


# uvicorn voter_registry.app:app
app = create_app()
