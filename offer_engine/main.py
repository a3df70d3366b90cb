"""
오퍼 초안 엔진 웹 서버 진입점입니다.

시작 시 카탈로그 스냅샷(템플릿, 규칙, 가격표)을 읽어 두고,
/api/v1 아래에 오퍼 초안, 요구사항, 표현식 API를 연결합니다.
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from offer_engine.api.router import api_router
from offer_engine.config import get_settings
from offer_engine.exceptions import (
    CatalogLoadError,
    ConfigurationError,
    NotFound,
    OfferEngineError,
)
from offer_engine.services import load_catalog_store, set_catalog_store

APP_TITLE = "오퍼 초안 엔진"
APP_VERSION = "1.0.0"
API_PREFIX = "/api/v1"

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """로그 레벨 설정 후 카탈로그를 불러옵니다. 실패해도 서버는 뜹니다."""
    settings = get_settings()
    logging.basicConfig(level=settings.log_level.upper())
    logger.info(f"[Startup] {APP_TITLE} {APP_VERSION} ({settings.host}:{settings.port})")

    try:
        set_catalog_store(await load_catalog_store(settings.catalog_path))
    except CatalogLoadError as e:
        # 빈 카탈로그로 시작: 모든 쌍이 not_found 진단이 됨
        logger.warning(f"[Startup] 카탈로그 없이 시작합니다: {e.message}")

    yield

    logger.info("[Shutdown] 오퍼 엔진 종료")


def _status_code_for(exc: OfferEngineError) -> int:
    if isinstance(exc, NotFound):
        return 404
    if isinstance(exc, ConfigurationError):
        return 400
    return 500


def _error_body(error_code: str, message: str, details: Optional[Any] = None) -> dict:
    return {
        "error_code": error_code,
        "message": message,
        "details": details,
        "timestamp": datetime.now().isoformat(),
    }


def create_app() -> FastAPI:
    """
    FastAPI 앱을 조립합니다.

    - CORS (allowed_origins 설정)
    - OfferEngineError → error_code/message/details JSON
    - API 라우터 (/api/v1)
    """
    settings = get_settings()

    app = FastAPI(
        title=APP_TITLE,
        description="프로젝트 요구사항에서 오퍼 항목 초안을 계산하는 규칙 엔진",
        version=APP_VERSION,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )

    @app.exception_handler(OfferEngineError)
    async def offer_engine_error_handler(request: Request, exc: OfferEngineError):
        status_code = _status_code_for(exc)
        if status_code >= 500:
            logger.error(f"[API] {request.url.path}: {exc.error_code} {exc.message}")
        return JSONResponse(
            status_code=status_code,
            content=_error_body(exc.error_code, exc.message, exc.details),
        )

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception):
        logger.error(f"[API] {request.url.path}: 처리되지 않은 예외 {exc}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content=_error_body("ERR_INTERNAL", "내부 서버 오류가 발생했습니다"),
        )

    app.include_router(api_router, prefix=API_PREFIX)

    @app.get("/")
    async def root():
        """서비스 이름과 API 위치."""
        return {
            "name": APP_TITLE,
            "version": APP_VERSION,
            "docs": "/docs",
            "api": API_PREFIX,
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run("offer_engine.main:app", host=settings.host, port=settings.port)
