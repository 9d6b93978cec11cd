"""FastAPI 애플리케이션 엔트리포인트: 로깅, 미들웨어 및 라우터 등록.

FastAPI application entry point: Logging, middleware and router
registration. Configures logging, CORS, health check, and mounts the
scheduling and pay API under /api/v1.
"""

import logging

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from shiftpro import __version__
from shiftpro.config import settings
from shiftpro.middleware.axiom_logging import AxiomLoggingMiddleware
from shiftpro.utils.exceptions import validation_exception_handler

# 루트 로거 설정: Root logger configuration
logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)

app: FastAPI = FastAPI(
    title=settings.APP_NAME,
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_exception_handler(RequestValidationError, validation_exception_handler)

# Axiom API 로깅 미들웨어: CORS보다 먼저 등록하여 모든 요청을 캡처
# Registered before CORS to capture all requests
app.add_middleware(AxiomLoggingMiddleware)

# CORS 미들웨어: Cross-Origin Resource Sharing middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
async def health_check() -> dict[str, str]:
    """서버 상태 확인 엔드포인트.

    Health check endpoint for load balancers and monitoring.
    """
    return {"status": "ok"}


# 라우터 등록: Router registration
from shiftpro.api import api_router  # noqa: E402

app.include_router(api_router, prefix="/api/v1")
