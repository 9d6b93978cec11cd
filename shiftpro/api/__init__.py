"""API 라우터 패키지: 모든 엔드포인트 통합.

API Router package: Aggregates the scheduling and pay endpoints into a
single router for inclusion in the FastAPI application.

Included routers:
    - patterns: 패턴 미리보기/생성/템플릿 (Pattern preview, generation, templates)
    - pay: 급여 집계/분해/기간 조회 (Pay aggregation, breakdowns, period lookup)
    - shifts: 근무 검증 (Shift validation)
"""

from fastapi import APIRouter

from shiftpro.api.patterns import router as patterns_router
from shiftpro.api.pay import router as pay_router
from shiftpro.api.shifts import router as shifts_router

api_router: APIRouter = APIRouter()

api_router.include_router(patterns_router, tags=["Patterns"])
api_router.include_router(pay_router, tags=["Pay"])
api_router.include_router(shifts_router, tags=["Shifts"])
