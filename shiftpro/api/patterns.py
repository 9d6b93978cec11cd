"""패턴 라우터: 미리보기, 근무 생성, 기본 템플릿 엔드포인트.

Pattern Router: Preview, shift generation, and built-in template
endpoints. Definitions are validated by the request schema, so an invalid
definition never reaches the engine and is answered with 422.
"""

from datetime import date

from fastapi import APIRouter
from pydantic import ValidationError

from shiftpro.config import settings
from shiftpro.schemas.pattern import PatternDefinition, PatternTemplateInfo, ShiftPreview
from shiftpro.schemas.requests import GenerateRequest, PreviewRequest
from shiftpro.schemas.shift import ShiftInstance
from shiftpro.services.pattern_engine import pattern_engine
from shiftpro.services.pattern_templates import build_template, list_templates
from shiftpro.utils.date_math import days_between
from shiftpro.utils.exceptions import BadRequestError, NotFoundError

router: APIRouter = APIRouter()


def _check_window(from_date: date, to_date: date) -> None:
    """요청 구간 길이 제한 (Reject windows longer than MAX_WINDOW_DAYS)."""
    if days_between(from_date, to_date) + 1 > settings.MAX_WINDOW_DAYS:
        raise BadRequestError(f"Window exceeds {settings.MAX_WINDOW_DAYS} days")


@router.post("/patterns/preview", response_model=list[ShiftPreview])
async def preview_pattern(data: PreviewRequest) -> list[ShiftPreview]:
    window_start, window_end = pattern_engine.preview_window(data.start_date, data.months, data.end_date)
    _check_window(window_start, window_end)
    return pattern_engine.preview(data.definition, data.start_date, data.months, data.end_date).to_list()


@router.post("/patterns/generate", response_model=list[ShiftInstance])
async def generate_shifts(data: GenerateRequest) -> list[ShiftInstance]:
    """패턴으로부터 근무 인스턴스 생성.

    Generate shift instances for [from_date, to_date]. The caller owns
    persistence and deduplicates against stored shifts by dedupe key.
    """
    _check_window(data.from_date, data.to_date)
    return pattern_engine.generate_shifts(data.definition, data.from_date, data.to_date, data.owner_id)


@router.get("/patterns/templates", response_model=list[PatternTemplateInfo])
async def get_templates() -> list[PatternTemplateInfo]:
    return list_templates()


@router.get("/patterns/templates/{key}", response_model=PatternDefinition)
async def get_template(
    key: str,
    cycle_start_date: date | None = None,
    time_zone: str | None = None,
) -> PatternDefinition:
    """기본 템플릿을 패턴 정의로 반환.

    Materialize a built-in template. Rotations need cycle_start_date.

    Raises:
        NotFoundError: 알 수 없는 템플릿 키 (Unknown template key)
        BadRequestError: 순환 템플릿에 시작일 없음 또는 잘못된 시간대 (Missing cycle start or bad zone)
    """
    try:
        return build_template(key, cycle_start_date=cycle_start_date, time_zone=time_zone)
    except KeyError:
        raise NotFoundError(f"Pattern template '{key}' not found")
    except ValidationError as exc:
        raise BadRequestError(str(exc.errors()[0]["msg"]))
