"""API 요청/응답 Pydantic 스키마.

HTTP request/response schemas. Every request carries its full input; the
API holds no state between calls.
"""

from datetime import date

from pydantic import BaseModel, Field

from shiftpro.schemas.pattern import PatternDefinition, WeekdayName
from shiftpro.schemas.pay import DailyTotal, PayPeriod, PayPeriodSummary, PayPeriodType, PayRuleset, RateBucket
from shiftpro.schemas.shift import ShiftInstance


# === 패턴 (Pattern) 스키마 ===

class PreviewRequest(BaseModel):
    """패턴 미리보기 요청.

    Attributes:
        definition: 패턴 정의 (Pattern to preview)
        start_date: 시작일 (First previewed day)
        months: 미리보기 개월 수 (Horizon in months; defaults to PREVIEW_MONTHS)
        end_date: 명시적 종료일, months보다 우선 (Explicit inclusive end, wins over months)
    """

    definition: PatternDefinition
    start_date: date
    months: int | None = Field(default=None, ge=1, le=24)
    end_date: date | None = None


class GenerateRequest(BaseModel):
    """근무 생성 요청: [from_date, to_date] 양끝 포함.

    Generated shifts carry definition.id as pattern_id. A definition sent
    without an id gets a fresh random one on every request, so repeated
    calls agree on dedupe keys but not on pattern_id; send an id to get
    value-equal responses.
    """

    definition: PatternDefinition
    from_date: date
    to_date: date
    owner_id: str | None = None


# === 급여 (Pay) 스키마 ===

class AggregateRequest(BaseModel):
    shifts: list[ShiftInstance]
    period: PayPeriod
    ruleset: PayRuleset


class OvertimeRequest(AggregateRequest):
    """초과근무 예측 요청: 집계 입력 + 기준일, 목표/임계 시간.

    Attributes:
        as_of: 예측 기준일 (Day the forecast is made on)
        target_hours: 기간 목표 시간 (Period target)
        warning_hours: 경고 임계 (Warning threshold)
        critical_hours: 위험 임계 (Critical threshold)
    """

    as_of: date
    target_hours: int = Field(default=80, ge=1)
    warning_hours: float = Field(default=35.0, gt=0, allow_inf_nan=False)
    critical_hours: float = Field(default=40.0, gt=0, allow_inf_nan=False)


class PayBreakdownResponse(BaseModel):
    """기간 집계 + 일별/할증별 분해 (Summary plus daily and per-rate breakdowns)."""

    summary: PayPeriodSummary
    daily_totals: list[DailyTotal]
    rate_buckets: list[RateBucket]


class PeriodLookupRequest(BaseModel):
    """급여 기간 조회 요청.

    Attributes:
        day: 대상 날짜 (Day to locate)
        period_type: weekly/biweekly/monthly
        reference_date: 격주 기준일 (Biweekly anchor; required for biweekly)
        week_start: 주 시작 요일 (First weekday of weekly periods)
        time_zone: 기간 시간대 (IANA zone; defaults to DEFAULT_TIME_ZONE)
    """

    day: date
    period_type: PayPeriodType
    reference_date: date | None = None
    week_start: WeekdayName = "monday"
    time_zone: str | None = None


# === 근무 검증 (Shift validation) 스키마 ===

class ValidateShiftsRequest(BaseModel):
    shifts: list[ShiftInstance]
    maximum_duration_hours: int = Field(default=24, ge=1)
