"""급여 규칙/급여 기간 Pydantic 스키마 정의.

Pay ruleset and pay period Pydantic schema definitions.
Rulesets are explicit values threaded into every aggregation call; nothing
in the aggregator reads ambient settings at computation time.

Schemas:
    - RateMultiplierRule: 할증 규칙 (Rate label + multiplier + applicability conditions)
    - PayRuleset: 급여 규칙 묶음 (Base rate, default break, ordered rules, period config)
    - PayPeriod: 집계 기간 (Inclusive calendar bounds, half-open instant window)
    - ShiftDiagnostic: 집계 제외 근무 진단 (Per-shift exclusion diagnostic)
    - PayPeriodSummary: 기간 집계 결과 (Computed period totals)
    - OvertimeForecast: 초과근무 예측 (Pace-based overtime projection)
    - DailyTotal / RateBucket: 일별/할증별 분해 (Daily and per-rate breakdowns)
"""

import datetime as dt
from typing import Literal
from zoneinfo import ZoneInfo

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from shiftpro.config import settings
from shiftpro.schemas.pattern import WeekdayName
from shiftpro.utils.date_math import MINUTES_PER_DAY, local_midnight, resolve_zone

PayPeriodType = Literal["weekly", "biweekly", "monthly"]
ExclusionReason = Literal["non_positive_duration", "break_exceeds_duration", "cancelled"]
WarningLevel = Literal["none", "approaching", "warning", "critical", "exceeded"]

# 라벨 없는 분의 표시 이름 (Display label for unlabeled minutes)
REGULAR_LABEL: str = "Regular"


class RateMultiplierRule(BaseModel):
    """할증 규칙: 라벨, 배율, 적용 조건.

    A rate label mapped to a multiplier plus an applicability predicate.

    A rule applies to a shift when the shift is explicitly tagged with the
    rule's label, or when the rule defines at least one condition and every
    defined condition holds:

        - weekdays: 기준 날짜의 요일 (Anchor day's weekday is listed)
        - start_window: 현지 시작 분이 [from, to) 안 (Local start minute in window; wraps when from > to)
        - dates: 지정 날짜 (Anchor date is listed, e.g. bank holidays)
        - min_duration_minutes: 유급 분 하한 (Paid minutes reach the threshold)
        - additional_shift: 추가 근무 여부 일치 (Shift's is_additional_shift equals this)
    """

    model_config = ConfigDict(frozen=True)

    label: str = Field(..., min_length=1)
    multiplier: float = Field(..., gt=0, allow_inf_nan=False)
    weekdays: tuple[WeekdayName, ...] = ()
    start_window: tuple[int, int] | None = None
    dates: tuple[dt.date, ...] = ()
    min_duration_minutes: int | None = Field(default=None, ge=0)
    additional_shift: bool | None = None

    @field_validator("start_window")
    @classmethod
    def _check_window(cls, value: tuple[int, int] | None) -> tuple[int, int] | None:
        if value is None:
            return value
        start, end = value
        if not (0 <= start < MINUTES_PER_DAY and 0 <= end <= MINUTES_PER_DAY):
            raise ValueError("start_window bounds must be minutes within a day")
        if start == end:
            raise ValueError("start_window must not be empty")
        return value

    @property
    def has_conditions(self) -> bool:
        return bool(
            self.weekdays
            or self.start_window is not None
            or self.dates
            or self.min_duration_minutes is not None
            or self.additional_shift is not None
        )


class PayRuleset(BaseModel):
    """급여 규칙 묶음.

    Value-typed pay configuration. Rule declaration order is significant:
    classification picks the first matching rule.

    Attributes:
        name: 규칙 이름 (Display name)
        base_rate_cents: 시간당 기본급(센트) (Hourly base rate in cents)
        unpaid_break_minutes: 근무에 휴게 미지정 시 공제 (Default break deduction)
        rules: 선언 순서가 유지되는 할증 규칙 (Ordered multiplier rules)
        period_type: weekly/biweekly/monthly
        period_reference_date: 격주 기준일 (Biweekly anchor date)
        week_start: 주 시작 요일 (First day of a weekly period)
    """

    model_config = ConfigDict(frozen=True)

    name: str = "Default"
    base_rate_cents: int = Field(..., ge=0)
    unpaid_break_minutes: int = Field(default_factory=lambda: settings.DEFAULT_UNPAID_BREAK_MINUTES, ge=0)
    rules: tuple[RateMultiplierRule, ...] = ()
    period_type: PayPeriodType = "biweekly"
    period_reference_date: dt.date | None = None
    week_start: WeekdayName = "monday"

    @field_validator("rules")
    @classmethod
    def _unique_labels(cls, value: tuple[RateMultiplierRule, ...]) -> tuple[RateMultiplierRule, ...]:
        labels = [rule.label for rule in value]
        if len(labels) != len(set(labels)):
            raise ValueError("Rate labels must be unique within a ruleset")
        for rule in value:
            # 라벨 없는 분과 같은 버킷으로 합쳐짐 (Shares the bucket of unlabeled minutes)
            if rule.label == REGULAR_LABEL and rule.multiplier != 1.0:
                raise ValueError(f"A rule labelled {REGULAR_LABEL!r} must use multiplier 1.0")
        return value

    @classmethod
    def standard_shift_worker(
        cls,
        base_rate_cents: int,
        period_reference_date: dt.date | None = None,
    ) -> "PayRuleset":
        """표준 교대 근무자 규칙: 30분 휴게, 태그 기반 할증 4종."""
        return cls(
            name="Standard Shift Ruleset",
            base_rate_cents=base_rate_cents,
            unpaid_break_minutes=30,
            rules=(
                RateMultiplierRule(label="Regular", multiplier=1.0),
                RateMultiplierRule(label="Overtime (1.3x)", multiplier=1.3),
                RateMultiplierRule(label="Extra Shift", multiplier=1.5),
                RateMultiplierRule(label="Bank Holiday", multiplier=2.0),
            ),
            period_type="biweekly",
            period_reference_date=period_reference_date,
        )

    @classmethod
    def simple_hourly(cls, base_rate_cents: int) -> "PayRuleset":
        """단순 시급 규칙: 휴게 공제 없음, 초과근무 1.5배."""
        return cls(
            name="Simple Hourly",
            base_rate_cents=base_rate_cents,
            unpaid_break_minutes=0,
            rules=(
                RateMultiplierRule(label="Regular", multiplier=1.0),
                RateMultiplierRule(label="Overtime", multiplier=1.5),
            ),
            period_type="weekly",
        )


class PayPeriod(BaseModel):
    """급여 집계 기간.

    Inclusive calendar bounds [start_date, end_date]. The matching instant
    window is half-open, [start_date 00:00, end_date + 1 day 00:00) in
    time_zone, so adjacent periods share a boundary instant and a shift
    starting exactly on it belongs only to the later period.
    """

    model_config = ConfigDict(frozen=True)

    start_date: dt.date
    end_date: dt.date
    time_zone: str = Field(default_factory=lambda: settings.DEFAULT_TIME_ZONE)

    @field_validator("time_zone")
    @classmethod
    def _known_time_zone(cls, value: str) -> str:
        resolve_zone(value)
        return value

    @model_validator(mode="after")
    def _check_bounds(self) -> "PayPeriod":
        if self.start_date > self.end_date:
            raise ValueError("start_date must not be after end_date")
        return self

    @property
    def zone(self) -> ZoneInfo:
        return resolve_zone(self.time_zone)

    @property
    def starts_at(self) -> dt.datetime:
        return local_midnight(self.start_date, self.zone)

    @property
    def ends_at(self) -> dt.datetime:
        """배타적 종료 시각 (Exclusive end instant: midnight after end_date)."""
        return local_midnight(self.end_date + dt.timedelta(days=1), self.zone)

    @property
    def duration_days(self) -> int:
        return (self.end_date - self.start_date).days + 1

    def contains(self, moment: dt.datetime) -> bool:
        return self.starts_at <= moment < self.ends_at


class ShiftDiagnostic(BaseModel):
    """집계에서 제외된 근무에 대한 진단 (Why a shift contributed nothing)."""

    model_config = ConfigDict(frozen=True)

    date: dt.date
    title: str
    scheduled_start: dt.datetime
    scheduled_end: dt.datetime
    reason: ExclusionReason


class PayPeriodSummary(BaseModel):
    """급여 기간 집계 결과.

    Computed totals for one period. Never a source of truth: always
    recomputable from the shift set and ruleset.

    Attributes:
        period: 집계 기간 (The aggregated period)
        paid_minutes: 총 유급 분 (Total paid minutes)
        regular_minutes: 할증 라벨이 없는 분 (Minutes with no resolved label)
        premium_minutes_by_label: 라벨별 분, 규칙 선언 순서 (Minutes per label in rule order)
        estimated_pay_cents: 예상 급여(센트) (Estimated pay, banker's rounding at the end)
        shift_count: 기여한 근무 수 (Shifts that contributed minutes)
        excluded: 제외된 근무 진단 (Diagnostics for shifts that contributed nothing)
    """

    model_config = ConfigDict(frozen=True)

    period: PayPeriod
    paid_minutes: int
    regular_minutes: int
    premium_minutes_by_label: dict[str, int]
    estimated_pay_cents: int
    shift_count: int
    excluded: tuple[ShiftDiagnostic, ...] = ()

    @property
    def paid_hours(self) -> float:
        return self.paid_minutes / 60.0


class OvertimeForecast(BaseModel):
    """초과근무 예측: 현재 속도 기준 기간 말 예상 시간.

    Pace-based projection of where a period's paid hours will land.

    Attributes:
        current_hours: 현재까지 유급 시간 (Paid hours so far)
        projected_hours: 기간 말 예상 시간 (Hours at period end at the current daily average)
        target_hours: 목표 시간 (Target hours for the period)
        days_remaining: 남은 일수 (Days left after as_of)
        average_hours_per_day: 경과일 평균 (Average over elapsed days)
        level: 경고 단계 (none/approaching/warning/critical/exceeded)
        message: 표시 문구 (Display message)
        recommended_daily_hours: 목표까지 하루 권장 시간, 남은 날 없으면 None
            (Hours per remaining day to reach the target; None with no days left)
    """

    model_config = ConfigDict(frozen=True)

    current_hours: float
    projected_hours: float
    target_hours: int
    days_remaining: int
    average_hours_per_day: float
    level: WarningLevel
    message: str
    recommended_daily_hours: float | None = None


class DailyTotal(BaseModel):
    model_config = ConfigDict(frozen=True)

    date: dt.date
    minutes: int


class RateBucket(BaseModel):
    """할증 라벨별 분/급여 버킷 (Display-only per-rate bucket)."""

    model_config = ConfigDict(frozen=True)

    label: str
    multiplier: float
    minutes: int
    pay_cents: int
