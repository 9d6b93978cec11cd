"""근무 패턴 Pydantic 스키마 정의.

Shift pattern Pydantic schema definitions.
A PatternDefinition is an immutable description of a recurring schedule:
either a weekly template (fixed weekdays) or an N-day rotating cycle.
Validation happens once, at construction; the pattern engine assumes every
definition it receives is valid.

Schemas:
    - RotationDay: 순환 주기의 하루 (One slot of a rotating cycle)
    - PatternDefinition: 반복 근무 정의 (Recurring schedule definition)
    - ShiftPreview: 확정 전 미리보기 항목 (Preview item shown before commit)
"""

import datetime as dt
from typing import Any, Literal
from uuid import uuid4
from zoneinfo import ZoneInfo

from pydantic import AwareDatetime, BaseModel, ConfigDict, Field, field_validator, model_validator

from shiftpro.config import settings
from shiftpro.utils.date_math import MINUTES_PER_DAY, WEEKDAYS, resolve_zone

PatternKind = Literal["weekly", "rotating"]
WeekdayName = Literal["monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"]


class RotationDay(BaseModel):
    """순환 패턴의 하루: 근무/휴무 여부와 선택적 시간 재정의.

    One day of a rotating cycle. Work days may override the pattern's start
    time and duration; off days are skipped during expansion.

    Attributes:
        index: 주기 내 0-based 위치 (0-based position within the cycle)
        is_work_day: 근무일 여부 (Work day or off day)
        label: 근무 이름, 예: "Night" (Optional shift name, used as title)
        start_minute_of_day: 시작 시각 재정의 (Start override, minutes after midnight)
        duration_minutes: 근무 시간 재정의 (Duration override in minutes)
    """

    model_config = ConfigDict(frozen=True)

    index: int = Field(..., ge=0)
    is_work_day: bool
    label: str | None = None
    start_minute_of_day: int | None = Field(default=None, ge=0, lt=MINUTES_PER_DAY)
    duration_minutes: int | None = Field(default=None, ge=1, le=MINUTES_PER_DAY)

    def effective_start_minute(self, fallback: int) -> int:
        return self.start_minute_of_day if self.start_minute_of_day is not None else fallback

    def effective_duration(self, fallback: int) -> int:
        return self.duration_minutes if self.duration_minutes is not None else fallback

    @classmethod
    def work_day(
        cls,
        index: int,
        label: str | None = None,
        start_minute_of_day: int | None = None,
        duration_minutes: int | None = None,
    ) -> "RotationDay":
        return cls(
            index=index,
            is_work_day=True,
            label=label,
            start_minute_of_day=start_minute_of_day,
            duration_minutes=duration_minutes,
        )

    @classmethod
    def off_day(cls, index: int, label: str | None = None) -> "RotationDay":
        return cls(index=index, is_work_day=False, label=label)


class PatternDefinition(BaseModel):
    """반복 근무 패턴 정의.

    Immutable recurring schedule definition. Exactly one variant is
    meaningful per kind:

        - weekly: weekdays (non-empty)
        - rotating: rotation_days (>= 2, indices 0..n-1) + cycle_start_date

    The inactive variant's fields are dropped before validation and never
    consulted.

    Attributes:
        id: 불투명 패턴 식별자 (Opaque identifier copied onto generated shifts;
            a fresh random hex string when omitted, so pass one to get
            value-equal results across calls)
        name: 표시 이름 (Display name, default shift title)
        kind: "weekly" | "rotating"
        start_minute_of_day: 시작 시각, 자정 이후 분 (Start offset within the day, [0, 1440))
        duration_minutes: 근무 시간(분) (Shift length, [1, 1440]; may cross midnight)
        weekdays: 주간 패턴 요일 (Weekdays for the weekly variant)
        rotation_days: 순환 주기 (Cycle slots for the rotating variant)
        cycle_start_date: rotation_days[0]이 적용되는 날짜 (Date on which slot 0 applies)
        time_zone: 벽시계 기준 시간대 (IANA zone for wall-clock placement)
        notes: 메모 (Free text)
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: uuid4().hex)
    name: str = "Shift"
    kind: PatternKind
    start_minute_of_day: int = Field(..., ge=0, lt=MINUTES_PER_DAY)
    duration_minutes: int = Field(..., ge=1, le=MINUTES_PER_DAY)
    weekdays: tuple[WeekdayName, ...] = ()
    rotation_days: tuple[RotationDay, ...] = ()
    cycle_start_date: dt.date | None = None
    time_zone: str = Field(default_factory=lambda: settings.DEFAULT_TIME_ZONE)
    notes: str | None = None

    @model_validator(mode="before")
    @classmethod
    def _drop_inactive_variant(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        kind = data.get("kind")
        if kind == "weekly":
            inactive = ("rotation_days", "cycle_start_date")
        elif kind == "rotating":
            inactive = ("weekdays",)
        else:
            return data
        return {key: value for key, value in data.items() if key not in inactive}

    @field_validator("weekdays")
    @classmethod
    def _normalize_weekdays(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        # 중복 제거 + 월요일부터 정렬 (Deduplicate, Monday-first order)
        return tuple(sorted(set(value), key=WEEKDAYS.index))

    @field_validator("rotation_days")
    @classmethod
    def _sort_rotation_days(cls, value: tuple[RotationDay, ...]) -> tuple[RotationDay, ...]:
        return tuple(sorted(value, key=lambda day: day.index))

    @field_validator("time_zone")
    @classmethod
    def _known_time_zone(cls, value: str) -> str:
        resolve_zone(value)
        return value

    @model_validator(mode="after")
    def _check_active_variant(self) -> "PatternDefinition":
        if self.kind == "weekly":
            if not self.weekdays:
                raise ValueError("Weekly patterns must include at least one weekday")
            return self

        if len(self.rotation_days) < 2:
            raise ValueError("Rotating patterns must define at least two cycle days")
        indices = [day.index for day in self.rotation_days]
        if indices != list(range(len(indices))):
            raise ValueError("Rotation day indices must be exactly 0..n-1 without gaps or duplicates")
        if self.cycle_start_date is None:
            raise ValueError("Rotating patterns require a cycle_start_date")
        return self

    @property
    def zone(self) -> ZoneInfo:
        return resolve_zone(self.time_zone)

    @property
    def cycle_length(self) -> int:
        return len(self.rotation_days)


class ShiftPreview(BaseModel):
    """패턴 미리보기 항목: 저장되지 않는 확인용 근무.

    Preview item shown for confirmation before a pattern is committed.
    Carries no ownership; see ShiftInstance for persistable output.
    """

    model_config = ConfigDict(frozen=True)

    date: dt.date  # 시작 시각의 현지 날짜 (Local day of the scheduled start)
    title: str
    scheduled_start: AwareDatetime
    scheduled_end: AwareDatetime
    is_work_day: bool = True


class PatternTemplateInfo(BaseModel):
    """기본 제공 템플릿 설명 (Built-in template descriptor)."""

    key: str
    name: str
    kind: PatternKind
    cycle_length: int | None = None  # 순환 패턴만 (Rotations only)
    notes: str
