"""패턴 엔진: 반복 근무 정의를 날짜별 근무로 전개.

Pattern Engine: Expands a PatternDefinition into dated shifts.
Pure computation: no I/O, no shared mutable state. The same definition and
window always produce value-identical output, so callers can deduplicate
regenerated shifts against stored ones by ShiftInstance.dedupe_key.

Expansion rules:
    - weekly: 창 안의 각 날짜 d에 대해 weekday(d)가 포함되면 1건
      (one shift per day whose weekday is listed)
    - rotating: offset = days_between(cycle_start_date, d) mod cycle_length
      (floor modulo, so days before the cycle start wrap backwards; always
      anchored on the definition's own cycle_start_date, never on the window)
    - end = start + duration in minutes, so overnight and multi-day shifts
      need no special casing; date stays the start day
"""

import logging
from datetime import date, datetime, timedelta
from typing import Callable, Generic, Iterator, NamedTuple, TypeVar

from shiftpro.config import settings
from shiftpro.schemas.pattern import PatternDefinition, RotationDay, ShiftPreview
from shiftpro.schemas.shift import ShiftInstance
from shiftpro.utils.date_math import (
    add_minutes,
    add_months,
    at_minute,
    date_range,
    days_between,
    weekday_name,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


class _Occurrence(NamedTuple):
    day: date
    title: str
    start: datetime
    end: datetime


class ShiftSequence(Generic[T]):
    """지연 평가되는 재시작 가능 유한 시퀀스.

    Lazy, restartable, finite sequence. Every iteration re-runs the
    expansion from scratch, so iterating twice yields equal items.
    """

    def __init__(self, factory: Callable[[], Iterator[T]]) -> None:
        self._factory = factory

    def __iter__(self) -> Iterator[T]:
        return self._factory()

    def to_list(self) -> list[T]:
        return list(self)


class PatternEngine:
    """패턴 엔진.

    Pattern engine producing previews (for UI confirmation) and owned shift
    instances (for persistence by the caller) from the same expansion.
    """

    def rotation_offset(self, definition: PatternDefinition, day: date) -> int:
        """순환 주기 내 위치 (Position of day within the cycle, always >= 0)."""
        return days_between(definition.cycle_start_date, day) % definition.cycle_length

    def rotation_day_for(self, definition: PatternDefinition, day: date) -> RotationDay:
        return definition.rotation_days[self.rotation_offset(definition, day)]

    def expand(self, definition: PatternDefinition, from_date: date, to_date: date) -> Iterator[_Occurrence]:
        """[from_date, to_date] 구간을 전개합니다 (Inclusive window; empty when from > to)."""
        if definition.kind == "weekly":
            return self._expand_weekly(definition, from_date, to_date)
        return self._expand_rotating(definition, from_date, to_date)

    def _expand_weekly(
        self, definition: PatternDefinition, from_date: date, to_date: date
    ) -> Iterator[_Occurrence]:
        zone = definition.zone
        weekdays = set(definition.weekdays)
        for day in date_range(from_date, to_date):
            if weekday_name(day) not in weekdays:
                continue
            start = at_minute(day, definition.start_minute_of_day, zone)
            end = add_minutes(start, definition.duration_minutes)
            yield _Occurrence(day, definition.name, start, end)

    def _expand_rotating(
        self, definition: PatternDefinition, from_date: date, to_date: date
    ) -> Iterator[_Occurrence]:
        zone = definition.zone
        for day in date_range(from_date, to_date):
            slot = self.rotation_day_for(definition, day)
            if not slot.is_work_day:
                continue
            start = at_minute(day, slot.effective_start_minute(definition.start_minute_of_day), zone)
            end = add_minutes(start, slot.effective_duration(definition.duration_minutes))
            yield _Occurrence(day, slot.label or definition.name, start, end)

    def preview_window(
        self,
        start_date: date,
        months: int | None = None,
        end_date: date | None = None,
    ) -> tuple[date, date]:
        """미리보기 구간 계산.

        Resolve the inclusive preview window. An explicit end_date wins;
        otherwise the horizon covers [start_date, start_date + months).
        """
        if end_date is not None:
            return start_date, end_date
        horizon = settings.PREVIEW_MONTHS if months is None else months
        return start_date, add_months(start_date, horizon) - timedelta(days=1)

    def preview(
        self,
        definition: PatternDefinition,
        start_date: date,
        months: int | None = None,
        end_date: date | None = None,
    ) -> ShiftSequence[ShiftPreview]:
        """확정 전 미리보기를 생성합니다.

        Build a bounded preview for UI confirmation before a pattern is
        committed. Nothing is expanded until the sequence is iterated.

        Args:
            definition: 검증된 패턴 정의 (Validated pattern definition)
            start_date: 미리보기 시작일 (First previewed day)
            months: 개월 수, 기본값 settings.PREVIEW_MONTHS (Horizon in months)
            end_date: 명시적 종료일, 포함 (Explicit inclusive end, overrides months)

        Returns:
            ShiftSequence[ShiftPreview]: 재시작 가능한 지연 시퀀스 (Lazy restartable sequence)
        """
        window_start, window_end = self.preview_window(start_date, months, end_date)

        def _iterate() -> Iterator[ShiftPreview]:
            for occurrence in self.expand(definition, window_start, window_end):
                yield ShiftPreview(
                    date=occurrence.day,
                    title=occurrence.title,
                    scheduled_start=occurrence.start,
                    scheduled_end=occurrence.end,
                )

        return ShiftSequence(_iterate)

    def generate_shifts(
        self,
        definition: PatternDefinition,
        from_date: date,
        to_date: date,
        owner_id: str | None = None,
    ) -> list[ShiftInstance]:
        """저장 가능한 근무 인스턴스를 생성합니다.

        Generate owned, persistable shift instances for [from_date, to_date].
        Repeated calls over overlapping windows yield identical instances for
        the shared dates; previously generated output is never touched.

        Args:
            definition: 검증된 패턴 정의 (Validated pattern definition)
            from_date: 시작일, 포함 (Inclusive first day)
            to_date: 종료일, 포함 (Inclusive last day)
            owner_id: 소유자 식별자 (Opaque owner id copied onto each instance)

        Returns:
            list[ShiftInstance]: 날짜순 근무 목록 (Shifts in date order)
        """
        shifts = [
            ShiftInstance(
                date=occurrence.day,
                title=occurrence.title,
                scheduled_start=occurrence.start,
                scheduled_end=occurrence.end,
                status="scheduled",
                pattern_id=definition.id,
                owner_id=owner_id,
            )
            for occurrence in self.expand(definition, from_date, to_date)
        ]
        logger.debug(
            "Generated %d shifts for pattern %s (%s) over %s..%s",
            len(shifts), definition.id, definition.kind, from_date, to_date,
        )
        return shifts


pattern_engine: PatternEngine = PatternEngine()
