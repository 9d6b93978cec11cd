"""근무 인스턴스 Pydantic 스키마.

Shift instance schema: a concrete dated occurrence, produced either by the
pattern engine or by manual entry.
"""

import datetime as dt
from typing import Literal

from pydantic import AwareDatetime, BaseModel, ConfigDict, Field

ShiftStatus = Literal["scheduled", "in_progress", "completed", "cancelled"]

# 중복 제거 키: (date, scheduled_start, scheduled_end, title)
DedupeKey = tuple[dt.date, dt.datetime, dt.datetime, str]


class ShiftInstance(BaseModel):
    """근무 인스턴스: 날짜가 확정된 단일 근무.

    A concrete dated shift. Instances are value snapshots: regenerating a
    pattern produces new instances, never mutates old ones. scheduled_end is
    not checked against scheduled_start here so that malformed manual
    entries can still reach the aggregator and be reported individually.

    Attributes:
        date: 기준 날짜, 예정 시작의 현지 날짜 (Anchor day, local day of scheduled start)
        title: 표시 제목 (Title from the pattern or rotation day)
        scheduled_start: 예정 시작 시각 (Scheduled start, timezone-aware)
        scheduled_end: 예정 종료 시각 (Scheduled end, may fall on a later day)
        actual_start: 실제 출근 시각 (Clock-in time, optional)
        actual_end: 실제 퇴근 시각 (Clock-out time, optional)
        break_minutes: 무급 휴게(분), None이면 규칙 기본값 (Unpaid break; None = ruleset default)
        status: scheduled/in_progress/completed/cancelled
        pattern_id: 생성 패턴 식별자 (Opaque id of the generating pattern)
        owner_id: 소유자 식별자 (Opaque owner id, joined by the caller)
        rate_label: 명시적 할증 태그 (Explicit rate tag, e.g. "Holiday")
        is_additional_shift: 추가 근무 여부 (Extra shift outside the pattern)
        location: 근무지 (Worksite)
        notes: 메모 (Free text)
    """

    model_config = ConfigDict(frozen=True)

    date: dt.date
    title: str
    scheduled_start: AwareDatetime
    scheduled_end: AwareDatetime
    actual_start: AwareDatetime | None = None
    actual_end: AwareDatetime | None = None
    break_minutes: int | None = Field(default=None, ge=0)
    status: ShiftStatus = "scheduled"
    pattern_id: str | None = None
    owner_id: str | None = None
    rate_label: str | None = None
    is_additional_shift: bool = False
    location: str | None = None
    notes: str | None = None

    @property
    def dedupe_key(self) -> DedupeKey:
        """재생성 결과 중복 제거용 구조적 키 (Structural identity for deduplication)."""
        return (self.date, self.scheduled_start, self.scheduled_end, self.title)

    @property
    def effective_start(self) -> dt.datetime:
        """실제 시각이 모두 있으면 실제, 아니면 예정 (Actual pair if complete, else scheduled)."""
        if self.actual_start is not None and self.actual_end is not None:
            return self.actual_start
        return self.scheduled_start

    @property
    def effective_end(self) -> dt.datetime:
        if self.actual_start is not None and self.actual_end is not None:
            return self.actual_end
        return self.scheduled_end


# === 검증 결과 (Validation results) ===

ShiftIssueCode = Literal["invalid_duration", "invalid_break", "overlapping_shift"]


class ShiftIssue(BaseModel):
    """근무 검증 문제 (One validation issue)."""

    model_config = ConfigDict(frozen=True)

    code: ShiftIssueCode
    message: str


class ShiftValidationResult(BaseModel):
    index: int  # 요청 목록 내 위치 (Position in the submitted list)
    issues: list[ShiftIssue]
