"""근무 검증 서비스: 호출자 측 검증 계층.

Shift validation: the caller-side layer that flags records the aggregator
merely tolerates. Nothing here raises; issues are returned as values so a
UI can tell "some shifts excluded from totals" apart from blocking errors.
"""

from typing import Iterable, Sequence

from shiftpro.schemas.shift import ShiftInstance, ShiftIssue, ShiftIssueCode
from shiftpro.utils.date_math import elapsed_minutes

_MESSAGES: dict[str, str] = {
    "invalid_duration": "Shift duration is invalid.",
    "invalid_break": "Break duration is invalid.",
    "overlapping_shift": "This shift overlaps with an existing shift.",
}


def _issue(code: ShiftIssueCode) -> ShiftIssue:
    return ShiftIssue(code=code, message=_MESSAGES[code])


class ShiftValidator:

    def validate_duration(self, shift: ShiftInstance, maximum_duration_hours: int = 24) -> ShiftIssue | None:
        minutes = elapsed_minutes(shift.scheduled_start, shift.scheduled_end)
        if minutes <= 0 or minutes > maximum_duration_hours * 60:
            return _issue("invalid_duration")
        return None

    def validate_break(self, shift: ShiftInstance) -> ShiftIssue | None:
        # 휴게 미지정 근무는 규칙 기본값을 쓰므로 여기서 검사하지 않음
        if shift.break_minutes is None:
            return None
        minutes = elapsed_minutes(shift.scheduled_start, shift.scheduled_end)
        if shift.break_minutes >= minutes:
            return _issue("invalid_break")
        return None

    def overlaps(self, shift: ShiftInstance, other: ShiftInstance) -> bool:
        if other.status == "cancelled" or other.dedupe_key == shift.dedupe_key:
            return False
        return shift.scheduled_start < other.scheduled_end and other.scheduled_start < shift.scheduled_end

    def validate_shift(
        self,
        shift: ShiftInstance,
        others: Iterable[ShiftInstance] = (),
        maximum_duration_hours: int = 24,
    ) -> list[ShiftIssue]:
        """단일 근무 검증.

        Validate one shift against duration and break limits, and against
        overlap with the other (non-cancelled) shifts.

        Returns:
            list[ShiftIssue]: 발견된 문제, 없으면 빈 목록 (Issues found, empty when valid)
        """
        issues = [
            issue
            for issue in (
                self.validate_duration(shift, maximum_duration_hours),
                self.validate_break(shift),
            )
            if issue is not None
        ]
        if shift.status != "cancelled" and any(self.overlaps(shift, other) for other in others):
            issues.append(_issue("overlapping_shift"))
        return issues

    def validate_batch(
        self,
        shifts: Sequence[ShiftInstance],
        maximum_duration_hours: int = 24,
    ) -> dict[int, list[ShiftIssue]]:
        """배치 검증: 문제가 있는 근무의 인덱스 -> 문제 목록."""
        results: dict[int, list[ShiftIssue]] = {}
        for index, shift in enumerate(shifts):
            others = [other for position, other in enumerate(shifts) if position != index]
            issues = self.validate_shift(shift, others, maximum_duration_hours)
            if issues:
                results[index] = issues
        return results


shift_validator: ShiftValidator = ShiftValidator()
