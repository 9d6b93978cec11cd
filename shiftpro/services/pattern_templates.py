"""기본 제공 근무 패턴 템플릿.

Built-in pattern templates: common shift-work schedules ready to be
previewed and committed. Rotations need a cycle start date, so every
template is a factory rather than a constant.
"""

from datetime import date
from typing import NamedTuple

from shiftpro.config import settings
from shiftpro.schemas.pattern import PatternDefinition, PatternTemplateInfo, RotationDay


class _Template(NamedTuple):
    name: str
    kind: str
    start_minute_of_day: int
    duration_minutes: int
    work_days: tuple[bool, ...]  # 순환 패턴 근무일 표시 (Rotation work/off flags; empty for weekly)
    weekdays: tuple[str, ...]
    notes: str


def _rotation(work_days: tuple[bool, ...]) -> tuple[RotationDay, ...]:
    return tuple(
        RotationDay(index=index, is_work_day=is_work, label="Work" if is_work else "Off")
        for index, is_work in enumerate(work_days)
    )


_TWO_TWO_THREE: tuple[bool, ...] = (
    True, True, False, False, True, True, True,
    False, False, True, True, False, False, False,
)

_TEMPLATES: dict[str, _Template] = {
    "weekdays_nine_to_five": _Template(
        name="Weekdays 9-5",
        kind="weekly",
        start_minute_of_day=9 * 60,
        duration_minutes=8 * 60,
        work_days=(),
        weekdays=("monday", "tuesday", "wednesday", "thursday", "friday"),
        notes="Standard weekday schedule.",
    ),
    "four_on_four_off": _Template(
        name="4-on / 4-off",
        kind="rotating",
        start_minute_of_day=7 * 60,
        duration_minutes=12 * 60,
        work_days=(True, True, True, True, False, False, False, False),
        weekdays=(),
        notes="Common 8-day rotation with 12-hour shifts.",
    ),
    "pitman": _Template(
        name="Pitman",
        kind="rotating",
        start_minute_of_day=6 * 60,
        duration_minutes=12 * 60,
        work_days=_TWO_TWO_THREE,
        weekdays=(),
        notes="14-day Pitman rotation.",
    ),
    "continental": _Template(
        name="2-2-3 Continental",
        kind="rotating",
        start_minute_of_day=7 * 60,
        duration_minutes=12 * 60,
        work_days=_TWO_TWO_THREE,
        weekdays=(),
        notes="Popular 2-2-3 schedule with a 14-day cycle.",
    ),
    "dupont": _Template(
        name="DuPont",
        kind="rotating",
        start_minute_of_day=6 * 60,
        duration_minutes=12 * 60,
        work_days=(
            True, True, True, True, False, False, False,
            False, True, True, True, False, False, False,
            False, True, True, False, False, False, False,
            True, True, True, False, False, False, False,
        ),
        weekdays=(),
        notes="4-week DuPont rotation (simplified).",
    ),
}


def list_templates() -> list[PatternTemplateInfo]:
    """템플릿 목록 (Catalog descriptors in declaration order)."""
    return [
        PatternTemplateInfo(
            key=key,
            name=template.name,
            kind=template.kind,
            cycle_length=len(template.work_days) or None,
            notes=template.notes,
        )
        for key, template in _TEMPLATES.items()
    ]


def build_template(
    key: str,
    cycle_start_date: date | None = None,
    time_zone: str | None = None,
) -> PatternDefinition:
    """템플릿으로 패턴 정의를 생성합니다.

    Build a PatternDefinition from a catalog entry.

    Args:
        key: 템플릿 키 (Catalog key, see list_templates)
        cycle_start_date: 순환 시작일, 순환 패턴에 필수 (Cycle anchor, required for rotations)
        time_zone: IANA 시간대, 기본값 settings.DEFAULT_TIME_ZONE

    Raises:
        KeyError: 알 수 없는 키 (Unknown template key)
        pydantic.ValidationError: 순환 패턴인데 cycle_start_date가 없을 때
    """
    template = _TEMPLATES[key]
    return PatternDefinition(
        name=template.name,
        kind=template.kind,
        start_minute_of_day=template.start_minute_of_day,
        duration_minutes=template.duration_minutes,
        weekdays=template.weekdays,
        rotation_days=_rotation(template.work_days),
        cycle_start_date=cycle_start_date,
        time_zone=time_zone or settings.DEFAULT_TIME_ZONE,
        notes=template.notes,
    )

