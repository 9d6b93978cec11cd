"""날짜 계산 유틸리티 모듈.

Date arithmetic utility module.
Day iteration, month arithmetic, weekday naming and wall-clock placement of
minute-of-day offsets inside an IANA time zone.

Wall-clock semantics:
    Aware datetime + timedelta in Python keeps the tzinfo and adds to the
    local wall time, so "22:00 + 600 minutes" lands on 08:00 the next local
    day even across a DST change. Elapsed real time is measured separately
    by elapsed_minutes(), which compares UTC instants.
"""

import calendar
from datetime import date, datetime, time, timedelta, timezone
from functools import lru_cache
from typing import Iterator
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

MINUTES_PER_DAY: int = 24 * 60

# date.weekday() 순서 (월=0 ... 일=6): Index order matches date.weekday()
WEEKDAYS: tuple[str, ...] = (
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
    "sunday",
)


def weekday_name(day: date) -> str:
    """날짜의 요일 이름을 반환합니다 (Lower-case English weekday name)."""
    return WEEKDAYS[day.weekday()]


@lru_cache(maxsize=64)
def resolve_zone(name: str) -> ZoneInfo:
    """IANA 시간대 이름을 ZoneInfo로 변환합니다.

    Resolve an IANA zone name, raising ValueError for unknown names so that
    pydantic validators can report it as a validation error.
    """
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ValueError(f"Unknown time zone: {name!r}") from exc


def days_between(start: date, end: date) -> int:
    """두 날짜 사이의 일수 (Signed day count from start to end)."""
    return (end - start).days


def date_range(start: date, end: date) -> Iterator[date]:
    """start부터 end까지 (양끝 포함) 날짜를 순회합니다.

    Iterate days in the inclusive window [start, end]. Yields nothing when
    start > end.
    """
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def add_months(day: date, months: int) -> date:
    """월 단위 덧셈: 말일을 넘으면 해당 월의 마지막 날로 맞춥니다.

    Add calendar months, clamping the day-of-month (Jan 31 + 1 month -> Feb 28/29).
    """
    month_index = day.month - 1 + months
    year = day.year + month_index // 12
    month = month_index % 12 + 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(day.day, last_day))


def start_of_month(day: date) -> date:
    return day.replace(day=1)


def end_of_month(day: date) -> date:
    return day.replace(day=calendar.monthrange(day.year, day.month)[1])


def start_of_week(day: date, week_start: str = "monday") -> date:
    """day를 포함하는 주의 시작일 (First day of the week containing day)."""
    offset = (day.weekday() - WEEKDAYS.index(week_start)) % 7
    return day - timedelta(days=offset)


def local_midnight(day: date, zone: ZoneInfo) -> datetime:
    """해당 시간대의 자정 시각 (Aware 00:00 wall-clock time of day in zone)."""
    return datetime.combine(day, time(0, 0), tzinfo=zone)


def at_minute(day: date, minute_of_day: int, zone: ZoneInfo) -> datetime:
    """day의 자정에서 minute_of_day분 뒤의 벽시계 시각.

    Wall-clock instant minute_of_day minutes after local midnight of day.
    """
    return local_midnight(day, zone) + timedelta(minutes=minute_of_day)


def add_minutes(moment: datetime, minutes: int) -> datetime:
    """분 단위 덧셈 (벽시계 기준): Minute addition in wall-clock terms."""
    return moment + timedelta(minutes=minutes)


def elapsed_minutes(start: datetime, end: datetime) -> int:
    """두 시각 사이의 실제 경과 분 (Real elapsed whole minutes, may be negative).

    Both values are normalised to UTC first; subtracting aware datetimes that
    share a tzinfo object would otherwise compare wall-clock readings.
    """
    delta = end.astimezone(timezone.utc) - start.astimezone(timezone.utc)
    return int(delta.total_seconds() // 60)


def minute_of_day(moment: datetime) -> int:
    return moment.hour * 60 + moment.minute
