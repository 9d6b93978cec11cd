"""테스트 인프라: httpx 클라이언트 및 공통 스키마 픽스처.

Test infrastructure: httpx client over ASGITransport plus shared pattern,
ruleset and shift builders. The API is stateless, so no database or
per-test cleanup is needed.
"""

from collections.abc import AsyncGenerator
from datetime import date, datetime, timedelta, timezone

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from shiftpro.main import app
from shiftpro.schemas.pattern import PatternDefinition, RotationDay
from shiftpro.schemas.pay import PayPeriod, PayRuleset, RateMultiplierRule
from shiftpro.schemas.shift import ShiftInstance


@pytest_asyncio.fixture
async def client() -> AsyncGenerator[AsyncClient, None]:
    """FastAPI 테스트 클라이언트."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


# ---------------------------------------------------------------------------
# 헬퍼: 테스트용 데이터 생성
# ---------------------------------------------------------------------------
def utc(year: int, month: int, day: int, hour: int = 0, minute: int = 0) -> datetime:
    return datetime(year, month, day, hour, minute, tzinfo=timezone.utc)


def make_shift(
    start: datetime,
    minutes: int,
    title: str = "Shift",
    **fields,
) -> ShiftInstance:
    """start부터 minutes분 동안의 근무를 만듭니다."""
    return ShiftInstance(
        date=start.date(),
        title=title,
        scheduled_start=start,
        scheduled_end=start + timedelta(minutes=minutes),
        **fields,
    )


def four_on_four_off(cycle_start: date, time_zone: str = "UTC") -> PatternDefinition:
    """07:00-19:00 4일 근무 / 4일 휴무 순환."""
    return PatternDefinition(
        id="pattern-4on4off",
        name="Day",
        kind="rotating",
        start_minute_of_day=7 * 60,
        duration_minutes=12 * 60,
        rotation_days=tuple(
            RotationDay.work_day(index) if index < 4 else RotationDay.off_day(index)
            for index in range(8)
        ),
        cycle_start_date=cycle_start,
        time_zone=time_zone,
    )


@pytest.fixture
def weekly_pattern() -> PatternDefinition:
    """월/수 09:00-17:00 주간 패턴."""
    return PatternDefinition(
        id="pattern-weekly",
        name="Office",
        kind="weekly",
        start_minute_of_day=9 * 60,
        duration_minutes=8 * 60,
        weekdays=("monday", "wednesday"),
    )


@pytest.fixture
def hourly_ruleset() -> PayRuleset:
    """시급 2000센트, 휴게 공제 없음, 태그 기반 할증."""
    return PayRuleset(
        name="Test",
        base_rate_cents=2000,
        unpaid_break_minutes=0,
        rules=(
            RateMultiplierRule(label="Overtime", multiplier=1.5),
            RateMultiplierRule(label="Holiday", multiplier=2.0),
        ),
        period_type="weekly",
    )


@pytest.fixture
def january_week() -> PayPeriod:
    """2026-01-05(월) ~ 2026-01-11(일), UTC."""
    return PayPeriod(start_date=date(2026, 1, 5), end_date=date(2026, 1, 11), time_zone="UTC")
