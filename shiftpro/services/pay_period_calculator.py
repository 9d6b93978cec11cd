"""급여 기간 계산 서비스.

Pay period calculator: resolves the weekly, biweekly or monthly period
containing a given day.

Biweekly anchor:
    격주 기간은 호출자가 제공한 기준일(reference_date)로부터 14일 단위로
    나눕니다. ISO 주차의 홀짝으로 추정하지 않습니다.
    Biweekly periods are 14-day blocks counted from a caller-supplied
    reference date, using floor division so days before the reference fall
    into earlier blocks. The anchor is never inferred from ISO week parity.
"""

from datetime import date, timedelta

from shiftpro.config import settings
from shiftpro.schemas.pay import PayPeriod, PayPeriodType, PayRuleset
from shiftpro.utils.date_math import days_between, end_of_month, start_of_month, start_of_week

BIWEEKLY_DAYS: int = 14


class PayPeriodCalculator:
    """급여 기간 계산기 (Stateless period boundary resolver)."""

    def period_for(
        self,
        day: date,
        period_type: PayPeriodType,
        reference_date: date | None = None,
        week_start: str = "monday",
        time_zone: str | None = None,
    ) -> PayPeriod:
        """day를 포함하는 급여 기간을 반환합니다.

        Return the pay period of the given type that contains day.

        Args:
            day: 대상 날짜 (Day to locate)
            period_type: weekly/biweekly/monthly
            reference_date: 격주 기준일, biweekly에 필수 (Biweekly anchor, required for biweekly)
            week_start: 주 시작 요일 (First weekday of a weekly period)
            time_zone: 기간 시간대, 기본값 settings.DEFAULT_TIME_ZONE

        Raises:
            ValueError: biweekly인데 reference_date가 없을 때 (Biweekly without an anchor)
        """
        zone = time_zone or settings.DEFAULT_TIME_ZONE

        if period_type == "weekly":
            start = start_of_week(day, week_start)
            return PayPeriod(start_date=start, end_date=start + timedelta(days=6), time_zone=zone)

        if period_type == "biweekly":
            if reference_date is None:
                raise ValueError("Biweekly pay periods require a reference_date")
            index = days_between(reference_date, day) // BIWEEKLY_DAYS
            start = reference_date + timedelta(days=index * BIWEEKLY_DAYS)
            return PayPeriod(
                start_date=start,
                end_date=start + timedelta(days=BIWEEKLY_DAYS - 1),
                time_zone=zone,
            )

        return PayPeriod(start_date=start_of_month(day), end_date=end_of_month(day), time_zone=zone)

    def period_for_ruleset(self, day: date, ruleset: PayRuleset, time_zone: str | None = None) -> PayPeriod:
        return self.period_for(
            day,
            ruleset.period_type,
            reference_date=ruleset.period_reference_date,
            week_start=ruleset.week_start,
            time_zone=time_zone,
        )

    def periods_between(
        self,
        from_date: date,
        to_date: date,
        period_type: PayPeriodType,
        reference_date: date | None = None,
        week_start: str = "monday",
        time_zone: str | None = None,
    ) -> list[PayPeriod]:
        """[from_date, to_date]를 덮는 연속된 기간 목록 (Consecutive non-overlapping periods)."""
        periods: list[PayPeriod] = []
        cursor = from_date
        while cursor <= to_date:
            period = self.period_for(cursor, period_type, reference_date, week_start, time_zone)
            periods.append(period)
            cursor = period.end_date + timedelta(days=1)
        return periods


pay_period_calculator: PayPeriodCalculator = PayPeriodCalculator()
