"""근무 시간/급여 집계 서비스.

Hours & Pay Aggregator: Sums shift instances into pay-period totals.
Always a full re-derivation from the shift set and ruleset; there is no
incremental path, so repeated calls over the same inputs are identical.

Policy:
    - 기간 필터: scheduled_start가 [period.starts_at, period.ends_at) 안
      (Half-open instant window; a shift starting exactly at ends_at belongs
      to the next period)
    - 분류: 선언 순서상 첫 번째로 일치하는 규칙 (First matching rule wins)
    - 급여: 라벨별 분을 정확한 유리수로 합산 후 마지막에 한 번만 반올림
      (Exact rational subtotals, banker's rounding once at the end)
    - 비정상 근무는 0으로 처리하고 진단만 남김: 배치를 중단하지 않음
      (Degenerate shifts contribute 0 plus a diagnostic; the batch never aborts)
"""

import logging
from collections import defaultdict
from datetime import date
from decimal import Decimal
from fractions import Fraction
from functools import lru_cache
from typing import Iterable, NamedTuple

from shiftpro.schemas.pay import (
    REGULAR_LABEL,
    DailyTotal,
    ExclusionReason,
    OvertimeForecast,
    PayPeriod,
    PayPeriodSummary,
    PayRuleset,
    RateBucket,
    RateMultiplierRule,
    ShiftDiagnostic,
    WarningLevel,
)
from shiftpro.schemas.shift import ShiftInstance
from shiftpro.utils.date_math import date_range, elapsed_minutes, minute_of_day, weekday_name

logger = logging.getLogger(__name__)


@lru_cache(maxsize=128)
def exact_multiplier(multiplier: float) -> Fraction:
    """배율의 10진 표기를 정확한 분수로 변환 (1.3 -> 13/10, not the binary float)."""
    return Fraction(Decimal(repr(multiplier)))


def _in_window(minute: int, window: tuple[int, int]) -> bool:
    start, end = window
    if start < end:
        return start <= minute < end
    # 자정을 넘는 구간 (Window wraps midnight, e.g. 22:00-06:00)
    return minute >= start or minute < end


class _Tally(NamedTuple):
    minutes_by_label: dict[str | None, int]
    minutes_by_day: dict[date, int]
    shift_count: int
    excluded: tuple[ShiftDiagnostic, ...]


class HoursAggregator:
    """근무 시간/급여 집계기.

    Stateless aggregator. Every operation takes the ruleset explicitly.
    """

    def break_minutes(self, shift: ShiftInstance, ruleset: PayRuleset) -> int:
        """근무에 지정된 휴게, 없으면 규칙 기본값 (Shift's own break, else the ruleset default)."""
        if shift.break_minutes is not None:
            return shift.break_minutes
        return ruleset.unpaid_break_minutes

    def paid_minutes(self, shift: ShiftInstance, ruleset: PayRuleset) -> int:
        """유급 분 = 실효 근무 분 - 무급 휴게, 0 이상.

        Paid minutes: effective end minus effective start (actual times when
        both are present, else scheduled), minus the unpaid break, clamped
        to >= 0.
        """
        worked = elapsed_minutes(shift.effective_start, shift.effective_end)
        return max(0, worked - self.break_minutes(shift, ruleset))

    def exclusion_reason(self, shift: ShiftInstance, ruleset: PayRuleset) -> ExclusionReason | None:
        if shift.status == "cancelled":
            return "cancelled"
        worked = elapsed_minutes(shift.effective_start, shift.effective_end)
        if worked <= 0:
            return "non_positive_duration"
        if worked - self.break_minutes(shift, ruleset) <= 0:
            return "break_exceeds_duration"
        return None

    def rule_applies(self, rule: RateMultiplierRule, shift: ShiftInstance, ruleset: PayRuleset) -> bool:
        """규칙 적용 여부: 명시적 태그 또는 정의된 조건 전부 충족.

        A rule applies when the shift is tagged with its label, or when the
        rule defines at least one condition and all defined conditions hold.
        """
        if shift.rate_label == rule.label:
            return True
        if not rule.has_conditions:
            return False
        if rule.weekdays and weekday_name(shift.date) not in rule.weekdays:
            return False
        if rule.start_window is not None and not _in_window(minute_of_day(shift.scheduled_start), rule.start_window):
            return False
        if rule.dates and shift.date not in rule.dates:
            return False
        if rule.min_duration_minutes is not None and self.paid_minutes(shift, ruleset) < rule.min_duration_minutes:
            return False
        if rule.additional_shift is not None and shift.is_additional_shift != rule.additional_shift:
            return False
        return True

    def classify(self, shift: ShiftInstance, ruleset: PayRuleset) -> RateMultiplierRule | None:
        """적용할 할증 규칙: 선언 순서상 첫 번째 일치, 없으면 None (배율 1.0).

        Resolve the rate rule for a shift: first match in declaration order;
        None means multiplier 1.0 with no label.
        """
        for rule in ruleset.rules:
            if self.rule_applies(rule, shift, ruleset):
                return rule
        return None

    def _tally(self, shifts: Iterable[ShiftInstance], period: PayPeriod, ruleset: PayRuleset) -> _Tally:
        minutes_by_label: dict[str | None, int] = defaultdict(int)
        minutes_by_day: dict[date, int] = defaultdict(int)
        shift_count = 0
        excluded: list[ShiftDiagnostic] = []
        zone = period.zone

        for shift in shifts:
            if not period.contains(shift.scheduled_start):
                continue

            reason = self.exclusion_reason(shift, ruleset)
            if reason is not None:
                if reason != "cancelled":
                    logger.warning(
                        "Shift %s %s (%s -> %s) contributes 0 paid minutes: %s",
                        shift.date, shift.title, shift.scheduled_start, shift.scheduled_end, reason,
                    )
                excluded.append(ShiftDiagnostic(
                    date=shift.date,
                    title=shift.title,
                    scheduled_start=shift.scheduled_start,
                    scheduled_end=shift.scheduled_end,
                    reason=reason,
                ))
                continue

            minutes = self.paid_minutes(shift, ruleset)
            rule = self.classify(shift, ruleset)
            minutes_by_label[rule.label if rule is not None else None] += minutes
            minutes_by_day[shift.scheduled_start.astimezone(zone).date()] += minutes
            shift_count += 1

        return _Tally(dict(minutes_by_label), dict(minutes_by_day), shift_count, tuple(excluded))

    @staticmethod
    def _pay(minutes: int, base_rate_cents: int, multiplier: Fraction) -> Fraction:
        return Fraction(minutes, 60) * base_rate_cents * multiplier

    def aggregate(
        self,
        shifts: Iterable[ShiftInstance],
        period: PayPeriod,
        ruleset: PayRuleset,
    ) -> PayPeriodSummary:
        """기간 집계를 계산합니다.

        Compute paid/premium minute totals and estimated pay for the shifts
        anchored inside the period.

        Args:
            shifts: 근무 목록, 순서 무관 (Shift instances in any order)
            period: 집계 기간 (Pay period)
            ruleset: 급여 규칙 (Pay ruleset)

        Returns:
            PayPeriodSummary: 집계 결과 (Computed summary)
        """
        tally = self._tally(shifts, period, ruleset)
        multipliers = {rule.label: exact_multiplier(rule.multiplier) for rule in ruleset.rules}

        total = Fraction(0)
        for label, minutes in tally.minutes_by_label.items():
            multiplier = multipliers[label] if label is not None else Fraction(1)
            total += self._pay(minutes, ruleset.base_rate_cents, multiplier)

        premium = {
            rule.label: tally.minutes_by_label[rule.label]
            for rule in ruleset.rules
            if rule.label in tally.minutes_by_label
        }
        return PayPeriodSummary(
            period=period,
            paid_minutes=sum(tally.minutes_by_label.values()),
            regular_minutes=tally.minutes_by_label.get(None, 0),
            premium_minutes_by_label=premium,
            # round()은 Fraction에 대해 round-half-to-even (banker's rounding on Fraction)
            estimated_pay_cents=round(total),
            shift_count=tally.shift_count,
            excluded=tally.excluded,
        )

    def daily_totals(
        self,
        shifts: Iterable[ShiftInstance],
        period: PayPeriod,
        ruleset: PayRuleset,
    ) -> list[DailyTotal]:
        """기간 내 일별 유급 분: 근무가 없는 날은 0 (Every day of the period, zero when idle)."""
        by_day = self._tally(shifts, period, ruleset).minutes_by_day
        return [
            DailyTotal(date=day, minutes=by_day.get(day, 0))
            for day in date_range(period.start_date, period.end_date)
        ]

    def rate_breakdown(
        self,
        shifts: Iterable[ShiftInstance],
        period: PayPeriod,
        ruleset: PayRuleset,
    ) -> list[RateBucket]:
        """할증 라벨별 분해: 표시용 (Display-only per-rate buckets).

        Unlabeled minutes appear under REGULAR_LABEL at 1.0, merged with a
        rule of the same label and multiplier. Buckets are sorted by
        multiplier, then label. Per-bucket pay is rounded for display; the
        authoritative total is PayPeriodSummary.estimated_pay_cents.
        """
        tally = self._tally(shifts, period, ruleset)
        rules = {rule.label: rule for rule in ruleset.rules}

        merged: dict[tuple[str, float], int] = defaultdict(int)
        for label, minutes in tally.minutes_by_label.items():
            if label is None:
                merged[(REGULAR_LABEL, 1.0)] += minutes
            else:
                merged[(label, rules[label].multiplier)] += minutes

        buckets = [
            RateBucket(
                label=label,
                multiplier=multiplier,
                minutes=minutes,
                pay_cents=round(self._pay(minutes, ruleset.base_rate_cents, exact_multiplier(multiplier))),
            )
            for (label, multiplier), minutes in merged.items()
        ]
        return sorted(buckets, key=lambda bucket: (bucket.multiplier, bucket.label))

    def predict_overtime(
        self,
        summary: PayPeriodSummary,
        as_of: date,
        target_hours: int = 80,
        warning_hours: float = 35.0,
        critical_hours: float = 40.0,
    ) -> OvertimeForecast:
        """현재 속도로 기간 말 유급 시간 예측.

        Projects the period's paid hours from the average over the days
        elapsed by `as_of` (at least one), then grades the result:

            - exceeded: current >= target
            - critical: current >= critical_hours, or projected >= target
            - warning: current >= warning_hours, or projected >= critical_hours
            - approaching: current reaches 80% of warning_hours
            - none: otherwise

        An `as_of` outside the period yields a flat forecast at level none.

        Args:
            summary: 기간 집계 결과 (Aggregated period)
            as_of: 기준 날짜 (Day the forecast is made on)
            target_hours: 목표 시간 (Period target)
            warning_hours: 경고 임계 (Warning threshold)
            critical_hours: 위험 임계 (Critical threshold)
        """
        period = summary.period
        current = summary.paid_hours

        if not (period.start_date <= as_of <= period.end_date):
            message = "Period complete" if as_of > period.end_date else "Period not started"
            return OvertimeForecast(
                current_hours=current,
                projected_hours=current,
                target_hours=target_hours,
                days_remaining=0,
                average_hours_per_day=0.0,
                level="none",
                message=message,
            )

        days_elapsed = max(1, (as_of - period.start_date).days)
        days_remaining = max(0, period.duration_days - days_elapsed)
        average = current / days_elapsed
        projected = current + average * days_remaining

        if current >= target_hours:
            level = "exceeded"
        elif current >= critical_hours or projected >= target_hours:
            level = "critical"
        elif current >= warning_hours or projected >= critical_hours:
            level = "warning"
        elif current / warning_hours >= 0.8:
            level = "approaching"
        else:
            level = "none"

        recommended = max(0.0, target_hours - current) / days_remaining if days_remaining > 0 else None
        logger.debug("Overtime forecast %s..%s as of %s: %s", period.start_date, period.end_date, as_of, level)
        return OvertimeForecast(
            current_hours=current,
            projected_hours=projected,
            target_hours=target_hours,
            days_remaining=days_remaining,
            average_hours_per_day=average,
            level=level,
            message=self._forecast_message(level, current, projected, target_hours),
            recommended_daily_hours=recommended,
        )

    @staticmethod
    def _forecast_message(level: WarningLevel, current: float, projected: float, target: int) -> str:
        excess = projected - target
        if level == "exceeded":
            return f"Target exceeded by {current - target:.1f} hours."
        if level == "critical":
            return f"Critical: On pace to exceed target by {excess:.1f} hours."
        if level == "warning":
            return f"Warning: Projected to work {excess:.1f} hours over target."
        if level == "approaching":
            return f"Approaching target. {target - current:.1f} hours remaining."
        return f"You're on track. Projected: {projected:.1f} hours."


hours_aggregator: HoursAggregator = HoursAggregator()
