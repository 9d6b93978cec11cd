"""근무 시간/급여 집계 테스트.

Hours & pay aggregation tests: exact pay arithmetic, half-open period
boundaries, rule classification order, degenerate shift handling, and
daily/per-rate breakdowns.
"""

from datetime import date, datetime, timedelta
from fractions import Fraction
from zoneinfo import ZoneInfo

import pytest
from pydantic import ValidationError

from shiftpro.schemas.pay import PayPeriod, PayRuleset, RateMultiplierRule
from shiftpro.services.hours_aggregator import REGULAR_LABEL, exact_multiplier, hours_aggregator
from tests.conftest import make_shift, utc


# ===== Pay arithmetic =====

class TestPayArithmetic:
    """급여 계산 정확도 테스트."""

    def test_tagged_overtime_shift(self, hourly_ruleset, january_week):
        """8시간 x 2000센트 x 1.5 = 24000."""
        shift = make_shift(utc(2026, 1, 6, 9), 480, rate_label="Overtime", break_minutes=0)
        summary = hours_aggregator.aggregate([shift], january_week, hourly_ruleset)
        assert summary.paid_minutes == 480
        assert summary.premium_minutes_by_label == {"Overtime": 480}
        assert summary.regular_minutes == 0
        assert summary.estimated_pay_cents == 24000
        assert summary.paid_hours == 8.0

    def test_fractional_cents_round_once(self, hourly_ruleset, january_week):
        """20분 x 2000센트 = 666.67 -> 667."""
        shift = make_shift(utc(2026, 1, 6, 9), 20, break_minutes=0)
        summary = hours_aggregator.aggregate([shift], january_week, hourly_ruleset)
        assert summary.estimated_pay_cents == 667

    def test_no_per_shift_rounding_drift(self, hourly_ruleset, january_week):
        """20분 근무 3건은 순서와 무관하게 정확히 2000."""
        shifts = [make_shift(utc(2026, 1, day, 9), 20, break_minutes=0) for day in (6, 7, 8)]
        forward = hours_aggregator.aggregate(shifts, january_week, hourly_ruleset)
        backward = hours_aggregator.aggregate(list(reversed(shifts)), january_week, hourly_ruleset)
        assert forward.estimated_pay_cents == backward.estimated_pay_cents == 2000
        assert forward == backward

    def test_half_cent_rounds_to_even(self, january_week):
        """0.5센트는 짝수 방향으로 반올림."""
        ruleset = PayRuleset(base_rate_cents=30, unpaid_break_minutes=0, period_type="weekly")
        one = hours_aggregator.aggregate([make_shift(utc(2026, 1, 6, 9), 1)], january_week, ruleset)
        three = hours_aggregator.aggregate([make_shift(utc(2026, 1, 6, 9), 3)], january_week, ruleset)
        five = hours_aggregator.aggregate([make_shift(utc(2026, 1, 6, 9), 5)], january_week, ruleset)
        assert (one.estimated_pay_cents, three.estimated_pay_cents, five.estimated_pay_cents) == (0, 2, 2)

    def test_decimal_multiplier_is_exact(self):
        """1.3배는 정확히 13/10."""
        assert exact_multiplier(1.3) == Fraction(13, 10)
        assert exact_multiplier(1.5) == Fraction(3, 2)

    def test_default_break_from_ruleset(self, january_week):
        """근무에 휴게가 없으면 규칙 기본값 공제."""
        ruleset = PayRuleset(base_rate_cents=1200, unpaid_break_minutes=30, period_type="weekly")
        summary = hours_aggregator.aggregate([make_shift(utc(2026, 1, 6, 9), 480)], january_week, ruleset)
        assert summary.paid_minutes == 450
        assert summary.estimated_pay_cents == 9000

    def test_actual_times_override_scheduled(self, hourly_ruleset, january_week):
        """실제 출퇴근이 모두 있으면 실제 시각 사용."""
        shift = make_shift(
            utc(2026, 1, 6, 9), 480, break_minutes=0,
            actual_start=utc(2026, 1, 6, 9), actual_end=utc(2026, 1, 6, 19),
        )
        partial = make_shift(utc(2026, 1, 7, 9), 480, break_minutes=0, actual_start=utc(2026, 1, 7, 8))
        assert hours_aggregator.paid_minutes(shift, hourly_ruleset) == 600
        assert hours_aggregator.paid_minutes(partial, hourly_ruleset) == 480


# ===== Period boundaries =====

class TestPeriodBoundaries:
    """기간 경계 테스트."""

    def test_half_open_window(self, hourly_ruleset, january_week):
        """종료 경계 시각에 시작하는 근무는 다음 기간."""
        shifts = [
            make_shift(utc(2026, 1, 5, 0), 60, break_minutes=0),
            make_shift(utc(2026, 1, 11, 23, 59), 60, break_minutes=0),
            make_shift(utc(2026, 1, 12, 0), 60, break_minutes=0),
            make_shift(utc(2026, 1, 4, 23, 0), 120, break_minutes=0),
        ]
        summary = hours_aggregator.aggregate(shifts, january_week, hourly_ruleset)
        assert summary.shift_count == 2
        assert summary.paid_minutes == 120

    def test_boundary_shift_counted_exactly_once(self, hourly_ruleset, january_week):
        """경계 시각 근무는 앞 기간 0건, 다음 기간 1건."""
        following = PayPeriod(start_date=date(2026, 1, 12), end_date=date(2026, 1, 18), time_zone="UTC")
        shift = make_shift(january_week.ends_at, 60, break_minutes=0)
        assert following.starts_at == january_week.ends_at
        before = hours_aggregator.aggregate([shift], january_week, hourly_ruleset)
        after = hours_aggregator.aggregate([shift], following, hourly_ruleset)
        assert (before.shift_count, after.shift_count) == (0, 1)
        assert (before.paid_minutes, after.paid_minutes) == (0, 60)

    def test_anchor_is_scheduled_start_instant(self, hourly_ruleset, january_week):
        """다른 시간대의 근무도 시작 순간 기준으로 필터."""
        seoul = ZoneInfo("Asia/Seoul")
        inside = make_shift(datetime(2026, 1, 12, 8, 0, tzinfo=seoul), 60, break_minutes=0)
        outside = make_shift(datetime(2026, 1, 12, 9, 0, tzinfo=seoul), 60, break_minutes=0)
        summary = hours_aggregator.aggregate([inside, outside], january_week, hourly_ruleset)
        assert summary.shift_count == 1


# ===== Classification =====

class TestClassification:
    """할증 규칙 분류 테스트."""

    def test_first_matching_rule_wins(self, january_week):
        """선언 순서상 첫 번째 일치 규칙."""
        ruleset = PayRuleset(
            base_rate_cents=1000,
            unpaid_break_minutes=0,
            rules=(
                RateMultiplierRule(label="Weekend", multiplier=1.5, weekdays=("saturday", "sunday")),
                RateMultiplierRule(label="Holiday", multiplier=2.0),
            ),
        )
        shift = make_shift(utc(2026, 1, 10, 9), 60, rate_label="Holiday")
        assert hours_aggregator.classify(shift, ruleset).label == "Weekend"
        summary = hours_aggregator.aggregate([shift], january_week, ruleset)
        assert summary.premium_minutes_by_label == {"Weekend": 60}
        assert summary.estimated_pay_cents == 1500

    def test_unmatched_is_regular(self, hourly_ruleset, january_week):
        """일치 규칙 없음 -> 기본 배율."""
        shift = make_shift(utc(2026, 1, 6, 9), 60, break_minutes=0)
        assert hours_aggregator.classify(shift, hourly_ruleset) is None
        summary = hours_aggregator.aggregate([shift], january_week, hourly_ruleset)
        assert summary.regular_minutes == 60
        assert summary.premium_minutes_by_label == {}

    def test_rule_without_conditions_needs_tag(self, hourly_ruleset):
        """조건 없는 규칙은 태그로만 적용."""
        tagged = make_shift(utc(2026, 1, 6, 9), 60, rate_label="Holiday")
        untagged = make_shift(utc(2026, 1, 6, 9), 60)
        assert hours_aggregator.classify(tagged, hourly_ruleset).label == "Holiday"
        assert hours_aggregator.classify(untagged, hourly_ruleset) is None

    def test_start_window_wraps_midnight(self):
        """22:00-06:00 야간 구간."""
        night = RateMultiplierRule(label="Night", multiplier=1.25, start_window=(22 * 60, 6 * 60))
        ruleset = PayRuleset(base_rate_cents=1000, rules=(night,))
        assert hours_aggregator.rule_applies(night, make_shift(utc(2026, 1, 6, 23), 60), ruleset)
        assert hours_aggregator.rule_applies(night, make_shift(utc(2026, 1, 6, 2), 60), ruleset)
        assert not hours_aggregator.rule_applies(night, make_shift(utc(2026, 1, 6, 12), 60), ruleset)

    def test_all_defined_conditions_must_hold(self):
        """정의된 조건은 모두 충족해야 함."""
        rule = RateMultiplierRule(
            label="Long extra", multiplier=1.5, min_duration_minutes=600, additional_shift=True,
        )
        ruleset = PayRuleset(base_rate_cents=1000, unpaid_break_minutes=0, rules=(rule,))
        long_extra = make_shift(utc(2026, 1, 6, 7), 720, is_additional_shift=True)
        long_regular = make_shift(utc(2026, 1, 6, 7), 720)
        short_extra = make_shift(utc(2026, 1, 6, 7), 300, is_additional_shift=True)
        assert hours_aggregator.rule_applies(rule, long_extra, ruleset)
        assert not hours_aggregator.rule_applies(rule, long_regular, ruleset)
        assert not hours_aggregator.rule_applies(rule, short_extra, ruleset)

    def test_date_condition(self):
        """지정 날짜(공휴일) 조건."""
        rule = RateMultiplierRule(label="Bank Holiday", multiplier=2.0, dates=(date(2026, 1, 1),))
        ruleset = PayRuleset(base_rate_cents=1000, rules=(rule,))
        assert hours_aggregator.rule_applies(rule, make_shift(utc(2026, 1, 1, 9), 60), ruleset)
        assert not hours_aggregator.rule_applies(rule, make_shift(utc(2026, 1, 2, 9), 60), ruleset)

    def test_premium_labels_follow_rule_order(self, hourly_ruleset, january_week):
        """라벨별 분은 규칙 선언 순서."""
        shifts = [
            make_shift(utc(2026, 1, 6, 9), 60, rate_label="Holiday", break_minutes=0),
            make_shift(utc(2026, 1, 7, 9), 30, rate_label="Overtime", break_minutes=0),
        ]
        summary = hours_aggregator.aggregate(shifts, january_week, hourly_ruleset)
        assert list(summary.premium_minutes_by_label) == ["Overtime", "Holiday"]

    def test_standard_ruleset_tags(self, january_week):
        """표준 규칙: 1.3배 초과근무 태그."""
        ruleset = PayRuleset.standard_shift_worker(base_rate_cents=1000)
        shift = make_shift(utc(2026, 1, 6, 9), 90, rate_label="Overtime (1.3x)")
        summary = hours_aggregator.aggregate([shift], january_week, ruleset)
        assert summary.paid_minutes == 60
        assert summary.estimated_pay_cents == 1300


# ===== Degenerate shifts =====

class TestExcludedShifts:
    """비정상/취소 근무 처리 테스트."""

    def test_batch_continues_with_diagnostics(self, hourly_ruleset, january_week):
        """비정상 근무는 0분 + 진단, 나머지는 정상 집계."""
        good = make_shift(utc(2026, 1, 6, 9), 60, break_minutes=0)
        cancelled = make_shift(utc(2026, 1, 7, 9), 60, status="cancelled")
        inverted = make_shift(utc(2026, 1, 8, 9), -60)
        long_break = make_shift(utc(2026, 1, 9, 9), 30, break_minutes=60)

        summary = hours_aggregator.aggregate([good, cancelled, inverted, long_break], january_week, hourly_ruleset)

        assert summary.shift_count == 1
        assert summary.paid_minutes == 60
        assert summary.estimated_pay_cents == 2000
        assert [(d.date, d.reason) for d in summary.excluded] == [
            (date(2026, 1, 7), "cancelled"),
            (date(2026, 1, 8), "non_positive_duration"),
            (date(2026, 1, 9), "break_exceeds_duration"),
        ]

    def test_degenerate_shift_logged(self, hourly_ruleset, january_week, caplog):
        """비정상 근무는 경고 로그."""
        with caplog.at_level("WARNING", logger="shiftpro.services.hours_aggregator"):
            hours_aggregator.aggregate([make_shift(utc(2026, 1, 8, 9), 0)], january_week, hourly_ruleset)
        assert "non_positive_duration" in caplog.text

    def test_empty_input(self, hourly_ruleset, january_week):
        """근무가 없으면 0."""
        summary = hours_aggregator.aggregate([], january_week, hourly_ruleset)
        assert (summary.paid_minutes, summary.estimated_pay_cents, summary.shift_count) == (0, 0, 0)


# ===== Breakdowns =====

class TestBreakdowns:
    """일별/할증별 분해 테스트."""

    def test_daily_totals_cover_every_day(self, hourly_ruleset, january_week):
        """기간의 모든 날짜 포함, 근무 없는 날은 0."""
        shifts = [
            make_shift(utc(2026, 1, 6, 9), 60, break_minutes=0),
            make_shift(utc(2026, 1, 6, 18), 30, break_minutes=0),
            make_shift(utc(2026, 1, 9, 22), 600, break_minutes=0),
        ]
        totals = hours_aggregator.daily_totals(shifts, january_week, hourly_ruleset)
        assert [total.date for total in totals] == [date(2026, 1, 5) + timedelta(days=i) for i in range(7)]
        by_day = {total.date: total.minutes for total in totals}
        assert by_day[date(2026, 1, 6)] == 90
        assert by_day[date(2026, 1, 9)] == 600
        assert by_day[date(2026, 1, 10)] == 0
        assert sum(by_day.values()) == hours_aggregator.aggregate(shifts, january_week, hourly_ruleset).paid_minutes

    def test_rate_breakdown_sorted_by_multiplier(self, hourly_ruleset, january_week):
        """배율 순 정렬, 라벨 없는 분은 Regular."""
        shifts = [
            make_shift(utc(2026, 1, 6, 9), 60, rate_label="Holiday", break_minutes=0),
            make_shift(utc(2026, 1, 7, 9), 60, break_minutes=0),
            make_shift(utc(2026, 1, 8, 9), 60, rate_label="Overtime", break_minutes=0),
        ]
        buckets = hours_aggregator.rate_breakdown(shifts, january_week, hourly_ruleset)
        assert [(b.label, b.multiplier, b.minutes, b.pay_cents) for b in buckets] == [
            (REGULAR_LABEL, 1.0, 60, 2000),
            ("Overtime", 1.5, 60, 3000),
            ("Holiday", 2.0, 60, 4000),
        ]

    def test_regular_rule_merges_with_unlabeled(self, january_week):
        """같은 라벨/배율의 Regular 규칙과 라벨 없는 분은 합쳐짐."""
        ruleset = PayRuleset.simple_hourly(base_rate_cents=1000)
        shifts = [
            make_shift(utc(2026, 1, 6, 9), 60, rate_label="Regular"),
            make_shift(utc(2026, 1, 7, 9), 60),
        ]
        buckets = hours_aggregator.rate_breakdown(shifts, january_week, ruleset)
        assert [(b.label, b.minutes) for b in buckets] == [("Regular", 120)]


# ===== Ruleset validation =====

class TestRulesetValidation:
    """급여 규칙 검증 테스트."""

    @pytest.mark.parametrize("multiplier", [float("inf"), float("-inf"), float("nan"), 0, -1.5])
    def test_non_finite_or_non_positive_multiplier(self, multiplier):
        """무한대/NaN/0 이하 배율은 생성 시 실패."""
        with pytest.raises(ValidationError):
            RateMultiplierRule(label="X", multiplier=multiplier)

    def test_regular_label_requires_unit_multiplier(self):
        """Regular 라벨 규칙은 1.0배만 허용."""
        with pytest.raises(ValidationError):
            PayRuleset(base_rate_cents=1000, rules=(RateMultiplierRule(label=REGULAR_LABEL, multiplier=1.5),))
        ruleset = PayRuleset(base_rate_cents=1000, rules=(RateMultiplierRule(label=REGULAR_LABEL, multiplier=1.0),))
        assert ruleset.rules[0].label == "Regular"

    def test_duplicate_labels(self):
        """중복 라벨 실패."""
        with pytest.raises(ValidationError):
            PayRuleset(
                base_rate_cents=1000,
                rules=(
                    RateMultiplierRule(label="Night", multiplier=1.2),
                    RateMultiplierRule(label="Night", multiplier=1.4),
                ),
            )


# ===== Overtime forecast =====

@pytest.fixture
def fortnight() -> PayPeriod:
    return PayPeriod(start_date=date(2026, 1, 5), end_date=date(2026, 1, 18), time_zone="UTC")


def _hours(ruleset: PayRuleset, period: PayPeriod, *lengths: int):
    """1월 5일부터 하루 한 건씩 lengths시간 근무를 집계."""
    shifts = [
        make_shift(utc(2026, 1, 5, 6) + timedelta(days=offset), hours * 60, break_minutes=0)
        for offset, hours in enumerate(lengths)
    ]
    return hours_aggregator.aggregate(shifts, period, ruleset)


class TestOvertimeForecast:
    """초과근무 예측 테스트."""

    def test_on_track(self, hourly_ruleset, fortnight):
        """평균 속도로 임계 미만이면 none."""
        forecast = hours_aggregator.predict_overtime(_hours(hourly_ruleset, fortnight, 8), date(2026, 1, 8))
        assert forecast.current_hours == 8.0
        assert forecast.days_remaining == 11
        assert forecast.average_hours_per_day == pytest.approx(8 / 3)
        assert forecast.projected_hours == pytest.approx(8 + 8 / 3 * 11)
        assert forecast.level == "none"
        assert forecast.recommended_daily_hours == pytest.approx(72 / 11)
        assert forecast.message == "You're on track. Projected: 37.3 hours."

    def test_approaching(self, hourly_ruleset, fortnight):
        """경고 임계의 80% 도달."""
        summary = _hours(hourly_ruleset, fortnight, 7, 7, 7, 7)
        forecast = hours_aggregator.predict_overtime(summary, date(2026, 1, 18))
        assert forecast.current_hours == 28.0
        assert forecast.days_remaining == 1
        assert forecast.level == "approaching"
        assert forecast.message == "Approaching target. 52.0 hours remaining."

    def test_warning(self, hourly_ruleset, fortnight):
        """경고 임계 이상."""
        forecast = hours_aggregator.predict_overtime(_hours(hourly_ruleset, fortnight, 12, 12, 12), date(2026, 1, 18))
        assert forecast.current_hours == 36.0
        assert forecast.level == "warning"

    def test_critical_by_projection(self, hourly_ruleset, fortnight):
        """예상 시간이 목표 이상이면 critical."""
        forecast = hours_aggregator.predict_overtime(
            _hours(hourly_ruleset, fortnight, 10, 10), date(2026, 1, 7), target_hours=40,
        )
        assert forecast.projected_hours == pytest.approx(140.0)
        assert forecast.level == "critical"
        assert forecast.recommended_daily_hours == pytest.approx(20 / 12)

    def test_exceeded(self, hourly_ruleset, fortnight):
        """현재 시간이 목표 이상."""
        forecast = hours_aggregator.predict_overtime(
            _hours(hourly_ruleset, fortnight, 12, 12), date(2026, 1, 10), target_hours=20,
        )
        assert forecast.level == "exceeded"
        assert forecast.message == "Target exceeded by 4.0 hours."

    def test_first_day_counts_as_one_elapsed(self, hourly_ruleset, fortnight):
        """시작일 당일은 경과 1일."""
        forecast = hours_aggregator.predict_overtime(_hours(hourly_ruleset, fortnight, 6), date(2026, 1, 5))
        assert forecast.days_remaining == 13
        assert forecast.average_hours_per_day == 6.0

    def test_outside_period_is_flat(self, hourly_ruleset, fortnight):
        """기간 밖 기준일은 평탄 예측."""
        summary = _hours(hourly_ruleset, fortnight, 12, 12, 12, 12)
        after = hours_aggregator.predict_overtime(summary, date(2026, 1, 19), target_hours=20)
        assert (after.level, after.message, after.days_remaining) == ("none", "Period complete", 0)
        assert after.projected_hours == after.current_hours == 48.0
        assert after.recommended_daily_hours is None
        before = hours_aggregator.predict_overtime(summary, date(2026, 1, 4))
        assert before.message == "Period not started"
