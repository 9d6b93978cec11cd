"""급여 라우터: 기간 집계, 분해, 초과근무 예측, 급여 기간 조회 엔드포인트.

Pay Router: Period aggregation, breakdown, overtime forecast and pay
period lookup endpoints. The ruleset travels with every request; nothing
is read from server-side state.
"""

from fastapi import APIRouter

from shiftpro.schemas.pay import OvertimeForecast, PayPeriod, PayPeriodSummary
from shiftpro.schemas.requests import AggregateRequest, OvertimeRequest, PayBreakdownResponse, PeriodLookupRequest
from shiftpro.services.hours_aggregator import hours_aggregator
from shiftpro.services.pay_period_calculator import pay_period_calculator
from shiftpro.utils.exceptions import BadRequestError

router: APIRouter = APIRouter()


@router.post("/pay/aggregate", response_model=PayPeriodSummary)
async def aggregate_pay(data: AggregateRequest) -> PayPeriodSummary:
    """급여 기간 집계.

    Sum paid minutes and estimated pay for the shifts anchored in the
    period. Degenerate shifts are listed under `excluded`, never rejected.
    """
    return hours_aggregator.aggregate(data.shifts, data.period, data.ruleset)


@router.post("/pay/breakdown", response_model=PayBreakdownResponse)
async def pay_breakdown(data: AggregateRequest) -> PayBreakdownResponse:
    return PayBreakdownResponse(
        summary=hours_aggregator.aggregate(data.shifts, data.period, data.ruleset),
        daily_totals=hours_aggregator.daily_totals(data.shifts, data.period, data.ruleset),
        rate_buckets=hours_aggregator.rate_breakdown(data.shifts, data.period, data.ruleset),
    )


@router.post("/pay/overtime", response_model=OvertimeForecast)
async def predict_overtime(data: OvertimeRequest) -> OvertimeForecast:
    """현재 속도 기준 초과근무 예측 (Pace-based overtime forecast as of a given day)."""
    summary = hours_aggregator.aggregate(data.shifts, data.period, data.ruleset)
    return hours_aggregator.predict_overtime(
        summary,
        data.as_of,
        target_hours=data.target_hours,
        warning_hours=data.warning_hours,
        critical_hours=data.critical_hours,
    )


@router.post("/pay/period", response_model=PayPeriod)
async def lookup_period(data: PeriodLookupRequest) -> PayPeriod:
    """day를 포함하는 급여 기간 조회.

    Raises:
        BadRequestError: biweekly인데 reference_date가 없을 때 (Biweekly without a reference date)
    """
    try:
        return pay_period_calculator.period_for(
            data.day,
            data.period_type,
            reference_date=data.reference_date,
            week_start=data.week_start,
            time_zone=data.time_zone,
        )
    except ValueError as exc:
        raise BadRequestError(str(exc))
