"""근무 검증 라우터.

Shift Validation Router: reports duration, break, and overlap issues for
a batch of shifts without rejecting the batch.
"""

from fastapi import APIRouter

from shiftpro.schemas.requests import ValidateShiftsRequest
from shiftpro.schemas.shift import ShiftValidationResult
from shiftpro.services.shift_validator import shift_validator

router: APIRouter = APIRouter()


@router.post("/shifts/validate", response_model=list[ShiftValidationResult])
async def validate_shifts(data: ValidateShiftsRequest) -> list[ShiftValidationResult]:
    issues = shift_validator.validate_batch(data.shifts, data.maximum_duration_hours)
    return [ShiftValidationResult(index=index, issues=found) for index, found in sorted(issues.items())]
