import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlmodel.ext.asyncio.session import AsyncSession

from ...db.engine import get_session
from ...services.schedule_service import ScheduleService
from .models import (
    CarryForwardRequest,
    CarryForwardResult,
    PaymentRequest,
    Schedule,
    ScheduleCreate,
    ScheduleDetail,
    ScheduleSummary,
)

router = APIRouter()


# --- Service dependency ---
async def get_schedule_service(
    session: AsyncSession = Depends(get_session),
) -> ScheduleService:
    return ScheduleService(session)


# --- API Endpoints ---
@router.get("/schedules", response_model=List[ScheduleDetail])
async def get_all_schedules(
    month: Optional[int] = Query(default=None),
    year: Optional[int] = Query(default=None),
    is_paid: Optional[bool] = Query(default=None, alias="isPaid"),
    location: Optional[uuid.UUID] = Query(default=None),
    service: ScheduleService = Depends(get_schedule_service),
):
    return await service.list_schedules(
        month=month, year=year, is_paid=is_paid, location_id=location
    )


@router.get("/schedules/summary", response_model=ScheduleSummary)
async def get_schedules_summary(
    month: Optional[int] = Query(default=None),
    year: Optional[int] = Query(default=None),
    location: Optional[uuid.UUID] = Query(default=None),
    service: ScheduleService = Depends(get_schedule_service),
):
    """Expected, paid and pending totals for the dashboard."""
    return await service.summary(month=month, year=year, location_id=location)


@router.post("/schedules", response_model=Schedule, status_code=status.HTTP_201_CREATED)
async def create_schedule(
    schedule: ScheduleCreate,
    service: ScheduleService = Depends(get_schedule_service),
):
    return await service.create_schedule(
        schedule.plot_id, schedule.month, schedule.year, schedule.expected_amount
    )


@router.post("/schedules/carry", response_model=CarryForwardResult)
async def carry_forward_schedules(
    request: CarryForwardRequest,
    service: ScheduleService = Depends(get_schedule_service),
):
    """
    Copies the unpaid schedules of a month into the following month.
    Plots already billed in the following month are skipped.
    """
    return await service.carry_forward(request.month, request.year)


@router.get("/schedules/{schedule_id}", response_model=ScheduleDetail)
async def get_schedule(
    schedule_id: uuid.UUID,
    service: ScheduleService = Depends(get_schedule_service),
):
    return await service.get_schedule(schedule_id)


@router.put("/schedules/{schedule_id}/pay", response_model=Schedule)
async def mark_schedule_as_paid(
    schedule_id: uuid.UUID,
    payment: PaymentRequest,
    service: ScheduleService = Depends(get_schedule_service),
):
    return await service.mark_paid(
        schedule_id, paid_amount=payment.paid_amount, paid_at=payment.payment_date
    )
