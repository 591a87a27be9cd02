import uuid
from datetime import datetime

from pydantic import Field

from ...schemas import CamelModel
from ..plots.models import Plot


# --- Pydantic models (Payment schedules) ---
class Schedule(CamelModel):
    id: uuid.UUID
    plot_id: uuid.UUID
    month: int
    year: int
    expected_amount: float
    paid_amount: float
    is_paid: bool
    paid_at: datetime | None = None
    carried_from_id: uuid.UUID | None = Field(default=None, serialization_alias="carriedFrom")
    created_at: datetime


class ScheduleDetail(Schedule):
    plot: Plot


class ScheduleCreate(CamelModel):
    plot_id: uuid.UUID | None = None
    month: int | None = None
    year: int | None = None
    expected_amount: float | None = None


class CarryForwardRequest(CamelModel):
    month: int | None = None
    year: int | None = None


class CarryForwardResult(CamelModel):
    message: str
    carried_count: int
    skipped_count: int = 0


class PaymentRequest(CamelModel):
    # Kept loose so non-numeric amounts reach the service and fail there
    paid_amount: float | str | None = None
    payment_date: datetime | None = None


class ScheduleSummary(CamelModel):
    count: int
    paid_count: int
    total_expected: float
    total_paid: float
    total_pending: float
