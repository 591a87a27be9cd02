# wastepay/services/schedule_service.py
"""
Payment schedule engine: monthly billing records per plot.

Owns schedule creation, marking schedules paid, and carrying unpaid
schedules forward into the next billing period.
"""
import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import case, func, update
from sqlmodel import select

from ..core.exceptions import ConflictError, NotFoundError, ValidationError
from ..models import PaymentSchedule, Plot
from .base_service import BaseService

logger = logging.getLogger(__name__)


def next_period(month: int, year: int) -> Tuple[int, int]:
    """Billing period following (month, year)."""
    if month == 12:
        return 1, year + 1
    return month + 1, year


def _check_period(month: Optional[int], year: Optional[int], message: str) -> None:
    if not month or not year:
        raise ValidationError(message)
    if not 1 <= month <= 12:
        raise ValidationError("Month must be between 1 and 12")


def _coerce_amount(value: Any) -> Optional[float]:
    """Parse an optional payment amount; non-numeric input is rejected."""
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    if isinstance(value, bool):
        raise ValidationError("Invalid payment amount")
    try:
        amount = float(value)
    except (TypeError, ValueError):
        raise ValidationError("Invalid payment amount")
    if amount != amount or amount < 0:  # NaN or negative
        raise ValidationError("Invalid payment amount")
    return amount


class ScheduleService(BaseService):
    """
    Service for payment schedule operations using SQLModel ORM.
    """

    def _filtered(
        self,
        statement,
        month: Optional[int] = None,
        year: Optional[int] = None,
        is_paid: Optional[bool] = None,
        location_id: Optional[uuid.UUID] = None,
    ):
        # Inner join drops schedules whose plot no longer exists
        statement = statement.join(Plot, PaymentSchedule.plot_id == Plot.id)
        if month is not None:
            statement = statement.where(PaymentSchedule.month == month)
        if year is not None:
            statement = statement.where(PaymentSchedule.year == year)
        if is_paid is not None:
            statement = statement.where(PaymentSchedule.is_paid == is_paid)
        if location_id is not None:
            statement = statement.where(Plot.location_id == location_id)
        return statement

    async def list_schedules(
        self,
        month: Optional[int] = None,
        year: Optional[int] = None,
        is_paid: Optional[bool] = None,
        location_id: Optional[uuid.UUID] = None,
    ) -> List[PaymentSchedule]:
        """Schedules matching every given filter, with plot and location, newest first."""
        statement = self._filtered(select(PaymentSchedule), month, year, is_paid, location_id)
        statement = statement.order_by(PaymentSchedule.created_at.desc()).execution_options(
            populate_existing=True
        )
        result = await self.session.exec(statement)
        return list(result.all())

    async def get_schedule(self, schedule_id: uuid.UUID) -> PaymentSchedule:
        statement = (
            select(PaymentSchedule)
            .where(PaymentSchedule.id == schedule_id)
            .execution_options(populate_existing=True)
        )
        result = await self.session.exec(statement)
        schedule = result.first()
        if schedule is None:
            raise NotFoundError("Schedule not found")
        return schedule

    async def summary(
        self,
        month: Optional[int] = None,
        year: Optional[int] = None,
        location_id: Optional[uuid.UUID] = None,
    ) -> Dict[str, Any]:
        """Totals over the matching schedules, as shown on the dashboard."""
        statement = self._filtered(
            select(
                func.count(PaymentSchedule.id),
                func.coalesce(func.sum(case((PaymentSchedule.is_paid == True, 1), else_=0)), 0),  # noqa: E712
                func.coalesce(func.sum(PaymentSchedule.expected_amount), 0),
                func.coalesce(func.sum(PaymentSchedule.paid_amount), 0),
            ),
            month=month,
            year=year,
            location_id=location_id,
        )
        result = await self.session.exec(statement)
        count, paid_count, total_expected, total_paid = result.one()

        return {
            "count": count,
            "paidCount": paid_count,
            "totalExpected": float(total_expected),
            "totalPaid": float(total_paid),
            "totalPending": float(total_expected) - float(total_paid),
        }

    async def create_schedule(
        self,
        plot_id: Optional[uuid.UUID],
        month: Optional[int],
        year: Optional[int],
        expected_amount: Optional[float] = None,
    ) -> PaymentSchedule:
        """
        Create a schedule for one plot and period.

        Args:
            plot_id: Plot being billed
            month / year: Billing period
            expected_amount: Amount due; defaults to the plot's current fee

        Raises:
            ValidationError: missing fields or invalid period/amount
            NotFoundError: unknown plot
            ConflictError: a schedule already exists for the period
                (``existingId`` carries its id)
        """
        if plot_id is None:
            raise ValidationError("Missing required fields")
        _check_period(month, year, "Missing required fields")
        if expected_amount is not None and expected_amount < 0:
            raise ValidationError("Expected amount cannot be negative")

        async with self.unit_of_work("Schedule already exists for this period", 409):
            plot = await self.session.get(Plot, plot_id)
            if plot is None:
                raise NotFoundError("Plot not found")

            existing = await self.session.exec(
                select(PaymentSchedule.id).where(
                    PaymentSchedule.plot_id == plot_id,
                    PaymentSchedule.month == month,
                    PaymentSchedule.year == year,
                )
            )
            existing_id = existing.first()
            if existing_id is not None:
                raise ConflictError(
                    "Schedule already exists for this period",
                    status_code=409,
                    extra={"existingId": str(existing_id)},
                )

            schedule = PaymentSchedule(
                plot_id=plot.id,
                month=month,
                year=year,
                expected_amount=(
                    expected_amount if expected_amount is not None else plot.expected_amount
                ),
            )
            self.session.add(schedule)

        return schedule

    async def mark_paid(
        self,
        schedule_id: uuid.UUID,
        paid_amount: Any = None,
        paid_at: Optional[datetime] = None,
    ) -> PaymentSchedule:
        """
        Mark an unpaid schedule as paid.

        Without ``paid_amount`` the plot's current expected amount is recorded;
        without ``paid_at``, the current time.
        The update only matches rows that are still unpaid, so of two
        concurrent calls on the same schedule exactly one succeeds.
        """
        amount = _coerce_amount(paid_amount)
        # Dates without an offset (e.g. from a date input) are taken as UTC
        if paid_at is not None and paid_at.tzinfo is None:
            paid_at = paid_at.replace(tzinfo=timezone.utc)

        async with self.unit_of_work():
            schedule = await self.session.get(PaymentSchedule, schedule_id)
            if schedule is None:
                raise NotFoundError("Schedule not found")
            if schedule.is_paid:
                raise ConflictError("Schedule is already paid", status_code=400)

            if amount is None:
                plot_amount = await self.session.exec(
                    select(Plot.expected_amount).where(Plot.id == schedule.plot_id)
                )
                amount = plot_amount.first()
                if amount is None:
                    amount = schedule.expected_amount

            result = await self.session.exec(
                update(PaymentSchedule)
                .where(PaymentSchedule.id == schedule_id, PaymentSchedule.is_paid == False)  # noqa: E712
                .values(
                    is_paid=True,
                    paid_amount=amount,
                    paid_at=paid_at or datetime.now(timezone.utc),
                )
            )
            if result.rowcount != 1:
                raise ConflictError("Schedule is already paid", status_code=400)

        logger.info(f"Schedule {schedule_id} marked paid ({amount}).")
        return schedule

    async def carry_forward(self, month: Optional[int], year: Optional[int]) -> Dict[str, Any]:
        """
        Copy every unpaid schedule of (month, year) into the next period.

        New schedules take the plot's current expected amount and point back
        to their source through ``carried_from_id``. Sources are left unpaid
        and untouched. Plots that already have a schedule in the next period
        are skipped, so running this twice for the same period creates
        nothing the second time. All inserts commit together or not at all.
        """
        _check_period(month, year, "Month and year are required")
        target_month, target_year = next_period(month, year)

        async with self.unit_of_work("Schedules already exist for the next period", 409):
            unpaid_result = await self.session.exec(
                select(PaymentSchedule)
                .join(Plot, PaymentSchedule.plot_id == Plot.id)
                .where(
                    PaymentSchedule.month == month,
                    PaymentSchedule.year == year,
                    PaymentSchedule.is_paid == False,  # noqa: E712
                )
                .order_by(PaymentSchedule.created_at)
            )
            unpaid = list(unpaid_result.all())

            if not unpaid:
                logger.info(f"No unpaid schedules for {month}/{year}.")
                return {
                    "message": "No unpaid schedules to carry forward",
                    "carriedCount": 0,
                    "skippedCount": 0,
                }

            plot_ids = list({s.plot_id for s in unpaid})

            amounts_result = await self.session.exec(
                select(Plot.id, Plot.expected_amount).where(Plot.id.in_(plot_ids))
            )
            current_amounts = {pid: amount for pid, amount in amounts_result.all()}

            scheduled_result = await self.session.exec(
                select(PaymentSchedule.plot_id).where(
                    PaymentSchedule.month == target_month,
                    PaymentSchedule.year == target_year,
                    PaymentSchedule.plot_id.in_(plot_ids),
                )
            )
            already_scheduled = set(scheduled_result.all())

            carried = []
            for source in unpaid:
                if source.plot_id in already_scheduled:
                    continue
                carried.append(
                    PaymentSchedule(
                        plot_id=source.plot_id,
                        month=target_month,
                        year=target_year,
                        expected_amount=current_amounts[source.plot_id],
                        carried_from_id=source.id,
                    )
                )
                already_scheduled.add(source.plot_id)

            self.session.add_all(carried)

        skipped = len(unpaid) - len(carried)
        if skipped:
            logger.warning(
                f"{skipped} unpaid schedules of {month}/{year} already have a "
                f"schedule in {target_month}/{target_year}; not carried again."
            )
        logger.info(f"{len(carried)} schedules carried forward to {target_month}/{target_year}.")

        return {
            "message": f"{len(carried)} schedules carried forward to {target_month}/{target_year}",
            "carriedCount": len(carried),
            "skippedCount": skipped,
        }
