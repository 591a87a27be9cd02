# wastepay/services/plot_service.py
"""
Plot service: billable plots and the schedules they own.
"""
import logging
import uuid
from datetime import date
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import delete, update
from sqlmodel import select

from ..core.exceptions import ConflictError, NotFoundError, ValidationError
from ..models import Location, PaymentSchedule, Plot
from .base_service import BaseService

logger = logging.getLogger(__name__)

# Internal field name -> name exposed by the API
REQUIRED_FIELDS = {
    "plot_number": "plotNumber",
    "location_id": "location",
    "owner_name": "ownerName",
    "mobile_number": "mobileNumber",
    "expected_amount": "expectedAmount",
}

UPDATABLE_FIELDS = set(REQUIRED_FIELDS) | {"bags_per_collection"}

DUPLICATE_PLOT_MESSAGE = "Plot number already exists in this location"


def current_period(today: Optional[date] = None) -> Tuple[int, int]:
    """(month, year) of ``today``, defaulting to the local date."""
    today = today or date.today()
    return today.month, today.year


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _validate_numbers(data: Dict[str, Any]) -> None:
    amount = data.get("expected_amount")
    if amount is not None and amount < 0:
        raise ValidationError("Expected amount cannot be negative")

    bags = data.get("bags_per_collection")
    if bags is not None and bags < 1:
        raise ValidationError("Bags per collection must be at least 1")


class PlotService(BaseService):
    async def list_plots(self, location_id: Optional[uuid.UUID] = None) -> List[Plot]:
        """Plots with their location attached, newest first."""
        statement = (
            select(Plot)
            .order_by(Plot.created_at.desc())
            .execution_options(populate_existing=True)
        )
        if location_id is not None:
            statement = statement.where(Plot.location_id == location_id)
        result = await self.session.exec(statement)
        return list(result.all())

    async def get_plot(self, plot_id: uuid.UUID) -> Plot:
        # populate_existing reloads the location even for instances the
        # session already holds
        result = await self.session.exec(
            select(Plot).where(Plot.id == plot_id).execution_options(populate_existing=True)
        )
        plot = result.first()
        if plot is None:
            raise NotFoundError("Plot not found")
        return plot

    async def _get_location(self, location_id: uuid.UUID) -> Location:
        location = await self.session.get(Location, location_id)
        if location is None:
            raise ValidationError("Location does not exist")
        return location

    async def _number_taken(
        self, plot_number: str, location_id: uuid.UUID, exclude_id: Optional[uuid.UUID] = None
    ) -> bool:
        statement = select(Plot.id).where(
            Plot.plot_number == plot_number, Plot.location_id == location_id
        )
        if exclude_id is not None:
            statement = statement.where(Plot.id != exclude_id)
        result = await self.session.exec(statement.limit(1))
        return result.first() is not None

    async def create_plot(self, data: Dict[str, Any], today: Optional[date] = None) -> Plot:
        """
        Create a plot together with its schedule for the current month.

        Both rows are written in the same transaction.

        Args:
            data: Plot fields (plot_number, location_id, owner_name,
                mobile_number, bags_per_collection, expected_amount)
            today: Reference date for the initial schedule period

        Returns:
            The created Plot with its location loaded
        """
        missing = [api for field, api in REQUIRED_FIELDS.items() if _is_blank(data.get(field))]
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")
        _validate_numbers(data)

        month, year = current_period(today)

        async with self.unit_of_work(DUPLICATE_PLOT_MESSAGE, 400):
            location = await self._get_location(data["location_id"])

            if await self._number_taken(data["plot_number"], location.id):
                raise ConflictError(DUPLICATE_PLOT_MESSAGE, status_code=400)

            plot = Plot(
                plot_number=data["plot_number"],
                location_id=location.id,
                owner_name=data["owner_name"],
                mobile_number=data["mobile_number"],
                bags_per_collection=data.get("bags_per_collection") or 1,
                expected_amount=data["expected_amount"],
            )
            plot.location = location
            self.session.add(plot)

            initial_schedule = PaymentSchedule(
                plot_id=plot.id,
                month=month,
                year=year,
                expected_amount=plot.expected_amount,
            )
            self.session.add(initial_schedule)

        logger.info(
            f"Plot {plot.plot_number} created in '{location.name}' "
            f"with schedule for {month}/{year}."
        )
        return plot

    async def update_plot(self, plot_id: uuid.UUID, data: Dict[str, Any]) -> Plot:
        """
        Apply a partial update.

        A changed expected amount is copied to every unpaid schedule of the
        plot; paid schedules keep their amounts.
        """
        updates = {k: v for k, v in data.items() if k in UPDATABLE_FIELDS}
        blank = [REQUIRED_FIELDS[k] for k, v in updates.items() if k in REQUIRED_FIELDS and _is_blank(v)]
        if blank:
            raise ValidationError(f"Fields cannot be empty: {', '.join(blank)}")
        if "bags_per_collection" in updates and updates["bags_per_collection"] is None:
            updates["bags_per_collection"] = 1
        _validate_numbers(updates)

        async with self.unit_of_work(DUPLICATE_PLOT_MESSAGE, 400):
            plot = await self.get_plot(plot_id)

            new_location = None
            if "location_id" in updates:
                new_location = await self._get_location(updates["location_id"])

            plot_number = updates.get("plot_number", plot.plot_number)
            location_id = updates.get("location_id", plot.location_id)
            if (plot_number, location_id) != (plot.plot_number, plot.location_id):
                if await self._number_taken(plot_number, location_id, exclude_id=plot.id):
                    raise ConflictError(DUPLICATE_PLOT_MESSAGE, status_code=400)

            amount_changed = (
                "expected_amount" in updates
                and updates["expected_amount"] != plot.expected_amount
            )

            for key, value in updates.items():
                setattr(plot, key, value)
            if new_location is not None:
                plot.location = new_location
            self.session.add(plot)

            if amount_changed:
                result = await self.session.exec(
                    update(PaymentSchedule)
                    .where(PaymentSchedule.plot_id == plot.id, PaymentSchedule.is_paid == False)  # noqa: E712
                    .values(expected_amount=plot.expected_amount)
                )
                logger.info(
                    f"Plot {plot.id}: expected amount now {plot.expected_amount}, "
                    f"{result.rowcount} unpaid schedules updated."
                )

        return plot

    async def delete_plot(self, plot_id: uuid.UUID) -> Dict[str, Any]:
        """Delete a plot and all of its payment schedules."""
        async with self.unit_of_work():
            await self._get_or_404(Plot, plot_id, "Plot")

            schedules = await self.session.exec(
                delete(PaymentSchedule).where(PaymentSchedule.plot_id == plot_id)
            )
            result = await self.session.exec(delete(Plot).where(Plot.id == plot_id))
            deleted_count = result.rowcount

        logger.info(f"Plot {plot_id} deleted with {schedules.rowcount} schedules.")
        return {
            "message": "Plot and its payment schedules removed successfully",
            "deletedCount": deleted_count,
        }
