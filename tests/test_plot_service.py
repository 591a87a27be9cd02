"""Tests for PlotService, including the schedules plots own."""

import uuid
from datetime import date

import pytest

from wastepay.core.exceptions import ConflictError, NotFoundError, ValidationError
from wastepay.services.plot_service import current_period


class TestCreatePlot:
    async def test_creates_plot_with_location(self, plot, location):
        assert plot.plot_number == "7"
        assert plot.location_id == location.id
        assert plot.location.name == "Kilimani"
        assert plot.bags_per_collection == 2

    async def test_creates_schedule_for_current_month(self, schedule_service, plot):
        month, year = current_period()

        schedules = await schedule_service.list_schedules(month=month, year=year)

        assert len(schedules) == 1
        assert schedules[0].plot_id == plot.id
        assert schedules[0].expected_amount == 500.0
        assert schedules[0].is_paid is False
        assert schedules[0].carried_from_id is None

    async def test_initial_schedule_uses_reference_date(self, plot_service, schedule_service, plot_data):
        plot_data["plot_number"] = "8"
        created = await plot_service.create_plot(plot_data, today=date(2024, 12, 31))

        schedules = await schedule_service.list_schedules(month=12, year=2024)

        assert [s.plot_id for s in schedules] == [created.id]

    async def test_bags_default_to_one(self, plot_service, plot_data):
        del plot_data["bags_per_collection"]

        created = await plot_service.create_plot(plot_data)

        assert created.bags_per_collection == 1

    async def test_zero_amount_is_allowed(self, plot_service, plot_data):
        plot_data["expected_amount"] = 0

        created = await plot_service.create_plot(plot_data)

        assert created.expected_amount == 0

    @pytest.mark.parametrize(
        "field, api_name",
        [
            ("plot_number", "plotNumber"),
            ("location_id", "location"),
            ("owner_name", "ownerName"),
            ("mobile_number", "mobileNumber"),
            ("expected_amount", "expectedAmount"),
        ],
    )
    async def test_missing_required_field(self, plot_service, plot_data, field, api_name):
        plot_data[field] = None

        with pytest.raises(ValidationError) as exc_info:
            await plot_service.create_plot(plot_data)

        assert api_name in exc_info.value.message

    async def test_negative_amount(self, plot_service, plot_data):
        plot_data["expected_amount"] = -1

        with pytest.raises(ValidationError):
            await plot_service.create_plot(plot_data)

    async def test_unknown_location(self, plot_service, plot_data):
        plot_data["location_id"] = uuid.uuid4()

        with pytest.raises(ValidationError, match="Location does not exist"):
            await plot_service.create_plot(plot_data)

    async def test_duplicate_number_in_location(self, plot_service, schedule_service, plot, plot_data):
        with pytest.raises(ConflictError) as exc_info:
            await plot_service.create_plot(plot_data)

        assert exc_info.value.status_code == 400
        month, year = current_period()
        assert len(await schedule_service.list_schedules(month=month, year=year)) == 1

    async def test_same_number_in_other_location(self, plot_service, location_service, plot, plot_data):
        other = await location_service.create_location("Karen")
        plot_data["location_id"] = other.id

        created = await plot_service.create_plot(plot_data)

        assert created.location.name == "Karen"


class TestListPlots:
    async def test_filters_by_location(self, plot_service, location_service, plot, plot_data):
        other = await location_service.create_location("Karen")
        plot_data["location_id"] = other.id
        plot_data["plot_number"] = "12"
        other_plot = await plot_service.create_plot(plot_data)

        everything = await plot_service.list_plots()
        in_karen = await plot_service.list_plots(location_id=other.id)

        assert [p.id for p in everything] == [other_plot.id, plot.id]
        assert [p.id for p in in_karen] == [other_plot.id]
        assert in_karen[0].location.name == "Karen"


class TestUpdatePlot:
    async def test_updates_fields(self, plot_service, plot):
        updated = await plot_service.update_plot(
            plot.id, {"owner_name": "John Otieno", "bags_per_collection": 3}
        )

        assert updated.owner_name == "John Otieno"
        assert updated.bags_per_collection == 3
        assert updated.plot_number == "7"

    async def test_amount_change_reaches_unpaid_schedules_only(
        self, plot_service, schedule_service, plot
    ):
        paid = await schedule_service.create_schedule(plot.id, 1, 2024)
        await schedule_service.mark_paid(paid.id)
        unpaid = await schedule_service.create_schedule(plot.id, 2, 2024)

        await plot_service.update_plot(plot.id, {"expected_amount": 650.0})

        assert (await schedule_service.get_schedule(unpaid.id)).expected_amount == 650.0
        paid_after = await schedule_service.get_schedule(paid.id)
        assert paid_after.expected_amount == 500.0
        assert paid_after.paid_amount == 500.0
        month, year = current_period()
        current = await schedule_service.list_schedules(month=month, year=year)
        assert current[0].expected_amount == 650.0

    async def test_moves_plot_to_other_location(self, plot_service, location_service, plot):
        other = await location_service.create_location("Karen")

        updated = await plot_service.update_plot(plot.id, {"location_id": other.id})

        assert updated.location_id == other.id
        assert updated.location.name == "Karen"

    async def test_unknown_location(self, plot_service, plot):
        plot_id = plot.id

        with pytest.raises(ValidationError):
            await plot_service.update_plot(plot_id, {"location_id": uuid.uuid4()})

        assert (await plot_service.get_plot(plot_id)).location.name == "Kilimani"

    async def test_number_taken_by_other_plot(self, plot_service, plot, plot_data):
        plot_data["plot_number"] = "8"
        second = await plot_service.create_plot(plot_data)
        second_id = second.id

        with pytest.raises(ConflictError):
            await plot_service.update_plot(second_id, {"plot_number": "7"})

        assert (await plot_service.get_plot(second_id)).plot_number == "8"

    async def test_blank_required_field(self, plot_service, plot):
        with pytest.raises(ValidationError):
            await plot_service.update_plot(plot.id, {"owner_name": ""})

    async def test_unknown_plot(self, plot_service):
        with pytest.raises(NotFoundError):
            await plot_service.update_plot(uuid.uuid4(), {"owner_name": "Nobody"})


class TestDeletePlot:
    async def test_cascades_to_schedules(self, plot_service, schedule_service, plot):
        plot_id = plot.id
        await schedule_service.create_schedule(plot_id, 3, 2024)

        result = await plot_service.delete_plot(plot_id)

        assert result["deletedCount"] == 1
        assert await schedule_service.list_schedules() == []
        assert await schedule_service.summary() == {
            "count": 0,
            "paidCount": 0,
            "totalExpected": 0.0,
            "totalPaid": 0.0,
            "totalPending": 0.0,
        }
        with pytest.raises(NotFoundError):
            await plot_service.get_plot(plot_id)

    async def test_unknown_plot(self, plot_service):
        with pytest.raises(NotFoundError):
            await plot_service.delete_plot(uuid.uuid4())

    async def test_location_can_be_deleted_afterwards(self, plot_service, location_service, location, plot):
        location_id = location.id
        await plot_service.delete_plot(plot.id)

        result = await location_service.delete_location(location_id)

        assert result["deletedCount"] == 1
