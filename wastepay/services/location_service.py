# wastepay/services/location_service.py
"""
Location service: collection sites and their lifecycle.
"""
import logging
import uuid
from typing import Any, Dict, List, Optional

from sqlalchemy import delete, func
from sqlmodel import select

from ..core.exceptions import ConflictError, NotFoundError, ValidationError
from ..models import Location, Plot
from .base_service import BaseService

logger = logging.getLogger(__name__)


def _clean_name(name: Optional[str]) -> str:
    if name is None or not str(name).strip():
        raise ValidationError("Location name is required")
    return str(name).strip()


class LocationService(BaseService):
    async def list_locations(self) -> List[Location]:
        """All locations, newest first."""
        statement = select(Location).order_by(Location.created_at.desc())
        result = await self.session.exec(statement)
        return list(result.all())

    async def get_location(self, location_id: uuid.UUID) -> Location:
        return await self._get_or_404(Location, location_id, "Location")

    async def _find_by_name(
        self, name: str, exclude_id: Optional[uuid.UUID] = None
    ) -> Optional[Location]:
        statement = select(Location).where(func.lower(Location.name) == name.lower())
        if exclude_id is not None:
            statement = statement.where(Location.id != exclude_id)
        result = await self.session.exec(statement)
        return result.first()

    async def create_location(self, name: Optional[str]) -> Location:
        name = _clean_name(name)

        async with self.unit_of_work("Location already exists", 400):
            if await self._find_by_name(name):
                raise ConflictError("Location already exists", status_code=400)

            new_location = Location(name=name)
            self.session.add(new_location)

        logger.info(f"Location '{name}' created (ID: {new_location.id}).")
        return new_location

    async def update_location(self, location_id: uuid.UUID, name: Optional[str]) -> Location:
        name = _clean_name(name)

        async with self.unit_of_work("Location name already exists", 400):
            location = await self._get_or_404(Location, location_id, "Location")

            if await self._find_by_name(name, exclude_id=location_id):
                raise ConflictError("Location name already exists", status_code=400)

            location.name = name
            self.session.add(location)

        return location

    async def delete_location(self, location_id: uuid.UUID) -> Dict[str, Any]:
        """
        Delete a location that no plot references.

        The location row is locked for the duration of the check so a plot
        cannot be attached to it between the check and the delete.
        """
        async with self.unit_of_work("Cannot delete location with associated plots", 400):
            locked = await self.session.exec(
                select(Location).where(Location.id == location_id).with_for_update()
            )
            if locked.first() is None:
                raise NotFoundError("Location not found")

            has_plots = await self.session.exec(
                select(Plot.id).where(Plot.location_id == location_id).limit(1)
            )
            if has_plots.first() is not None:
                raise ConflictError(
                    "Cannot delete location with associated plots", status_code=400
                )

            result = await self.session.exec(
                delete(Location).where(Location.id == location_id)
            )
            deleted_count = result.rowcount

        logger.info(f"Location {location_id} deleted.")
        return {"message": "Location removed successfully", "deletedCount": deleted_count}
