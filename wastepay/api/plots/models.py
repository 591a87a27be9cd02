import uuid
from datetime import datetime

from pydantic import Field

from ...schemas import CamelModel


class LocationRef(CamelModel):
    id: uuid.UUID
    name: str


# --- Pydantic models (Plot) ---
class Plot(CamelModel):
    id: uuid.UUID
    plot_number: str
    location_id: uuid.UUID
    location: LocationRef | None = None
    owner_name: str
    mobile_number: str
    bags_per_collection: int
    expected_amount: float
    created_at: datetime


class PlotFields(CamelModel):
    plot_number: str | None = None
    location_id: uuid.UUID | None = Field(default=None, alias="location")
    owner_name: str | None = None
    mobile_number: str | None = None
    bags_per_collection: int | None = None
    expected_amount: float | None = None


class PlotCreate(PlotFields):
    pass


class PlotUpdate(PlotFields):
    pass
