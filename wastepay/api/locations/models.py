import uuid
from datetime import datetime

from ...schemas import CamelModel


# --- Pydantic models (Location) ---
class Location(CamelModel):
    id: uuid.UUID
    name: str
    created_at: datetime


class LocationCreate(CamelModel):
    name: str | None = None


class LocationUpdate(CamelModel):
    name: str | None = None
