# wastepay/models/location.py
"""
Location model: a named garbage collection site.
"""
import uuid
from datetime import datetime, timezone

from sqlalchemy import Index, func
from sqlmodel import Field, SQLModel


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Location(SQLModel, table=True):
    """
    Collection site referenced by plots.

    Fields:
    - id: Generated UUID primary key
    - name: Site name, unique regardless of casing
    - created_at: Registration timestamp
    """

    __tablename__ = "locations"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    name: str = Field(nullable=False)
    created_at: datetime = Field(default_factory=utcnow, nullable=False, index=True)


# Case-insensitive uniqueness on the name
Index("uq_locations_name_lower", func.lower(Location.__table__.c.name), unique=True)
