# wastepay/models/plot.py
"""
Plot model: a billable unit inside a location.
"""
import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import UniqueConstraint
from sqlmodel import Field, Relationship, SQLModel

from .location import Location, utcnow


class Plot(SQLModel, table=True):
    """
    Plot model representing a fee-paying property.

    Fields:
    - id: Generated UUID primary key
    - plot_number: Plot identifier, unique inside its location
    - location_id: Foreign key to locations (required)
    - owner_name / mobile_number: Owner contact
    - bags_per_collection: Bags collected per visit (>= 1)
    - expected_amount: Monthly fee
    - created_at: Registration timestamp
    """

    __tablename__ = "plots"
    __table_args__ = (
        UniqueConstraint("plot_number", "location_id", name="uq_plots_number_location"),
    )

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    plot_number: str = Field(nullable=False)
    location_id: uuid.UUID = Field(
        foreign_key="locations.id", nullable=False, index=True, ondelete="RESTRICT"
    )
    owner_name: str = Field(nullable=False)
    mobile_number: str = Field(nullable=False)
    bags_per_collection: int = Field(default=1, nullable=False)
    expected_amount: float = Field(nullable=False)
    created_at: datetime = Field(default_factory=utcnow, nullable=False, index=True)

    location: Optional[Location] = Relationship(sa_relationship_kwargs={"lazy": "selectin"})
