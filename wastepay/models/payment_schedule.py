# wastepay/models/payment_schedule.py
"""
PaymentSchedule model: the monthly billing record of a plot.
"""
import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import Index, UniqueConstraint
from sqlmodel import Field, Relationship, SQLModel

from .location import utcnow
from .plot import Plot


class PaymentSchedule(SQLModel, table=True):
    """
    Fields:
    - id: Generated UUID primary key
    - plot_id: Foreign key to plots (required, cascades on delete)
    - month / year: Billing period (month 1-12)
    - expected_amount: Amount due, snapshot of the plot fee
    - paid_amount / is_paid / paid_at: Payment state, set once by mark-paid
    - carried_from_id: Schedule this one was carried forward from
    - created_at: Creation timestamp
    """

    __tablename__ = "payment_schedules"
    __table_args__ = (
        UniqueConstraint("plot_id", "month", "year", name="uq_schedules_plot_period"),
        Index("ix_schedules_period", "month", "year"),
    )

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    plot_id: uuid.UUID = Field(
        foreign_key="plots.id", nullable=False, index=True, ondelete="CASCADE"
    )
    month: int = Field(nullable=False)
    year: int = Field(nullable=False)
    expected_amount: float = Field(nullable=False)
    paid_amount: float = Field(default=0.0, nullable=False)
    is_paid: bool = Field(default=False, nullable=False)
    paid_at: Optional[datetime] = Field(default=None)
    carried_from_id: Optional[uuid.UUID] = Field(
        default=None, foreign_key="payment_schedules.id", ondelete="SET NULL"
    )
    created_at: datetime = Field(default_factory=utcnow, nullable=False, index=True)

    plot: Optional[Plot] = Relationship(sa_relationship_kwargs={"lazy": "selectin"})
