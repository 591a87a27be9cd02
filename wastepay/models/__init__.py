from .location import Location
from .plot import Plot
from .payment_schedule import PaymentSchedule
