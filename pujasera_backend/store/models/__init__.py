from .store import Store
from .fee_schedule import FeeSchedule
from .customer import Customer
from .table import Table
from .top_up import TopUpRequest

__all__ = ["Store", "FeeSchedule", "Customer", "Table", "TopUpRequest"]
