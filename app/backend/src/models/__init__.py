"""ORM models exposed for easy imports."""

from .cement_type import CementType
from .customer import Customer
from .debt import Payable, Receivable
from .factory import Factory
from .purchase import Purchase
from .sale import Sale

__all__ = [
    "CementType",
    "Customer",
    "Factory",
    "Payable",
    "Purchase",
    "Receivable",
    "Sale",
]
