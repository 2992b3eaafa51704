# sales/models/__init__.py

"""
SALES MODELS PACKAGE EXPORTS

Purpose:
- Central export surface for sales app models.
"""

from .customer import Customer
from .payment import Payment
from .register_shift import RegisterShift
from .return_reason_code import ReturnReasonCode
from .sale import Sale
from .sale_item import SaleItem
from .sale_return import SaleReturn
from .sale_return_item import SaleReturnItem

__all__ = [
    "Customer",
    "RegisterShift",
    "Sale",
    "SaleItem",
    "Payment",
    "ReturnReasonCode",
    "SaleReturn",
    "SaleReturnItem",
]
