# store_credits/models/__init__.py

from .store_credit import StoreCredit
from .store_credit_transaction import StoreCreditTransaction

__all__ = ["StoreCredit", "StoreCreditTransaction"]
