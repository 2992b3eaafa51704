# store_credits/services/exceptions.py


class StoreCreditError(Exception):
    """Domain error for store credit operations."""


class StoreCreditCodeExhaustedError(StoreCreditError):
    """Every candidate code collided with an existing one."""
