# store_credits/services/__init__.py

from .code_generator import CODE_ALPHABET, StoreCreditCodeGenerator
from .exceptions import StoreCreditCodeExhaustedError, StoreCreditError
from .issuance import issue_store_credit

__all__ = [
    "CODE_ALPHABET",
    "StoreCreditCodeGenerator",
    "StoreCreditError",
    "StoreCreditCodeExhaustedError",
    "issue_store_credit",
]
