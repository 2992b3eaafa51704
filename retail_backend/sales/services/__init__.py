# sales/services/__init__.py

from .exchange_errors import (
    ExchangeConflictError,
    ExchangeError,
    ExchangeNotFoundError,
    ExchangePersistenceError,
    ExchangeValidationError,
)
from .exchange_orchestrator import (
    ExchangePlan,
    ExchangeResult,
    find_exchange_by_idempotency_key,
    preview_exchange,
    process_exchange,
)
from .tax_rates import TaxRates, TaxRateTable

__all__ = [
    "ExchangeError",
    "ExchangeValidationError",
    "ExchangeNotFoundError",
    "ExchangeConflictError",
    "ExchangePersistenceError",
    "ExchangePlan",
    "ExchangeResult",
    "process_exchange",
    "preview_exchange",
    "find_exchange_by_idempotency_key",
    "TaxRates",
    "TaxRateTable",
]
