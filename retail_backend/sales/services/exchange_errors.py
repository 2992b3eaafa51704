# sales/services/exchange_errors.py

"""
EXCHANGE ERROR TAXONOMY

Every failure raised by the exchange engine maps to exactly one category:

- ExchangeValidationError   -> the request is wrong (400)
- ExchangeNotFoundError     -> a referenced sale / line / product is missing (404)
- ExchangeConflictError     -> concurrent or duplicate work, safe to retry (409)
- ExchangePersistenceError  -> the database refused the write (500)

All of them are raised BEFORE commit, so a failed exchange leaves no trace.
"""

from __future__ import annotations


class ExchangeError(Exception):
    """Base class for exchange failures."""

    code = "EXCHANGE_FAILED"
    retryable = False


class ExchangeValidationError(ExchangeError):
    code = "EXCHANGE_INVALID"


class ExchangeNotFoundError(ExchangeError):
    code = "EXCHANGE_REFERENCE_NOT_FOUND"


class ExchangeConflictError(ExchangeError):
    code = "EXCHANGE_CONFLICT"
    retryable = True


class ExchangePersistenceError(ExchangeError):
    code = "EXCHANGE_PERSISTENCE_FAILED"
