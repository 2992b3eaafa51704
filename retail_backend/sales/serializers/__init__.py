from .exchange_command import (
    ExchangeCommandSerializer,
    ExchangePreviewCommandSerializer,
)
from .exchange_read import (
    ExchangePreviewSerializer,
    ExchangeReadSerializer,
    ReturnReasonCodeSerializer,
)
from .sale_item import SaleItemSerializer

__all__ = [
    "SaleItemSerializer",
    "ExchangeCommandSerializer",
    "ExchangePreviewCommandSerializer",
    "ExchangeReadSerializer",
    "ExchangePreviewSerializer",
    "ReturnReasonCodeSerializer",
]
