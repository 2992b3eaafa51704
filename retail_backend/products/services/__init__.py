from .inventory import deduct_sold_units, restock_returned_units, StockChange
from .stock_sync import dispatch_pending_stock_sync, schedule_stock_sync

__all__ = [
    "StockChange",
    "restock_returned_units",
    "deduct_sold_units",
    "schedule_stock_sync",
    "dispatch_pending_stock_sync",
]
