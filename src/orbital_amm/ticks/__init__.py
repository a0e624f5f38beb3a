"""
Tick and position bookkeeping.

Stateful records owned by a pool: the tick ledger, the initialized-tick
bitmap and the per-owner position ledger.
"""
from .tick import TickInfo, TickTable
from .tick_bitmap import TickBitmap
from .position import PositionInfo, PositionBook

__all__ = [
    "TickInfo",
    "TickTable",
    "TickBitmap",
    "PositionInfo",
    "PositionBook",
]
