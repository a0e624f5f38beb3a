"""
Periphery around Orbital pools.

Token custody, the callback-paying manager and the read-only quoter.
"""
from .token_ledger import TokenLedger
from .manager import OrbitalManager, CallbackData
from .quoter import OrbitalQuoter, QuoteResult

__all__ = [
    "TokenLedger",
    "OrbitalManager",
    "CallbackData",
    "OrbitalQuoter",
    "QuoteResult",
]
