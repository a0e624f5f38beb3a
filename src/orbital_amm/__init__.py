"""
Orbital AMM pricing engine.

Multi-asset concentrated-liquidity pools whose reserves live on a sphere,
with nested tick boundaries consolidated into a single torus invariant.
"""
from .config import OrbitalSettings, settings
from .curve import OrbitalMath
from .pool import OrbitalPool, SwapResult
from .periphery import TokenLedger, OrbitalManager, OrbitalQuoter, QuoteResult

__version__ = "0.1.0"

__all__ = [
    "OrbitalSettings",
    "settings",
    "OrbitalMath",
    "OrbitalPool",
    "SwapResult",
    "TokenLedger",
    "OrbitalManager",
    "OrbitalQuoter",
    "QuoteResult",
]
