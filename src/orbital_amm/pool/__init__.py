"""
Orbital pool engine.

The pool state machine, its callback interfaces and the errors it raises.
"""
from .errors import (
    OrbitalError,
    InvalidInputError,
    InvalidTickError,
    InvalidSumReservesLimitError,
    PoolNotInitializedError,
    AlreadyInitializedError,
    InsufficientLiquidityError,
    SolverConvergenceError,
    SwapStepLimitError,
    UnfundedCallbackError,
    ReentrancyError,
    SlippageError,
    InsufficientBalanceError,
)
from .state import PoolState, SwapResult, MintResult
from .callbacks import OrbitalMintCallback, OrbitalSwapCallback, OrbitalFlashCallback
from .orbital_pool import OrbitalPool

__all__ = [
    "OrbitalError",
    "InvalidInputError",
    "InvalidTickError",
    "InvalidSumReservesLimitError",
    "PoolNotInitializedError",
    "AlreadyInitializedError",
    "InsufficientLiquidityError",
    "SolverConvergenceError",
    "SwapStepLimitError",
    "UnfundedCallbackError",
    "ReentrancyError",
    "SlippageError",
    "InsufficientBalanceError",
    "PoolState",
    "SwapResult",
    "MintResult",
    "OrbitalMintCallback",
    "OrbitalSwapCallback",
    "OrbitalFlashCallback",
    "OrbitalPool",
]
