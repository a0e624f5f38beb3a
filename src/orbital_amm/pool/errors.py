"""Exceptions raised by Orbital pools and their periphery."""
from typing import Optional


class OrbitalError(Exception):
    """Base exception for pool errors."""

    def __init__(self, message: str, pool: Optional[str] = None):
        """
        Initialize pool error.

        Args:
            message: Error message
            pool: Label of the pool where the error occurred
        """
        self.pool = pool
        super().__init__(message)

    def __str__(self) -> str:
        """String representation of the error."""
        base_msg = super().__str__()
        if self.pool:
            return f"[{self.pool}] {base_msg}"
        return base_msg


class InvalidInputError(OrbitalError):
    """Malformed amounts, token indices or array lengths."""


class InvalidTickError(InvalidInputError):
    """Tick not aligned to the spacing or outside the valid k_norm range."""


class InvalidSumReservesLimitError(InvalidInputError):
    """Sum-of-reserves limit on the wrong side of the current point."""


class PoolNotInitializedError(OrbitalError):
    pass


class AlreadyInitializedError(OrbitalError):
    pass


class InsufficientLiquidityError(OrbitalError):
    """Interior radius or an output reserve is exhausted."""


class SolverConvergenceError(OrbitalError):
    """Newton-Raphson exhausted its iteration budget."""

    def __init__(self, message: str, pool: Optional[str] = None, iterations: int = 0):
        self.iterations = iterations
        super().__init__(message, pool)


class SwapStepLimitError(OrbitalError):
    pass


class UnfundedCallbackError(OrbitalError):
    """A callback returned without paying what it owed."""

    def __init__(self, message: str, pool: Optional[str] = None,
                 token: Optional[str] = None, shortfall: int = 0):
        self.token = token
        self.shortfall = shortfall
        super().__init__(message, pool)


class ReentrancyError(OrbitalError):
    pass


class SlippageError(OrbitalError):
    """Amounts moved outside the caller's bounds."""


class InsufficientBalanceError(OrbitalError):
    """Token ledger transfer exceeds the sender's balance."""
