"""
Orbital manager.

User-facing entry points that translate token amounts into pool calls and
pay the pool's callbacks from the user's ledger balance.
"""
from dataclasses import dataclass
from typing import Any, List, Optional, Sequence
import logging

from ..pool import (
    InvalidInputError,
    MintResult,
    OrbitalMintCallback,
    OrbitalPool,
    OrbitalSwapCallback,
    SlippageError,
    SwapResult,
)

logger = logging.getLogger(__name__)


@dataclass
class CallbackData:
    """Payer recorded for a pending callback."""
    payer: str


class OrbitalManager(OrbitalMintCallback, OrbitalSwapCallback):
    """Pays mint and swap callbacks on behalf of users."""

    def __init__(self, ledger, address: str = "orbital-manager"):
        self.ledger = ledger
        self.address = address

    def mint(self,
             pool: OrbitalPool,
             tick: int,
             amounts_desired: Sequence[int],
             amounts_min: Sequence[int],
             payer: str,
             owner: Optional[str] = None) -> MintResult:
        """
        Add liquidity from per-token amounts.

        The smallest desired amount limits the radius, and every token is
        deposited in the same amount for that radius.

        Args:
            pool: Target pool
            tick: Tick to add radius at
            amounts_desired: Maximum amount of each token to deposit
            amounts_min: Minimum amount of each token that must be deposited
            payer: Account paying the deposit
            owner: Position owner, defaults to the payer

        Returns:
            MintResult from the pool
        """
        n = pool.token_count
        if len(amounts_desired) != n or len(amounts_min) != n:
            raise InvalidInputError(f"Expected {n} desired and minimum amounts", pool=pool.address)

        radius = pool.math.radius_for_amounts(list(amounts_desired), n)
        if radius <= 0:
            raise InvalidInputError("Desired amounts are too small to mint", pool=pool.address)

        amount = pool.math.amount_per_token(radius, n)
        for token, minimum in zip(pool.tokens, amounts_min):
            if amount < minimum:
                raise SlippageError(
                    f"Deposit of {amount} {token} is below minimum {minimum}", pool=pool.address
                )

        logger.debug(f"Minting radius {radius} at tick {tick} in {pool.address} paid by {payer}")
        return pool.mint(self, owner or payer, tick, radius, CallbackData(payer))

    def swap_single(self,
                    pool: OrbitalPool,
                    token_in: str,
                    token_out: str,
                    amount_in: int,
                    sum_reserves_limit: int,
                    payer: str,
                    recipient: Optional[str] = None) -> SwapResult:
        """
        Swap an exact amount of one token for another.

        Args:
            pool: Target pool
            token_in: Symbol of the input token
            token_out: Symbol of the output token
            amount_in: Exact input amount, fee included
            sum_reserves_limit: Sum of reserves to stop at, 0 for no limit
            payer: Account paying the input
            recipient: Account receiving the output, defaults to the payer

        Returns:
            SwapResult from the pool
        """
        return pool.swap(
            self,
            recipient or payer,
            pool.token_index(token_in),
            pool.token_index(token_out),
            amount_in,
            sum_reserves_limit,
            CallbackData(payer)
        )

    def _pay(self, pool: OrbitalPool, amounts: List[int], data: Any) -> None:
        for token, amount in zip(pool.tokens, amounts):
            if amount > 0:
                self.ledger.transfer(token, data.payer, pool.address, amount)

    def orbital_mint_callback(self, pool: Any, amounts_owed: List[int], data: Any) -> None:
        self._pay(pool, amounts_owed, data)

    def orbital_swap_callback(self, pool: Any, amount_deltas: List[int], data: Any) -> None:
        self._pay(pool, amount_deltas, data)
