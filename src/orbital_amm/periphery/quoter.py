"""
Orbital quoter.

Prices a swap by running it against a fork of the pool, so the real pool
and ledger are never touched.
"""
from typing import Any, List, NamedTuple

from ..pool import OrbitalPool, OrbitalSwapCallback


class QuoteResult(NamedTuple):
    """Expected outcome of a swap."""
    amount_in: int
    amount_out: int
    fee_amount: int
    sum_reserves_after: int
    tick_after: int
    radius_after: int
    ticks_crossed: List[int]


class OrbitalQuoter(OrbitalSwapCallback):
    """Simulates swaps on forked pools."""

    def __init__(self, address: str = "orbital-quoter"):
        self.address = address

    def quote(self,
              pool: OrbitalPool,
              token_in: str,
              token_out: str,
              amount_in: int,
              sum_reserves_limit: int = 0) -> QuoteResult:
        """
        Quote an exact-input swap.

        Errors the swap would raise are raised here too.

        Args:
            pool: Pool to quote against
            token_in: Symbol of the input token
            token_out: Symbol of the output token
            amount_in: Exact input amount, fee included
            sum_reserves_limit: Sum of reserves to stop at, 0 for no limit

        Returns:
            QuoteResult for the swap
        """
        forked = pool.fork()
        result = forked.swap(
            self,
            self.address,
            forked.token_index(token_in),
            forked.token_index(token_out),
            amount_in,
            sum_reserves_limit
        )
        return QuoteResult(
            amount_in=result.amount_in,
            amount_out=result.amount_out,
            fee_amount=result.fee_amount,
            sum_reserves_after=result.sum_reserves_after,
            tick_after=result.tick_after,
            radius_after=result.radius_after,
            ticks_crossed=result.ticks_crossed
        )

    def orbital_swap_callback(self, pool: Any, amount_deltas: List[int], data: Any) -> None:
        # The fork's ledger is discarded, so the input is minted into the pool
        for token, delta in zip(pool.tokens, amount_deltas):
            if delta > 0:
                pool.ledger.mint(token, pool.address, delta)
