"""Mutable pool state and swap results."""
from dataclasses import dataclass, field
from typing import List, NamedTuple

from ..ticks import TickTable, TickBitmap, PositionBook


@dataclass
class PoolState:
    """
    State of an Orbital pool.

    The curve is described by the aggregates alone: sum_reserves (S) and
    sum_squares (Q) of the reserve vector, the interior radius and the two
    boundary aggregates. Reserves exclude fee_reserves, which are held for
    liquidity providers and the protocol and never price swaps.
    """
    token_count: int
    tick_spacing: int
    sum_reserves: int = 0
    sum_squares: int = 0
    radius: int = 0  # Interior radius
    boundary_k: int = 0  # Sum of k_norm * r_i over boundary ticks
    boundary_s: int = 0  # Sum of orthogonal circle radii over boundary ticks
    tick: int = 0  # Current tick pointer
    initialized: bool = False
    fee_growth_global: List[int] = field(default_factory=list)  # Q128 per token
    protocol_fees: List[int] = field(default_factory=list)
    fee_reserves: List[int] = field(default_factory=list)
    ticks: TickTable = None
    bitmap: TickBitmap = None
    positions: PositionBook = None

    def __post_init__(self):
        n = self.token_count
        if not self.fee_growth_global:
            self.fee_growth_global = [0] * n
        if not self.protocol_fees:
            self.protocol_fees = [0] * n
        if not self.fee_reserves:
            self.fee_reserves = [0] * n
        if self.ticks is None:
            self.ticks = TickTable(n)
        if self.bitmap is None:
            self.bitmap = TickBitmap(self.tick_spacing)
        if self.positions is None:
            self.positions = PositionBook(n)


class SwapResult(NamedTuple):
    """Outcome of a swap."""
    amount_in: int  # Gross input including fee
    amount_out: int
    amount_deltas: List[int]  # Per token, positive into the pool
    fee_amount: int
    protocol_fee: int
    sum_reserves_before: int
    sum_reserves_after: int
    tick_after: int
    radius_after: int
    ticks_crossed: List[int]


class MintResult(NamedTuple):
    radius: int
    amounts: List[int]
