"""
Tick ledger.

Each tick records the radius deposited at it and a snapshot of per-token fee
growth "outside" it, meaning on the far side of the boundary from where the
pool currently sits. Ticks are nested around the equal-price point, so a
tick is interior while the pool's tick pointer is below it.
"""
from dataclasses import dataclass, field
from typing import Dict, List
import logging

logger = logging.getLogger(__name__)


@dataclass
class TickInfo:
    """Per-tick liquidity and fee bookkeeping."""
    radius_gross: int = 0  # Total radius referencing the tick
    radius_net: int = 0  # Radius added when crossing toward the equal-price point
    fee_growth_outside: List[int] = field(default_factory=list)  # Q128 per token
    initialized: bool = False


@dataclass
class TickTable:
    """Mutable map of tick index to TickInfo for one pool."""
    token_count: int
    ticks: Dict[int, TickInfo] = field(default_factory=dict)

    def get(self, tick: int) -> TickInfo:
        """Tick info, or an empty record for an untouched tick."""
        info = self.ticks.get(tick)
        if info is None:
            return TickInfo(fee_growth_outside=[0] * self.token_count)
        return info

    def update(self,
               tick: int,
               current_tick: int,
               radius_delta: int,
               fee_growth_global: List[int]) -> bool:
        """
        Apply a radius change to a tick.

        On first initialization the fee-growth-outside snapshot is seeded: a
        tick that is interior starts with outside equal to the global growth
        so that no fees earned before the tick existed are attributed inside
        it, a boundary tick starts at zero.

        Args:
            tick: Tick being updated
            current_tick: Pool's current tick pointer
            radius_delta: Signed radius change
            fee_growth_global: Per-token global fee growth (Q128)

        Returns:
            True if the tick flipped between initialized and uninitialized
        """
        info = self.ticks.get(tick)
        if info is None:
            info = TickInfo(fee_growth_outside=[0] * self.token_count)
            self.ticks[tick] = info

        radius_gross_before = info.radius_gross
        radius_gross_after = radius_gross_before + radius_delta
        if radius_gross_after < 0:
            raise ValueError(
                f"Radius underflow at tick {tick}: {radius_gross_before} + {radius_delta}"
            )

        flipped = (radius_gross_after == 0) != (radius_gross_before == 0)

        if radius_gross_before == 0:
            if current_tick < tick:
                info.fee_growth_outside = list(fee_growth_global)
            else:
                info.fee_growth_outside = [0] * self.token_count
            info.initialized = True

        info.radius_gross = radius_gross_after
        info.radius_net += radius_delta

        if radius_gross_after == 0:
            info.initialized = False

        return flipped

    def cross(self, tick: int, fee_growth_global: List[int]) -> int:
        """
        Transition a tick across the pool's position.

        Inverts the fee-growth-outside snapshot in place and returns the
        tick's radius_net for the caller to apply to the interior radius.
        """
        info = self.ticks.get(tick)
        if info is None:
            logger.debug(f"Crossing untouched tick {tick}")
            return 0

        info.fee_growth_outside = [
            growth - outside
            for growth, outside in zip(fee_growth_global, info.fee_growth_outside)
        ]
        return info.radius_net

    def get_fee_growth_inside(self,
                              tick: int,
                              current_tick: int,
                              fee_growth_global: List[int]) -> List[int]:
        """
        Per-token fee growth accumulated while the tick was interior.

        For an interior tick that is the global growth minus the growth on the
        outside, for a boundary tick the outside snapshot already holds the
        growth from its interior period.
        """
        info = self.get(tick)
        if current_tick < tick:
            return [
                growth - outside
                for growth, outside in zip(fee_growth_global, info.fee_growth_outside)
            ]
        return list(info.fee_growth_outside)
