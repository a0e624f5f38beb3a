"""Position ledger keyed by (owner, tick)."""
from dataclasses import dataclass, field
from typing import Dict, List, Tuple

from ..curve.fixed_point import Q128, mul_div


@dataclass
class PositionInfo:
    """Liquidity and fee bookkeeping for one owner at one tick."""
    radius: int = 0
    fee_growth_inside_last: List[int] = field(default_factory=list)  # Q128 per token
    tokens_owed: List[int] = field(default_factory=list)


@dataclass
class PositionBook:
    """All positions of one pool."""
    token_count: int
    positions: Dict[Tuple[str, int], PositionInfo] = field(default_factory=dict)

    def get(self, owner: str, tick: int) -> PositionInfo:
        """Position for (owner, tick), created empty on first access."""
        key = (owner, tick)
        position = self.positions.get(key)
        if position is None:
            position = PositionInfo(
                fee_growth_inside_last=[0] * self.token_count,
                tokens_owed=[0] * self.token_count
            )
            self.positions[key] = position
        return position

    def peek(self, owner: str, tick: int) -> PositionInfo:
        """Read-only lookup that does not create a record."""
        position = self.positions.get((owner, tick))
        if position is None:
            return PositionInfo(
                fee_growth_inside_last=[0] * self.token_count,
                tokens_owed=[0] * self.token_count
            )
        return position

    @staticmethod
    def update(position: PositionInfo,
               radius_delta: int,
               fee_growth_inside: List[int]) -> None:
        """
        Credit fees earned since the last update, then apply a radius change.

        owed_i += radius * (inside_i - inside_last_i) / Q128

        Args:
            position: Position to update
            radius_delta: Signed radius change, zero to only refresh fees
            fee_growth_inside: Current per-token fee growth inside the tick
        """
        if radius_delta == 0 and position.radius == 0:
            raise ValueError("Cannot refresh fees of an empty position")

        radius_after = position.radius + radius_delta
        if radius_after < 0:
            raise ValueError(f"Position radius underflow: {position.radius} + {radius_delta}")

        position.tokens_owed = [
            owed + mul_div(inside - last, position.radius, Q128)
            for owed, inside, last in zip(
                position.tokens_owed, fee_growth_inside, position.fee_growth_inside_last
            )
        ]
        position.fee_growth_inside_last = list(fee_growth_inside)
        position.radius = radius_after
