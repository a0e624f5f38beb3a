"""
Callback interfaces implemented by pool callers.

The pool hands out tokens first and then calls back into the caller, which
must transfer what it owes before returning. The pool verifies the transfer
through balance deltas afterwards.
"""
from abc import ABC, abstractmethod
from typing import Any, List


class OrbitalMintCallback(ABC):
    """Caller of OrbitalPool.mint."""

    address: str

    @abstractmethod
    def orbital_mint_callback(self, pool: Any, amounts_owed: List[int], data: Any) -> None:
        """
        Pay the deposit for a mint.

        Args:
            pool: Pool requesting payment
            amounts_owed: Amount of each token owed to the pool
            data: Opaque data passed through from the mint call
        """
        pass


class OrbitalSwapCallback(ABC):
    """Caller of OrbitalPool.swap."""

    address: str

    @abstractmethod
    def orbital_swap_callback(self, pool: Any, amount_deltas: List[int], data: Any) -> None:
        """
        Pay the input of a swap.

        The output has already been sent to the recipient when this is called.

        Args:
            pool: Pool requesting payment
            amount_deltas: Per-token signed deltas, positive entries are owed
            data: Opaque data passed through from the swap call
        """
        pass


class OrbitalFlashCallback(ABC):
    """Caller of OrbitalPool.flash."""

    address: str

    @abstractmethod
    def orbital_flash_callback(self, pool: Any, amounts: List[int], data: Any) -> None:
        """
        Use and repay a flash loan.

        May call other pool entry points, but not flash again.

        Args:
            pool: Lending pool
            amounts: Amount of each token lent
            data: Opaque data passed through from the flash call
        """
        pass
