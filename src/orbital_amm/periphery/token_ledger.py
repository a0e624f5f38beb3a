"""
In-memory multi-token ledger.

Stands in for the token contracts a pool holds balances in. Accounts are
plain string addresses.
"""
from typing import Dict
import logging

from ..pool.errors import InvalidInputError, InsufficientBalanceError

logger = logging.getLogger(__name__)

LedgerSnapshot = Dict[str, Dict[str, int]]


class TokenLedger:
    """Balances of every token for every account."""

    def __init__(self):
        self.decimals: Dict[str, int] = {}
        self._balances: Dict[str, Dict[str, int]] = {}

    def create_token(self, symbol: str, decimals: int = 18) -> str:
        if symbol in self.decimals:
            raise InvalidInputError(f"Token {symbol} already exists")
        self.decimals[symbol] = decimals
        self._balances[symbol] = {}
        logger.debug(f"Created token {symbol} with {decimals} decimals")
        return symbol

    def _book(self, token: str) -> Dict[str, int]:
        book = self._balances.get(token)
        if book is None:
            raise InvalidInputError(f"Unknown token {token}")
        return book

    def balance_of(self, token: str, account: str) -> int:
        return self._book(token).get(account, 0)

    def mint(self, token: str, account: str, amount: int) -> None:
        """Faucet: credit new tokens to an account."""
        if amount < 0:
            raise InvalidInputError(f"Cannot mint negative amount {amount}")
        book = self._book(token)
        book[account] = book.get(account, 0) + amount

    def transfer(self, token: str, sender: str, recipient: str, amount: int) -> None:
        """
        Move tokens between accounts.

        Args:
            token: Token symbol
            sender: Account debited
            recipient: Account credited
            amount: Amount to move

        Raises:
            InsufficientBalanceError: If the sender holds less than amount
        """
        if amount < 0:
            raise InvalidInputError(f"Cannot transfer negative amount {amount}")
        book = self._book(token)
        balance = book.get(sender, 0)
        if balance < amount:
            raise InsufficientBalanceError(
                f"{sender} holds {balance} {token}, needs {amount}"
            )
        book[sender] = balance - amount
        book[recipient] = book.get(recipient, 0) + amount

    def snapshot(self) -> LedgerSnapshot:
        return {token: dict(book) for token, book in self._balances.items()}

    def restore(self, snapshot: LedgerSnapshot) -> None:
        self._balances = {token: dict(book) for token, book in snapshot.items()}
