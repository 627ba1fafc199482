"""In-memory fungible token with allowances and gated minting."""

import logging
from typing import Dict, Iterable, Optional, Set, Tuple

logger = logging.getLogger(__name__)


class TransferError(ValueError):
    """Balance, allowance, or mint permission failure."""


class StaticToken:
    """Plain fungible token: value-conserving transfers, no fees."""

    def __init__(self, symbol: str, minters: Optional[Iterable[str]] = None):
        """
        Initialize token.

        Args:
            symbol: Token symbol (display only)
            minters: Addresses allowed to mint
        """
        self.symbol = symbol
        self._balances: Dict[str, int] = {}
        self._allowances: Dict[Tuple[str, str], int] = {}
        self._total_supply = 0
        self.minters: Set[str] = set(minters or [])

    def total_supply(self) -> int:
        return self._total_supply

    def balance_of(self, address: str) -> int:
        return self._balances.get(address, 0)

    def allowance(self, owner: str, spender: str) -> int:
        return self._allowances.get((owner, spender), 0)

    def approve(self, owner: str, spender: str, amount: int) -> bool:
        if amount < 0:
            raise TransferError(f"Negative allowance: {amount}")
        self._allowances[(owner, spender)] = amount
        return True

    def transfer(self, sender: str, to: str, amount: int) -> bool:
        self._move(sender, to, amount)
        return True

    def transfer_from(self, spender: str, owner: str, to: str, amount: int) -> bool:
        allowed = self.allowance(owner, spender)
        if amount > allowed:
            raise TransferError(
                f"{self.symbol}: allowance {allowed} of {owner} for {spender} below {amount}"
            )
        self._move(owner, to, amount)
        self._allowances[(owner, spender)] = allowed - amount
        return True

    def add_minter(self, address: str) -> None:
        self.minters.add(address)

    def mint(self, caller: str, to: str, amount: int) -> int:
        if caller not in self.minters:
            raise TransferError(f"{self.symbol}: {caller} is not a minter")
        if amount < 0:
            raise TransferError(f"Negative mint: {amount}")
        self._balances[to] = self.balance_of(to) + amount
        self._total_supply += amount
        return amount

    def burn(self, caller: str, owner: str, amount: int) -> int:
        if caller not in self.minters:
            raise TransferError(f"{self.symbol}: {caller} is not a minter")
        balance = self.balance_of(owner)
        if amount < 0 or amount > balance:
            raise TransferError(f"{self.symbol}: cannot burn {amount} from balance {balance}")
        self._balances[owner] = balance - amount
        self._total_supply -= amount
        return amount

    def _move(self, sender: str, to: str, amount: int) -> None:
        if amount < 0:
            raise TransferError(f"Negative transfer: {amount}")
        balance = self.balance_of(sender)
        if amount > balance:
            raise TransferError(
                f"{self.symbol}: balance {balance} of {sender} below {amount}"
            )
        self._balances[sender] = balance - amount
        self._balances[to] = self.balance_of(to) + amount
