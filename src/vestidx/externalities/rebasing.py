"""Rebasing receipt token and staking pool.

Key Concepts:
- Receipt balances are stored index-adjusted; static balance = stored * index / 1e18
- rebase_to() raises the index, growing every holder's static balance at once
- Staking converts static tokens 1:1 into receipt value at the current index
"""

import logging
from typing import Dict

from ..engine.units import SCALE
from .token import StaticToken, TransferError

logger = logging.getLogger(__name__)


class RebasingToken:
    """Yield-bearing receipt whose static balances drift upward with the index."""

    def __init__(self, symbol: str, minter: str, initial_index: int = SCALE):
        if initial_index <= 0:
            raise ValueError(f"Initial index must be positive, got {initial_index}")
        self.symbol = symbol
        self.minter = minter
        self._index = initial_index
        self._ia_balances: Dict[str, int] = {}
        self._total_ia = 0

    def index(self) -> int:
        return self._index

    def rebase_to(self, new_index: int) -> int:
        """Raise the index. Decreases are rejected."""
        if new_index < self._index:
            raise ValueError(f"Index is monotonic: {new_index} < {self._index}")
        logger.debug("%s rebase %d -> %d", self.symbol, self._index, new_index)
        self._index = new_index
        return self._index

    def to_index_adjusted(self, amount: int) -> int:
        return amount * SCALE // self._index

    def index_adjusted_balance_of(self, address: str) -> int:
        return self._ia_balances.get(address, 0)

    def balance_of(self, address: str) -> int:
        return self.index_adjusted_balance_of(address) * self._index // SCALE

    def total_supply(self) -> int:
        return self._total_ia * self._index // SCALE

    def transfer(self, sender: str, to: str, amount: int) -> bool:
        """Move `amount` static units, debiting their index-adjusted equivalent."""
        if amount < 0:
            raise TransferError(f"Negative transfer: {amount}")
        ia = self.to_index_adjusted(amount)
        held = self.index_adjusted_balance_of(sender)
        if ia > held:
            raise TransferError(
                f"{self.symbol}: balance {self.balance_of(sender)} of {sender} below {amount}"
            )
        self._ia_balances[sender] = held - ia
        self._ia_balances[to] = self.index_adjusted_balance_of(to) + ia
        return True

    def mint_static(self, caller: str, to: str, amount: int) -> int:
        """Credit `amount` static units to `to`. Returns index-adjusted credit."""
        if caller != self.minter:
            raise TransferError(f"{self.symbol}: {caller} is not the minter")
        ia = self.to_index_adjusted(amount)
        self._ia_balances[to] = self.index_adjusted_balance_of(to) + ia
        self._total_ia += ia
        return ia

    def burn_static(self, caller: str, owner: str, amount: int) -> int:
        if caller != self.minter:
            raise TransferError(f"{self.symbol}: {caller} is not the minter")
        ia = self.to_index_adjusted(amount)
        held = self.index_adjusted_balance_of(owner)
        if ia > held:
            raise TransferError(f"{self.symbol}: cannot burn {amount} from {owner}")
        self._ia_balances[owner] = held - ia
        self._total_ia -= ia
        return ia


class StakingPool:
    """Converts static tokens into the rebasing receipt and back."""

    def __init__(self, static_token: StaticToken, receipt: RebasingToken, address: str = "staking"):
        self.static_token = static_token
        self.receipt = receipt
        self.address = address

    def index(self) -> int:
        return self.receipt.index()

    def stake(self, caller: str, recipient: str, amount: int) -> int:
        """Pull `amount` static tokens from caller and credit the receipt to recipient."""
        if amount <= 0:
            raise ValueError(f"Stake amount must be positive, got {amount}")
        self.static_token.transfer(caller, self.address, amount)
        return self.receipt.mint_static(self.address, recipient, amount)

    def unstake(self, caller: str, recipient: str, amount: int) -> int:
        """
        Burn caller's receipt and pay static tokens to recipient.

        Rebase growth beyond the pool's static backing is minted, so the pool
        must be a minter on the static token.
        """
        if amount <= 0:
            raise ValueError(f"Unstake amount must be positive, got {amount}")
        self.receipt.burn_static(self.address, caller, amount)
        shortfall = amount - self.static_token.balance_of(self.address)
        if shortfall > 0:
            self.static_token.mint(self.address, self.address, shortfall)
        self.static_token.transfer(self.address, recipient, amount)
        return amount
