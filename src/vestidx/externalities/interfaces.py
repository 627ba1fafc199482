"""Collaborator interfaces consumed by the vesting ledgers.

The ledgers only depend on these shapes. Every mutating method takes the
acting address first, standing in for the transaction sender.
"""

from typing import Protocol


class IndexSource(Protocol):
    def index(self) -> int:
        """Exchange-rate scalar, 1e18-scaled, starts at 1e18, never decreases."""
        ...


class SupplySource(Protocol):
    def total_supply(self) -> int:
        ...


class FungibleToken(SupplySource, Protocol):
    def balance_of(self, address: str) -> int:
        ...

    def transfer(self, sender: str, to: str, amount: int) -> bool:
        ...

    def transfer_from(self, spender: str, owner: str, to: str, amount: int) -> bool:
        ...

    def approve(self, owner: str, spender: str, amount: int) -> bool:
        ...


class YieldTransform(Protocol):
    def stake(self, caller: str, recipient: str, amount: int) -> int:
        """Convert caller's static tokens into the yield-bearing receipt for recipient."""
        ...


class MintTransform(Protocol):
    def reserve_backing_ratio(self) -> int:
        """Payment units per claim unit, 1e18-scaled."""
        ...

    def mint(self, caller: str, recipient: str, amount: int) -> int:
        ...

    def is_approved_minter(self, address: str) -> bool:
        ...

    def burn(self, caller: str, owner: str, amount: int) -> int:
        """Undo a mint for `caller`."""
        ...

    def refund(self, caller: str, recipient: str, amount: int) -> int:
        """Return a payment received for `caller`."""
        ...
