"""In-memory collaborators: tokens, staking, treasury."""

from .rebasing import RebasingToken, StakingPool
from .token import StaticToken, TransferError
from .treasury import Treasury

__all__ = ["RebasingToken", "StakingPool", "StaticToken", "TransferError", "Treasury"]
