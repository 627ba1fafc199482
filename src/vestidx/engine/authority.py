"""Single-authority gate for issuance entry points."""

import logging
from dataclasses import dataclass

from .errors import Unauthorized

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Authority:
    """Stored issuer identity checked by every gated operation."""
    address: str

    def is_authority(self, caller: str) -> bool:
        return caller == self.address

    def require(self, caller: str, operation: str) -> None:
        """Raise Unauthorized unless caller is the authority."""
        if not self.is_authority(caller):
            logger.debug("Rejected %s from non-authority %s", operation, caller)
            raise Unauthorized(details={"operation": operation, "caller": caller})
