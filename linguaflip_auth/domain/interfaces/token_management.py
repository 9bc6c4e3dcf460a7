"""Token signing capability interface.

The token issuer depends on this abstraction rather than on a JWT library so
any signed-token primitive (JWT, PASETO, HMAC-signed opaque token) can satisfy
the contract.
"""

from abc import ABC, abstractmethod
from datetime import timedelta
from typing import Any, Dict, Mapping


class TokenVerificationError(Exception):
    """Raised by a signer when a token is malformed, tampered with or expired."""


class ITokenSigner(ABC):
    """Signs claims and verifies signed tokens."""

    @abstractmethod
    def sign(self, claims: Mapping[str, Any], secret: str, ttl: timedelta) -> str:
        """Return a token carrying ``claims`` plus issued-at/expiry claims."""
        raise NotImplementedError

    @abstractmethod
    def verify(self, token: str, secret: str) -> Dict[str, Any]:
        """Return the claims of ``token``.

        Raises:
            TokenVerificationError: On any signature, format or expiry failure.
        """
        raise NotImplementedError
