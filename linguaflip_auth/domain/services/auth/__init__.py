from .account_security import AccountSecurityTracker
from .password import PasswordCredentialManager
from .token import JwtTokenSigner, TokenIssuer, parse_duration

__all__ = [
    "AccountSecurityTracker",
    "PasswordCredentialManager",
    "JwtTokenSigner",
    "TokenIssuer",
    "parse_duration",
]
