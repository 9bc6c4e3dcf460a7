"""Domain interfaces for dependency inversion.

- Repositories: user document persistence
- Security: audit sink
- Token management: signed-token capability
"""

from .repositories import IUserRepository, RepositoryResult
from .security import ISecurityAuditor, SecurityEventSeverity
from .token_management import ITokenSigner, TokenVerificationError

__all__ = [
    "IUserRepository",
    "RepositoryResult",
    "ISecurityAuditor",
    "SecurityEventSeverity",
    "ITokenSigner",
    "TokenVerificationError",
]
