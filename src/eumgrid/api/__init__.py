"""Authenticated API access."""

from .auth import AuthService, LoginResponse
from .coordinator import RefreshState, TokenRefreshCoordinator
from .service import ApiService, ResponseEnvelope
from .transport import AuthenticatedTransport

__all__ = [
    "ApiService",
    "AuthService",
    "AuthenticatedTransport",
    "LoginResponse",
    "RefreshState",
    "ResponseEnvelope",
    "TokenRefreshCoordinator",
]
