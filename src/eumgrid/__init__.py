"""eumgrid - authenticated data access and server-described grids."""

from .api import ApiService, AuthenticatedTransport, AuthService, ResponseEnvelope, TokenRefreshCoordinator
from .config import Settings, get_settings
from .grid import GridOptions, GridRequestFactory, GridRequestOrchestrator, QueryState, create_grid_request
from .session import InMemorySessionStore, SessionSnapshot, UserInfo, session_terminated

__version__ = "0.1.0"

__all__ = [
    "ApiService",
    "AuthService",
    "AuthenticatedTransport",
    "GridOptions",
    "GridRequestFactory",
    "GridRequestOrchestrator",
    "InMemorySessionStore",
    "QueryState",
    "ResponseEnvelope",
    "SessionSnapshot",
    "Settings",
    "TokenRefreshCoordinator",
    "UserInfo",
    "create_grid_request",
    "get_settings",
    "session_terminated",
]
