"""
SHIELD Auth - Flows

Orchestrateurs des opérations publiques:
- RegisterUser, LoginUser, RefreshSession, LogoutUser
- AuthenticateAccessToken, RevokeUserSessions, SweepExpiredTokens
"""

from .interfaces import AuthResult, LoginContext, LogoutResult, PublicUser, TokenPair
from .base import BaseFlow, INVALID_EMAIL_MESSAGE
from .register_user import RegisterUser
from .login_user import LoginUser, INVALID_CREDENTIALS_MESSAGE
from .refresh_session import RefreshSession
from .logout_user import LogoutUser, LOGOUT_MESSAGE
from .maintenance import (
    AuthenticateAccessToken,
    RevokeUserSessions,
    SweepExpiredTokens,
    SweepReport,
)

__all__ = [
    # Results
    "AuthResult",
    "LoginContext",
    "LogoutResult",
    "PublicUser",
    "TokenPair",
    "SweepReport",
    # Flows
    "BaseFlow",
    "RegisterUser",
    "LoginUser",
    "RefreshSession",
    "LogoutUser",
    "AuthenticateAccessToken",
    "RevokeUserSessions",
    "SweepExpiredTokens",
    # Constants
    "INVALID_CREDENTIALS_MESSAGE",
    "INVALID_EMAIL_MESSAGE",
    "LOGOUT_MESSAGE",
]
