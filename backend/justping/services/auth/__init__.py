from .authenticator import AuthContext, RequestAuthenticator
from .dto import ChangePasswordIn, LoginIn, LoginOut, LogoutIn, RefreshIn, UserProfileOut
from .service import AuthService

__all__ = [
    "AuthContext",
    "AuthService",
    "ChangePasswordIn",
    "LoginIn",
    "LoginOut",
    "LogoutIn",
    "RefreshIn",
    "RequestAuthenticator",
    "UserProfileOut",
]
