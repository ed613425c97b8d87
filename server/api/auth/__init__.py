# Authentication module

from .routes import router as auth_router
from .models import StaffLoginRequest, AccountLoginRequest, LoginResponse, TokenData

__all__ = [
    "auth_router",
    "StaffLoginRequest",
    "AccountLoginRequest",
    "LoginResponse",
    "TokenData"
]
