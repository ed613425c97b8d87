# Organization account module

from .routes import router as accounts_router
from .models import RegisterRequest, ApproveRequest

__all__ = [
    "accounts_router",
    "RegisterRequest",
    "ApproveRequest"
]
