# Reservation views module

from .routes import router as reservations_router

__all__ = ["reservations_router"]
