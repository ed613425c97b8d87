# Reservation history and staff pickup confirmation views

import logging
from typing import Dict, Any, List
from fastapi import APIRouter, Depends

from api.auth.routes import get_staff_user, get_store, require_roles
from api.auth.models import TokenData
from db.manager import StoreManager
from db.query_operations import QueryOperations
from utils.response import create_success_response
from utils.validators import RESERVER_ROLES

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/reservations", tags=["reservations"])


def serialize_entries(entries: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Flatten query entries into JSON-ready dicts"""
    return [
        {**entry, "reservation": entry["reservation"].model_dump(mode="json")}
        for entry in entries
    ]


@router.get("/mine", response_model=Dict[str, Any])
async def my_reservations(
    current_user: TokenData = Depends(require_roles(*RESERVER_ROLES)),
    store: StoreManager = Depends(get_store)
):
    """Every reservation made by the caller's role, newest first"""
    entries = QueryOperations(store).query_reservation_history(current_user.role)
    return create_success_response(data=serialize_entries(entries), message="OK")


@router.get("/confirmations", response_model=Dict[str, Any])
async def confirmation_queues(
    current_staff: TokenData = Depends(get_staff_user),
    store: StoreManager = Depends(get_store)
):
    """
    Pickup queues for dining hall donations.

    Returns:
        {"pending": [...], "completed": [...]}
    """
    queues = QueryOperations(store).query_confirmation_queues()
    response_data = {status: serialize_entries(entries) for status, entries in queues.items()}
    return create_success_response(data=response_data, message="OK")
