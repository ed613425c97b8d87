# Donation listing, views and reservation routes

import logging
from functools import lru_cache
from typing import Dict, Any
from fastapi import APIRouter, Depends, Path, status

from .models import CreateDonationRequest, AnalyzeImageRequest, ReserveRequest
from .genai_service import GenAIService, image_data_url
from api.auth.routes import get_current_user, get_store, require_roles
from api.auth.models import TokenData
from db.manager import StoreManager
from db.donation_operations import DonationOperations
from db.query_operations import QueryOperations
from db.models import AIAnalysis, Donation
from utils.exceptions import NotFoundError, ValidationError
from utils.response import create_success_response
from utils.validators import DONOR_ROLES, RESERVER_ROLES

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/donations", tags=["donations"])

get_donor = require_roles(*DONOR_ROLES)
get_reserver = require_roles(*RESERVER_ROLES)


@lru_cache(maxsize=1)
def get_genai_service() -> GenAIService:
    """Shared enrichment client (overridden in tests)"""
    return GenAIService()


def donation_to_dict(donation: Donation) -> Dict[str, Any]:
    return donation.model_dump(mode="json")


@router.post("/analyze", response_model=Dict[str, Any])
async def analyze_image(
    analyze_request: AnalyzeImageRequest,
    current_user: TokenData = Depends(get_donor),
    genai: GenAIService = Depends(get_genai_service)
):
    """Suggest food name, servings and weight from a photo; falls back on failure"""
    analysis = await genai.analyze_food_image(analyze_request.image_base64)
    return create_success_response(data=analysis.model_dump(), message="Image analyzed")


@router.post("", response_model=Dict[str, Any], status_code=status.HTTP_201_CREATED)
async def create_donation(
    donation_request: CreateDonationRequest,
    current_user: TokenData = Depends(get_donor),
    store: StoreManager = Depends(get_store),
    genai: GenAIService = Depends(get_genai_service)
):
    """
    Post a surplus food donation.

    The alert text comes from the enrichment service, or the fixed template when it
    is unavailable; the donation is created either way.
    """
    image_url = image_data_url(donation_request.image_base64)
    if image_url is None:
        raise ValidationError("Please upload a photo of the food.", field='image_base64')

    alert = await genai.generate_alert_message(donation_request.food_item, donation_request.servings)

    ai_analysis = None
    if donation_request.ai_analysis is not None:
        ai_analysis = AIAnalysis(**donation_request.ai_analysis.model_dump())

    donation = DonationOperations(store).create_donation(
        {
            "food_item": donation_request.food_item,
            "initial_servings": donation_request.servings,
            "pickup_location": donation_request.pickup_location,
            "safety_info": donation_request.safety_info.model_dump(),
            "alert_for": donation_request.alert_for,
            "allergens": donation_request.allergens,
            "ai_analysis": ai_analysis,
            "alert_message": alert["alert_message"],
            "image_url": image_url,
        },
        current_user.role
    )

    return create_success_response(
        data=donation_to_dict(donation),
        message=f"Success! Alert for {donation.initial_servings} servings of {donation.food_item} sent."
    )


@router.get("/history", response_model=Dict[str, Any])
async def donation_history(
    current_user: TokenData = Depends(get_current_user),
    store: StoreManager = Depends(get_store)
):
    """Own donations for donor roles, all donations for students and food banks"""
    donations = QueryOperations(store).query_donation_history(current_user.role)
    return create_success_response(data=[donation_to_dict(d) for d in donations], message="OK")


@router.get("/available", response_model=Dict[str, Any])
async def available_donations(
    current_user: TokenData = Depends(get_current_user),
    store: StoreManager = Depends(get_store)
):
    donations = QueryOperations(store).query_available_donations(current_user.role)
    return create_success_response(data=[donation_to_dict(d) for d in donations], message="OK")


@router.get("/stats", response_model=Dict[str, Any])
async def donation_stats(
    current_user: TokenData = Depends(get_current_user),
    store: StoreManager = Depends(get_store)
):
    stats = QueryOperations(store).query_donation_statistics(current_user.role)
    return create_success_response(data=stats, message="OK")


@router.get("/{donation_id}", response_model=Dict[str, Any])
async def get_donation(
    donation_id: str = Path(..., description="Donation ID"),
    current_user: TokenData = Depends(get_current_user),
    store: StoreManager = Depends(get_store)
):
    donation = DonationOperations(store).get_donation(donation_id)
    return create_success_response(data=donation_to_dict(donation), message="OK")


@router.post("/{donation_id}/reservations", response_model=Dict[str, Any],
             status_code=status.HTTP_201_CREATED)
async def reserve_donation(
    reserve_request: ReserveRequest,
    donation_id: str = Path(..., description="Donation ID"),
    current_user: TokenData = Depends(get_reserver),
    store: StoreManager = Depends(get_store)
):
    """Reserve servings for pickup"""
    operations = DonationOperations(store)
    reservation = operations.reserve(
        donation_id,
        current_user.role,
        reserve_request.pickup_time,
        reserve_request.servings_taken
    )
    donation = operations.get_donation(donation_id)

    return create_success_response(
        data={
            "reservation": reservation.model_dump(mode="json"),
            "remaining_servings": donation.remaining_servings,
            "donation_status": donation.status
        },
        message=f"Reserved {reservation.servings_taken} servings of {donation.food_item}"
    )


@router.delete("/{donation_id}/reservations/{reservation_id}", response_model=Dict[str, Any])
async def cancel_reservation(
    donation_id: str = Path(..., description="Donation ID"),
    reservation_id: str = Path(..., description="Reservation ID"),
    current_user: TokenData = Depends(get_current_user),
    store: StoreManager = Depends(get_store)
):
    """
    Cancel a reservation and return its servings.

    Allowed for the reserving role, and for staff marking a pickup as not completed.
    """
    operations = DonationOperations(store)
    reservation = _require_reservation(operations, donation_id, reservation_id)

    if current_user.role != "dining-hall" and reservation.reserver_role != current_user.role:
        raise PermissionError("Only the reserving role or staff can cancel this reservation")

    donation = operations.cancel_reservation(donation_id, reservation_id)
    return create_success_response(
        data=donation_to_dict(donation),
        message=f"Reservation cancelled, {donation.remaining_servings} servings available"
    )


@router.post("/{donation_id}/reservations/{reservation_id}/complete", response_model=Dict[str, Any])
async def complete_pickup(
    donation_id: str = Path(..., description="Donation ID"),
    reservation_id: str = Path(..., description="Reservation ID"),
    current_user: TokenData = Depends(get_current_user),
    store: StoreManager = Depends(get_store)
):
    """
    Confirm a pickup.

    Staff confirm pickups of dining hall donations; for student group donations the
    reserving role confirms it.
    """
    operations = DonationOperations(store)
    donation = operations.get_donation(donation_id)
    reservation = _require_reservation(operations, donation_id, reservation_id)

    if donation.donor_type == "dining-hall":
        allowed = current_user.role == "dining-hall"
    else:
        allowed = current_user.role == reservation.reserver_role
    if not allowed:
        raise PermissionError("Not allowed to confirm this pickup")

    completed = operations.complete_pickup(donation_id, reservation_id)
    return create_success_response(data=completed.model_dump(mode="json"), message="Pickup completed")


def _require_reservation(operations: DonationOperations, donation_id: str, reservation_id: str):
    reservation = operations.get_donation(donation_id).find_reservation(reservation_id)
    if reservation is None:
        raise NotFoundError(f"Reservation {reservation_id} not found on donation {donation_id}")
    return reservation
