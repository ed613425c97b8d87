# Inventory allocation: donation creation and the reservation lifecycle

import logging
from typing import Dict, Any, Optional

from .manager import StoreManager
from .models import (
    Donation, Reservation, FoodSafetyInfo, AIAnalysis, donation_status_for, evolve
)
from utils.exceptions import ValidationError, NotFoundError
from utils.validators import validate_positive_integer, validate_non_blank

logger = logging.getLogger(__name__)

# used when the image analysis gives no weight estimate
FALLBACK_LBS_PER_SERVING = 1.25

DEFAULT_ALERT_FOR = {
    'dining-hall': ['student', 'student-group', 'food-bank'],
    'student-group': ['student', 'student-group'],
}


def estimate_food_weight(servings: int, ai_analysis: Optional[AIAnalysis] = None) -> float:
    """
    Weight in lbs: the analysis estimate when usable, otherwise servings x 1.25.
    """
    if ai_analysis is not None and ai_analysis.estimated_weight_lbs:
        if ai_analysis.estimated_weight_lbs > 0:
            return float(ai_analysis.estimated_weight_lbs)
    return servings * FALLBACK_LBS_PER_SERVING


class DonationOperations:
    """
    Donation and reservation mutations.

    remaining_servings is the only guard against over-allocation: it is decremented on
    reserve and refunded on cancel. Reservations never expire.
    """
    def __init__(self, store: StoreManager):
        self.store = store

    def get_donation(self, donation_id: str) -> Donation:
        return self.store.read(lambda: self.store.donations.require(donation_id))

    def create_donation(self, data: Dict[str, Any], donor_role: str) -> Donation:
        """
        Create a donation listing.

        Required fields are checked upstream (request schema); this assigns identity,
        sets remaining_servings to initial_servings and starts with no reservations.

        Args:
            data: food_item, initial_servings, pickup_location, safety_info and optionally
                  food_weight_lbs, alert_for, allergens, ai_analysis, alert_message, image_url
            donor_role: role creating the donation

        Returns:
            the new Donation
        """
        def create_donation_operation():
            donation_id, seq, created_at = self.store.next_identity('donation')

            servings = data['initial_servings']
            ai_analysis = data.get('ai_analysis')
            if isinstance(ai_analysis, dict):
                ai_analysis = AIAnalysis(**ai_analysis)

            food_weight_lbs = data.get('food_weight_lbs')
            if food_weight_lbs is None:
                food_weight_lbs = estimate_food_weight(servings, ai_analysis)

            alert_for = data.get('alert_for') or DEFAULT_ALERT_FOR.get(donor_role, [])
            # allergen declarations only come from dining hall kitchens
            allergens = data.get('allergens') if donor_role == 'dining-hall' else None

            safety_info = data['safety_info']
            if isinstance(safety_info, dict):
                safety_info = FoodSafetyInfo(**safety_info)

            donation = Donation(
                id=donation_id,
                seq=seq,
                created_at=created_at,
                food_item=data['food_item'],
                initial_servings=servings,
                remaining_servings=servings,
                food_weight_lbs=food_weight_lbs,
                status='available',
                donor_type=donor_role,
                safety_info=safety_info,
                reservations=[],
                pickup_location=data['pickup_location'],
                alert_for=list(dict.fromkeys(alert_for)),
                allergens=list(allergens) if allergens else None,
                ai_analysis=ai_analysis,
                alert_message=data.get('alert_message', ''),
                image_url=data.get('image_url'),
            )
            return self.store.donations.add(donation)

        donation = self.store.run(create_donation_operation)
        logger.info(
            f"Donation {donation.id} created by {donor_role}: "
            f"{donation.initial_servings} servings of {donation.food_item}"
        )
        return donation

    def reserve(self, donation_id: str, requester_role: str, pickup_time: str,
                servings_taken: int) -> Reservation:
        """
        Claim servings from a donation.

        Args:
            donation_id: donation to reserve from
            requester_role: role of the reserver
            pickup_time: free-text pickup time, must not be blank
            servings_taken: positive int not above the current remaining servings

        Returns:
            the new pending Reservation

        Raises:
            ValidationError: blank pickup time or invalid servings; nothing changes
            NotFoundError: unknown donation
        """
        def reserve_operation():
            donation = self.store.donations.require(donation_id)

            if not validate_non_blank(pickup_time):
                raise ValidationError("Please provide a pickup time.", field='pickup_time')

            if (not validate_positive_integer(servings_taken)
                    or servings_taken > donation.remaining_servings):
                raise ValidationError(
                    f"Please enter a valid number of servings (1-{donation.remaining_servings}).",
                    field='servings_taken'
                )

            reservation_id, seq, created_at = self.store.next_identity('reservation')
            reservation = Reservation(
                id=reservation_id,
                seq=seq,
                created_at=created_at,
                reserver_role=requester_role,
                pickup_time=pickup_time,
                servings_taken=servings_taken,
                status='pending',
            )

            remaining = donation.remaining_servings - servings_taken
            self.store.donations.replace(evolve(
                donation,
                remaining_servings=remaining,
                status=donation_status_for(remaining),
                reservations=donation.reservations + [reservation],
            ))
            return reservation, remaining

        try:
            reservation, remaining = self.store.run(reserve_operation)
        except ValidationError as e:
            logger.warning(f"Reservation on {donation_id} rejected: {e.message}")
            raise

        logger.info(
            f"Reservation {reservation.id} on {donation_id}: {servings_taken} servings "
            f"for {requester_role}, {remaining} left"
        )
        return reservation

    def cancel_reservation(self, donation_id: str, reservation_id: str) -> Donation:
        """
        Remove a reservation and refund its servings.

        The donation always goes back to 'available' afterwards, whatever other
        reservations remain.

        Returns:
            the updated Donation

        Raises:
            NotFoundError: unknown donation or reservation
        """
        def cancel_operation():
            donation = self.store.donations.require(donation_id)
            reservation = self._require_reservation(donation, reservation_id)

            return self.store.donations.replace(evolve(
                donation,
                remaining_servings=donation.remaining_servings + reservation.servings_taken,
                status='available',
                reservations=[r for r in donation.reservations if r.id != reservation_id],
            ))

        donation = self.store.run(cancel_operation)
        logger.info(
            f"Reservation {reservation_id} on {donation_id} cancelled, "
            f"{donation.remaining_servings} servings available"
        )
        return donation

    def complete_pickup(self, donation_id: str, reservation_id: str) -> Reservation:
        """
        Mark a reservation as picked up.

        Servings were already deducted when reserving, so only the reservation status
        changes.

        Raises:
            NotFoundError: unknown donation or reservation
        """
        def complete_operation():
            donation = self.store.donations.require(donation_id)
            reservation = self._require_reservation(donation, reservation_id)

            completed = evolve(reservation, status='completed')
            self.store.donations.replace(evolve(
                donation,
                reservations=[completed if r.id == reservation_id else r
                              for r in donation.reservations],
            ))
            return completed

        completed = self.store.run(complete_operation)
        logger.info(f"Reservation {reservation_id} on {donation_id} completed")
        return completed

    def _require_reservation(self, donation: Donation, reservation_id: str) -> Reservation:
        reservation = donation.find_reservation(reservation_id)
        if reservation is None:
            raise NotFoundError(f"Reservation {reservation_id} not found on donation {donation.id}")
        return reservation
