# Role-scoped read views over donations and reservations

from typing import List, Dict, Any

from .manager import StoreManager
from .models import Donation
from utils.validators import DONOR_ROLES

WEEKDAYS = ['Sun', 'Mon', 'Tue', 'Wed', 'Thu', 'Fri', 'Sat']


def _most_recent_first(items, key=lambda item: item.seq):
    return sorted(items, key=key, reverse=True)


class QueryOperations:
    """
    Derived views, recomputed from the store on every call.

    "Most recent first" always sorts on the integer creation sequence.
    """
    def __init__(self, store: StoreManager):
        self.store = store

    def _donations(self) -> List[Donation]:
        return self.store.read(self.store.donations.list)

    def query_donation_history(self, role: str) -> List[Donation]:
        """
        Donations a role accounts for.

        Donor roles see only their own donations; students and food banks see the
        whole community's donations.
        """
        donations = self._donations()
        if role in DONOR_ROLES:
            donations = [d for d in donations if d.donor_type == role]
        return _most_recent_first(donations)

    def query_available_donations(self, role: str) -> List[Donation]:
        """Available donations whose alert list includes the role, newest first"""
        return _most_recent_first(
            d for d in self._donations()
            if d.status == 'available' and role in d.alert_for
        )

    def query_reservation_history(self, role: str) -> List[Dict[str, Any]]:
        """
        Every reservation made by a role, across all donations, newest first.

        Each entry carries the reservation plus the donation id, food item, donor type
        and pickup location it belongs to.
        """
        entries = [
            self._reservation_entry(donation, reservation)
            for donation in self._donations()
            for reservation in donation.reservations
            if reservation.reserver_role == role
        ]
        return _most_recent_first(entries, key=lambda e: e['reservation'].seq)

    def query_confirmation_queues(self) -> Dict[str, List[Dict[str, Any]]]:
        """
        Staff pickup queues for dining hall donations.

        Returns:
            {"pending": [...], "completed": [...]}, each newest first
        """
        queues = {'pending': [], 'completed': []}
        for donation in self._donations():
            if donation.donor_type != 'dining-hall':
                continue
            for reservation in donation.reservations:
                queues[reservation.status].append(self._reservation_entry(donation, reservation))

        return {
            status: _most_recent_first(entries, key=lambda e: e['reservation'].seq)
            for status, entries in queues.items()
        }

    def query_donation_statistics(self, role: str) -> Dict[str, Any]:
        """
        Impact totals over the role's donation history.

        Returns:
            total servings donated, total lbs not wasted, and servings per weekday
            of creation (Sun..Sat)
        """
        donations = self.query_donation_history(role)

        weekly = {day: 0 for day in WEEKDAYS}
        for donation in donations:
            # datetime.weekday() is Monday=0
            day = WEEKDAYS[(donation.created_at.weekday() + 1) % 7]
            weekly[day] += donation.initial_servings

        return {
            'donation_count': len(donations),
            'total_servings': sum(d.initial_servings for d in donations),
            'total_food_weight_lbs': round(sum(d.food_weight_lbs for d in donations), 2),
            'weekly_servings': [{'day': day, 'servings': weekly[day]} for day in WEEKDAYS],
        }

    @staticmethod
    def _reservation_entry(donation: Donation, reservation) -> Dict[str, Any]:
        return {
            'donation_id': donation.id,
            'food_item': donation.food_item,
            'donor_type': donation.donor_type,
            'pickup_location': donation.pickup_location,
            'reservation': reservation,
        }
