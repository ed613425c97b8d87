# Store manager and repository tests

import pytest
from pydantic import ValidationError as SchemaError

from db.manager import StoreManager
from db.models import Donation, evolve
from db.repository import InMemoryRepository
from utils.exceptions import NotFoundError


class TestStoreManager:
    """Identity allocation and transactions"""

    def test_next_identity_is_monotonic(self, store):
        first = store.next_identity('donation')
        second = store.next_identity('reservation')
        third = store.next_identity('account')

        assert first[0] == "DON-000001"
        assert second[0] == "RES-000002"
        assert third[0] == "ACC-000003"
        assert first[1] < second[1] < third[1]
        assert first[2].tzinfo is not None

    def test_transaction_returns_results_in_order(self, store):
        assert store.execute_transaction([lambda: 1, lambda: 2]) == [1, 2]

    def test_empty_transaction(self, store):
        assert store.execute_transaction([]) == []

    def test_failed_transaction_rolls_back(self, store, dining_hall_donation):
        def update():
            store.donations.replace(evolve(dining_hall_donation, food_item="Changed"))

        def fail():
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError):
            store.execute_transaction([update, fail])

        assert store.donations.get(dining_hall_donation.id).food_item == "Pasta"

    def test_failed_add_rolls_back(self, store, dining_hall_donation):
        def add_then_fail():
            store.donations.add(evolve(dining_hall_donation, id="DON-999999"))
            raise ValueError("boom")

        with pytest.raises(ValueError):
            store.run(add_then_fail)

        assert [d.id for d in store.donations.list()] == [dining_hall_donation.id]

    def test_custom_repositories(self):
        donations = InMemoryRepository("Donation")
        store = StoreManager(donations=donations)
        assert store.donations is donations


class TestInMemoryRepository:
    """Repository contract"""

    def test_require_missing(self):
        repository = InMemoryRepository("Donation")
        with pytest.raises(NotFoundError):
            repository.require("DON-000001")

    def test_add_duplicate(self, store, dining_hall_donation):
        with pytest.raises(ValueError):
            store.donations.add(dining_hall_donation)

    def test_delete_missing(self):
        with pytest.raises(NotFoundError):
            InMemoryRepository("Account").delete("ACC-000001")


class TestDonationModel:
    """Entity invariants"""

    def test_status_must_follow_remaining(self, dining_hall_donation):
        with pytest.raises(SchemaError):
            evolve(dining_hall_donation, remaining_servings=0)

    def test_remaining_cannot_exceed_initial(self, dining_hall_donation):
        with pytest.raises(SchemaError):
            evolve(dining_hall_donation, remaining_servings=11)

    def test_entities_are_frozen(self, dining_hall_donation):
        with pytest.raises(SchemaError):
            dining_hall_donation.remaining_servings = 0

    def test_evolve_keeps_original(self, dining_hall_donation):
        updated = evolve(dining_hall_donation, remaining_servings=0, status='fully-reserved')
        assert isinstance(updated, Donation)
        assert updated.status == 'fully-reserved'
        assert dining_hall_donation.remaining_servings == 10
