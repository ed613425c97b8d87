# Test configuration and fixtures

import pytest
import os
import sys
from pathlib import Path
from fastapi.testclient import TestClient

project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

os.environ['CONFIG_ENV'] = 'development'

from api.main import app
from api.auth.routes import get_store
from api.donations import get_genai_service, GenAIService
from db.manager import StoreManager
from db.donation_operations import DonationOperations
from db.account_operations import AccountOperations
from db.query_operations import QueryOperations

STAFF_PASSWORD = os.environ.get('STAFF_PASSWORD', 'ValDonation')
ACCOUNT_PASSWORD = "temp-pass-1"

# smallest payload that sniffs as JPEG
JPEG_BASE64 = "/9j/4AAQSkZJRg=="

STUDENT_GROUP_REGISTRATION = {
    "email": "club@amherst.edu",
    "phone_number": "413-555-0100",
    "group_name": "Cooking Club",
    "college": "Amherst College",
    "member_count": 12,
}

FOOD_BANK_REGISTRATION = {
    "email": "manager@pantry.org",
    "phone_number": "413-555-0199",
    "business_name": "Valley Pantry",
    "manager_name": "Sam Rivera",
    "location": "12 Main St, Amherst",
    "purpose": "Weekly meals for local families",
}


@pytest.fixture
def store():
    """Fresh in-memory store per test"""
    return StoreManager()


@pytest.fixture
def donation_ops(store):
    return DonationOperations(store)


@pytest.fixture
def account_ops(store):
    return AccountOperations(store)


@pytest.fixture
def query_ops(store):
    return QueryOperations(store)


@pytest.fixture
def make_donation(donation_ops):
    """Factory creating a donation through the operations layer"""
    def factory(donor_role='dining-hall', **overrides):
        data = {
            "food_item": "Pasta",
            "initial_servings": 10,
            "pickup_location": "Valentine Dining Hall",
            "safety_info": {"safe_temp": True, "not_contaminated": True, "is_opened": False},
        }
        data.update(overrides)
        return donation_ops.create_donation(data, donor_role)

    return factory


@pytest.fixture
def dining_hall_donation(make_donation):
    """Dining hall donation of 10 servings"""
    return make_donation('dining-hall')


@pytest.fixture
def student_group_donation(make_donation):
    """Student group donation of 6 servings"""
    return make_donation(
        'student-group', food_item="Bagels", initial_servings=6, pickup_location="Keefe Campus Center"
    )


@pytest.fixture
def student_group_registration():
    return dict(STUDENT_GROUP_REGISTRATION)


@pytest.fixture
def food_bank_registration():
    return dict(FOOD_BANK_REGISTRATION)


@pytest.fixture
def pending_group(account_ops, student_group_registration):
    return account_ops.register(student_group_registration, 'student-group')


@pytest.fixture
def pending_food_bank(account_ops, food_bank_registration):
    return account_ops.register(food_bank_registration, 'food-bank')


@pytest.fixture
def client(store):
    """FastAPI test client bound to the per-test store, enrichment in fallback mode"""
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_genai_service] = lambda: GenAIService(settings={})
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def donation_payload():
    """Valid POST /api/donations body"""
    return {
        "food_item": "Vegetable Curry",
        "servings": 20,
        "pickup_location": "Valentine Dining Hall",
        "safety_info": {"safe_temp": True, "not_contaminated": True, "is_opened": False},
        "alert_for": ["student", "student-group", "food-bank"],
        "allergens": ["peanuts"],
        "image_base64": JPEG_BASE64,
    }


def _bearer(token):
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def student_headers(client):
    response = client.post("/api/auth/student")
    assert response.status_code == 200
    return _bearer(response.json()["data"]["access_token"])


@pytest.fixture
def staff_headers(client):
    response = client.post("/api/auth/staff/login", json={"password": STAFF_PASSWORD})
    assert response.status_code == 200
    return _bearer(response.json()["data"]["access_token"])


def _approved_account_headers(client, account_ops, registration, account_type):
    account = account_ops.register(dict(registration), account_type)
    account_ops.approve(account.id, ACCOUNT_PASSWORD)
    response = client.post(
        "/api/auth/login",
        json={"email": registration["email"], "password": ACCOUNT_PASSWORD}
    )
    assert response.status_code == 200
    return _bearer(response.json()["data"]["access_token"]), account.id


@pytest.fixture
def group_login(client, account_ops):
    """(headers, account_id) for an approved student group"""
    return _approved_account_headers(client, account_ops, STUDENT_GROUP_REGISTRATION, 'student-group')


@pytest.fixture
def food_bank_login(client, account_ops):
    """(headers, account_id) for an approved food bank"""
    return _approved_account_headers(client, account_ops, FOOD_BANK_REGISTRATION, 'food-bank')
