#!/usr/bin/env python3
"""
Live scenario check against a running server.

Walks the reservation cycle (reserve to sell-out, over-reserve, cancel) and the
account approval cycle (register, approve, sign in, revoke) through the HTTP API.

Usage:
    CONFIG_ENV=development uvicorn api.main:app --port 8000
    python scripts/scenario_check.py [base_url]
"""

import os
import sys
import requests

BASE_URL = sys.argv[1] if len(sys.argv) > 1 else "http://localhost:8000"
STAFF_PASSWORD = os.environ.get("STAFF_PASSWORD", "ValDonation")

# smallest payload that sniffs as JPEG
JPEG_BASE64 = "/9j/4AAQSkZJRg=="


class APIClient:
    def __init__(self, base_url):
        self.base_url = base_url
        self.token = None

    def _headers(self):
        return {"Authorization": f"Bearer {self.token}"} if self.token else {}

    def call(self, method, path, expected=(200, 201), **kwargs):
        response = requests.request(method, f"{self.base_url}{path}", headers=self._headers(), **kwargs)
        if response.status_code not in expected:
            raise Exception(f"{method} {path} returned {response.status_code}: {response.text}")
        return response.json()

    def sign_in_staff(self):
        result = self.call("POST", "/api/auth/staff/login", json={"password": STAFF_PASSWORD})
        self.token = result["data"]["access_token"]
        print("✅ Staff signed in")

    def sign_in_student(self):
        self.token = self.call("POST", "/api/auth/student")["data"]["access_token"]
        print("✅ Student session started")

    def sign_in_account(self, email, password, expected=(200,)):
        result = self.call("POST", "/api/auth/login", expected=expected,
                           json={"email": email, "password": password})
        if result.get("success"):
            self.token = result["data"]["access_token"]
        return result


def reservation_scenario():
    print("\n=== Reservation cycle ===")
    staff = APIClient(BASE_URL)
    staff.sign_in_staff()

    donation = staff.call("POST", "/api/donations", json={
        "food_item": "Scenario Pasta",
        "servings": 10,
        "pickup_location": "Valentine Dining Hall",
        "safety_info": {"safe_temp": True, "not_contaminated": True, "is_opened": False},
        "alert_for": ["student", "student-group", "food-bank"],
        "image_base64": JPEG_BASE64,
    })["data"]
    print(f"✅ Donation {donation['id']}: {donation['alert_message']}")

    student = APIClient(BASE_URL)
    student.sign_in_student()
    url = f"/api/donations/{donation['id']}/reservations"

    first = student.call("POST", url, json={"pickup_time": "5pm", "servings_taken": 5})["data"]
    assert first["remaining_servings"] == 5 and first["donation_status"] == "available"
    print("✅ Reserved 5, 5 left")

    second = student.call("POST", url, json={"pickup_time": "6pm", "servings_taken": 5})["data"]
    assert second["donation_status"] == "fully-reserved"
    print("✅ Reserved 5, fully reserved")

    refused = student.call("POST", url, expected=(400,), json={"pickup_time": "7pm", "servings_taken": 1})
    print(f"✅ Over-reservation refused: {refused['error']}")

    reopened = student.call("DELETE", f"{url}/{first['reservation']['id']}")["data"]
    assert reopened["remaining_servings"] == 5 and reopened["status"] == "available"
    print("✅ Cancelled first reservation, 5 available again")


def approval_scenario():
    print("\n=== Approval cycle ===")
    email = "scenario-pantry@example.org"
    public = APIClient(BASE_URL)

    account = public.call("POST", "/api/accounts/register", json={
        "type": "food-bank",
        "email": email,
        "phone_number": "413-555-0123",
        "business_name": "Scenario Pantry",
        "manager_name": "Alex Scenario",
        "location": "1 Test Rd",
        "purpose": "Scenario check",
    })["data"]
    print(f"✅ Registered {account['id']} ({account['status']})")

    staff = APIClient(BASE_URL)
    staff.sign_in_staff()
    approved = staff.call("POST", f"/api/accounts/{account['id']}/approve", json={"password": "tempPass123"})
    print(f"✅ Approved, email preview subject: {approved['data']['email_preview']['subject']}")

    member = APIClient(BASE_URL)
    member.sign_in_account(email, "tempPass123")
    print(f"✅ Signed in as {member.call('GET', '/api/auth/me')['data']['role']}")

    staff.call("POST", f"/api/accounts/{account['id']}/revoke")
    member.call("GET", "/api/auth/me", expected=(401,))
    APIClient(BASE_URL).sign_in_account(email, "tempPass123", expected=(401,))
    print("✅ Revoked account can no longer sign in")

    staff.call("POST", f"/api/accounts/{account['id']}/reject")
    staff.call("DELETE", f"/api/accounts/{account['id']}")
    print("✅ Rejected and deleted")


if __name__ == "__main__":
    try:
        reservation_scenario()
        approval_scenario()
    except Exception as e:
        print(f"❌ Scenario failed: {e}")
        sys.exit(1)

    print("\n=== All scenarios passed ===")
