# Token and password helper tests

from utils.security import (
    JWTManager, hash_password, verify_password, verify_shared_secret
)
from utils.notifications import generate_approval_email_content, fallback_alert_message
from utils.validators import validate_positive_integer, validate_email


class TestJWTManager:
    """Access tokens"""

    def test_round_trip_claims(self):
        manager = JWTManager("secret", access_token_expire_minutes=5)
        token = manager.create_access_token({"role": "food-bank", "account_id": "ACC-000001"})

        claims = manager.decode_token(token)
        assert claims["role"] == "food-bank"
        assert claims["account_id"] == "ACC-000001"

    def test_wrong_secret_rejected(self):
        token = JWTManager("secret").create_access_token({"role": "student"})
        assert JWTManager("other").decode_token(token) is None

    def test_expired_token_rejected(self):
        manager = JWTManager("secret", access_token_expire_minutes=-1)
        token = manager.create_access_token({"role": "student"})
        assert manager.decode_token(token) is None

    def test_garbage_token_rejected(self):
        assert JWTManager("secret").decode_token("not-a-token") is None


class TestPasswords:
    """Password hashing"""

    def test_hash_is_salted(self):
        first = hash_password("pw1")
        second = hash_password("pw1")
        assert first != second
        assert verify_password("pw1", first)
        assert verify_password("pw1", second)

    def test_wrong_or_missing(self):
        hashed = hash_password("pw1")
        assert not verify_password("pw2", hashed)
        assert not verify_password("pw1", None)
        assert not verify_password("", hashed)
        assert not verify_password("pw1", "not-a-hash")

    def test_shared_secret(self):
        assert verify_shared_secret("ValDonation", "ValDonation")
        assert not verify_shared_secret("valdonation", "ValDonation")
        assert not verify_shared_secret("anything", None)


class TestNotifications:
    """Rendered notification content"""

    def test_approval_email(self):
        email = generate_approval_email_content("Cooking Club", "club@amherst.edu", "pw1")

        assert email.to == "club@amherst.edu"
        assert email.subject == "Your Mammoth ReServe Account is Approved!"
        assert email.body.startswith("Hello Cooking Club,")
        assert "password: pw1" in email.body
        assert email.to_dict()["subject"] == email.subject

    def test_fallback_alert(self):
        assert fallback_alert_message("Soup", 4) == "Alert: 4 servings of Soup are available for pickup now!"


class TestValidators:
    """Shared validators"""

    def test_positive_integer(self):
        assert validate_positive_integer(3)
        assert not validate_positive_integer(0)
        assert not validate_positive_integer(True)
        assert not validate_positive_integer("3")
        assert not validate_positive_integer(3.0)

    def test_email(self):
        assert validate_email(" club@amherst.edu ")
        assert not validate_email("club@amherst")
        assert not validate_email(None)
