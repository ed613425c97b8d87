# Security helpers: JWT session tokens and password hashing

import hmac
import jwt
from datetime import datetime, timedelta, timezone
from typing import Dict, Any, Optional
from passlib.context import CryptContext


class JWTManager:
    """
    JWT access token manager
    """

    def __init__(self, secret_key: str, algorithm: str = "HS256",
                 access_token_expire_minutes: int = 1440):
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.access_token_expire_minutes = access_token_expire_minutes

    def create_access_token(self, data: Dict[str, Any]) -> str:
        """
        Create an access token.

        Args:
            data: claims to encode (role, account_id)

        Returns:
            encoded JWT
        """
        to_encode = data.copy()

        now = datetime.now(timezone.utc)
        expire = now + timedelta(minutes=self.access_token_expire_minutes)
        to_encode.update({"exp": expire, "iat": now})

        return jwt.encode(to_encode, self.secret_key, algorithm=self.algorithm)

    def decode_token(self, token: str) -> Optional[Dict[str, Any]]:
        """
        Verify and decode a token.

        Returns:
            claims, or None when the token is expired or invalid
        """
        try:
            return jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except jwt.ExpiredSignatureError:
            return None
        except jwt.InvalidTokenError:
            return None


# salted one-way hashes; verify() compares in constant time
pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: Optional[str]) -> bool:
    """
    Check a password against a stored hash.

    Args:
        plain_password: password supplied at sign-in
        hashed_password: stored hash; None means no usable password

    Returns:
        True on match
    """
    if not plain_password or not hashed_password:
        return False
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except ValueError:
        # malformed hash
        return False


def verify_shared_secret(supplied: str, configured: Optional[str]) -> bool:
    """Constant-time comparison for the configured staff password"""
    if not supplied or not configured:
        return False
    return hmac.compare_digest(supplied.encode('utf-8'), configured.encode('utf-8'))
