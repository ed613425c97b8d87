# Authentication request/response models

from typing import Optional
from pydantic import BaseModel, Field


class StaffLoginRequest(BaseModel):
    """Dining hall staff sign-in"""
    password: str = Field(..., min_length=1, description="Staff password")


class AccountLoginRequest(BaseModel):
    """Student group / food bank sign-in"""
    email: str = Field(..., min_length=3, max_length=254, description="Account email")
    password: str = Field(..., min_length=1, description="Password issued at approval")


class LoginResponse(BaseModel):
    access_token: str
    token_type: str = "Bearer"
    expires_in: int
    role: str
    account_id: Optional[str] = None


class TokenData(BaseModel):
    """Claims carried by an access token"""
    role: str
    account_id: Optional[str] = None
