# Organization account request models

from typing import Literal, Optional
from pydantic import BaseModel, Field


class RegisterRequest(BaseModel):
    """
    Organization registration.

    Student groups fill group_name, college and member_count; food banks fill
    business_name, manager_name, location and purpose. The type-specific fields are
    checked by the account workflow.
    """
    type: Literal['student-group', 'food-bank'] = Field(..., description="Account type")
    email: str = Field(..., min_length=3, max_length=254, description="Contact email")
    phone_number: str = Field(..., min_length=1, max_length=40, description="Contact phone number")

    group_name: Optional[str] = None
    college: Optional[str] = None
    member_count: Optional[int] = Field(None, ge=1)

    business_name: Optional[str] = None
    manager_name: Optional[str] = None
    location: Optional[str] = None
    purpose: Optional[str] = None


class ApproveRequest(BaseModel):
    password: str = Field(..., min_length=1, description="Temporary password for the account")
