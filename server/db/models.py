# Entity models: donations, reservations and organization accounts

from datetime import datetime
from typing import Annotated, Any, ClassVar, Dict, List, Literal, Optional, Union
from pydantic import BaseModel, ConfigDict, Field, model_validator

Role = Literal['dining-hall', 'student-group', 'food-bank', 'student']
DonationStatus = Literal['available', 'fully-reserved']
ReservationStatus = Literal['pending', 'completed']
AccountStatus = Literal['pending', 'approved', 'rejected']


def donation_status_for(remaining_servings: int) -> str:
    """Donation status is a pure function of the remaining servings"""
    return 'fully-reserved' if remaining_servings <= 0 else 'available'


def evolve(entity: BaseModel, **changes) -> BaseModel:
    """
    Return a validated copy of an entity with some fields replaced.

    Entities are never mutated in place; the store swaps whole records.
    """
    data = entity.model_dump()
    data.update(changes)
    return type(entity).model_validate(data)


class FoodSafetyInfo(BaseModel):
    """Donor's food safety checklist"""
    model_config = ConfigDict(frozen=True)

    safe_temp: bool
    not_contaminated: bool
    is_opened: bool
    time_out_in_hours: Optional[float] = Field(None, ge=0)


class AIAnalysis(BaseModel):
    """Structured summary returned by the image analysis service"""
    model_config = ConfigDict(frozen=True)

    food_name: str = ""
    summary: str = ""
    observations: List[str] = Field(default_factory=list)
    estimated_servings: Optional[int] = None
    estimated_weight_lbs: Optional[float] = None


class Reservation(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    seq: int
    created_at: datetime
    reserver_role: Role
    pickup_time: str
    servings_taken: int = Field(..., gt=0)
    status: ReservationStatus = 'pending'


class Donation(BaseModel):
    """
    A surplus food listing.

    initial_servings never changes after creation; remaining_servings moves with
    reservations and status always follows remaining_servings.
    """
    model_config = ConfigDict(frozen=True)

    id: str
    seq: int
    created_at: datetime
    food_item: str
    initial_servings: int = Field(..., gt=0)
    remaining_servings: int = Field(..., ge=0)
    food_weight_lbs: float = Field(..., ge=0)
    status: DonationStatus = 'available'
    donor_type: Role
    safety_info: FoodSafetyInfo
    reservations: List[Reservation] = Field(default_factory=list)
    pickup_location: str
    alert_for: List[Role] = Field(default_factory=list)
    allergens: Optional[List[str]] = None
    ai_analysis: Optional[AIAnalysis] = None
    alert_message: str = ""
    image_url: Optional[str] = None

    @model_validator(mode='after')
    def _check_servings(self):
        if self.remaining_servings > self.initial_servings:
            raise ValueError("remaining_servings cannot exceed initial_servings")
        if self.status != donation_status_for(self.remaining_servings):
            raise ValueError("status does not match remaining_servings")
        return self

    def find_reservation(self, reservation_id: str) -> Optional[Reservation]:
        for reservation in self.reservations:
            if reservation.id == reservation_id:
                return reservation
        return None


class BasePendingUser(BaseModel):
    """
    Organization account awaiting or holding staff approval.

    password_hash is only set while the account is approved.
    """
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    id: str
    seq: int
    created_at: datetime
    email: str = Field(..., min_length=3, max_length=254)
    phone_number: str = Field(..., min_length=1, max_length=40)
    status: AccountStatus = 'pending'
    password_hash: Optional[str] = None

    # field shown to staff and used in the approval email greeting
    display_field: ClassVar[str] = "email"

    @property
    def display_name(self) -> str:
        return getattr(self, self.display_field)

    def public_dict(self) -> Dict[str, Any]:
        """Account fields safe to return to staff (no password hash)"""
        data = self.model_dump(exclude={'password_hash'})
        data['has_password'] = self.password_hash is not None
        return data


class PendingStudentGroup(BasePendingUser):
    type: Literal['student-group'] = 'student-group'
    group_name: str = Field(..., min_length=1, max_length=200)
    college: str = Field(..., min_length=1, max_length=200)
    member_count: int = Field(..., ge=1)

    display_field: ClassVar[str] = "group_name"


class PendingFoodBank(BasePendingUser):
    type: Literal['food-bank'] = 'food-bank'
    business_name: str = Field(..., min_length=1, max_length=200)
    manager_name: str = Field(..., min_length=1, max_length=200)
    location: str = Field(..., min_length=1, max_length=500)
    purpose: str = Field(..., min_length=1, max_length=2000)

    display_field: ClassVar[str] = "manager_name"


PendingUser = Annotated[Union[PendingStudentGroup, PendingFoodBank], Field(discriminator='type')]

ACCOUNT_MODELS = {
    'student-group': PendingStudentGroup,
    'food-bank': PendingFoodBank,
}
