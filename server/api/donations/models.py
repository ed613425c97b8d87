# Donation and reservation request models

from typing import List, Optional, Literal
from pydantic import BaseModel, Field, model_validator

ReserverRole = Literal['student', 'student-group', 'food-bank']


class SafetyChecklist(BaseModel):
    """Food safety answers; a donation is only accepted with favourable answers"""
    safe_temp: bool = Field(..., description="Stored at a safe temperature")
    not_contaminated: bool = Field(..., description="Protected from contamination")
    is_opened: bool = Field(..., description="Package has been opened")
    time_out_in_hours: Optional[float] = Field(None, ge=0, description="Hours out since opening")

    @model_validator(mode='after')
    def _check_favourable(self):
        if not self.safe_temp or not self.not_contaminated:
            raise ValueError("answer the safety questions favourably before donating")
        if self.is_opened and self.time_out_in_hours is None:
            raise ValueError("time_out_in_hours is required when the food has been opened")
        if not self.is_opened:
            self.time_out_in_hours = None
        return self


class AIAnalysisPayload(BaseModel):
    food_name: str = ""
    summary: str = ""
    observations: List[str] = Field(default_factory=list)
    estimated_servings: Optional[int] = Field(None, ge=1)
    estimated_weight_lbs: Optional[float] = Field(None, gt=0)


class CreateDonationRequest(BaseModel):
    food_item: str = Field(..., min_length=1, max_length=200, description="Food description")
    servings: int = Field(..., gt=0, description="Number of servings")
    pickup_location: str = Field(..., min_length=1, max_length=200, description="Pickup location")
    safety_info: SafetyChecklist
    alert_for: List[ReserverRole] = Field(..., min_length=1, description="Roles to notify")
    allergens: Optional[List[str]] = Field(None, description="Allergens (dining hall only)")
    image_base64: str = Field(..., min_length=1, description="Photo as base64 or data URL")
    ai_analysis: Optional[AIAnalysisPayload] = Field(None, description="Result of /analyze, if run")

    @model_validator(mode='after')
    def _strip_text(self):
        self.food_item = self.food_item.strip()
        self.pickup_location = self.pickup_location.strip()
        if not self.food_item or not self.pickup_location:
            raise ValueError("food_item and pickup_location must not be blank")
        return self


class AnalyzeImageRequest(BaseModel):
    image_base64: str = Field(..., min_length=1, description="Photo as base64 or data URL")


class ReserveRequest(BaseModel):
    """
    Reservation request.

    servings_taken must be a JSON integer; range and pickup time rules are enforced by
    the allocation operations so the caller gets a field-level message.
    """
    pickup_time: str = Field("", max_length=200, description="When the food will be collected")
    servings_taken: int = Field(..., strict=True, description="Servings to reserve")
