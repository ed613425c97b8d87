# Donation and reservation module

from .routes import router as donations_router, get_genai_service
from .models import CreateDonationRequest, AnalyzeImageRequest, ReserveRequest
from .genai_service import GenAIService

__all__ = [
    "donations_router",
    "get_genai_service",
    "CreateDonationRequest",
    "AnalyzeImageRequest",
    "ReserveRequest",
    "GenAIService"
]
