# Generative AI enrichment: donation alert text and food photo analysis

import base64
import binascii
import json
import logging
import math
import re
from typing import Dict, Any, Optional, Union

import httpx

from db.models import AIAnalysis
from utils.config import Config
from utils.exceptions import CollaboratorFailure
from utils.notifications import fallback_alert_message

logger = logging.getLogger(__name__)

ALERT_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "alertMessage": {"type": "STRING"},
    },
    "required": ["alertMessage"],
}

IMAGE_ANALYSIS_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "foodName": {"type": "STRING"},
        "summary": {"type": "STRING"},
        "observations": {"type": "ARRAY", "items": {"type": "STRING"}},
        "estimatedServings": {"type": "NUMBER"},
        "estimatedWeightLbs": {"type": "NUMBER"},
    },
    "required": ["foodName", "summary", "observations", "estimatedServings", "estimatedWeightLbs"],
}

IMAGE_ANALYSIS_PROMPT = (
    "Analyze this image of surplus food. Follow these steps for a consistent result: "
    "1. Identify the container (e.g., 'full standard catering tray'). 2. Identify the food itself. "
    "3. Based on the container, food type, and standard portion sizes, provide a logical, integer "
    "estimate of the number of servings. 4. Based on the food type, density, and volume, provide a "
    "logical, float estimate of the food's total weight in pounds (lbs). 5. Provide a brief summary. "
    "6. List 2-3 visual observations. Your response must be valid JSON matching the schema."
)

FALLBACK_ANALYSIS = AIAnalysis(
    food_name="",
    summary="AI analysis could not be performed on the image.",
    observations=["Please describe the food manually."],
    estimated_servings=None,
    estimated_weight_lbs=None,
)

_DATA_URL_PREFIX = re.compile(r'^data:[^,]*;base64,')


def normalize_image_payload(image: Union[bytes, str]) -> Dict[str, str]:
    """
    Turn an uploaded photo into an inline-data part.

    Accepts raw bytes, base64 text or a data URL; the MIME type is sniffed from the
    JPEG/PNG signatures.

    Returns:
        {"mime_type", "data"} with data as base64 text

    Raises:
        CollaboratorFailure: empty or undecodable payload
    """
    if isinstance(image, (bytes, bytearray)):
        raw_base64 = base64.b64encode(bytes(image)).decode('ascii')
    elif isinstance(image, str):
        raw_base64 = _DATA_URL_PREFIX.sub('', image.strip())
        try:
            base64.b64decode(raw_base64, validate=True)
        except (binascii.Error, ValueError):
            raise CollaboratorFailure("Image payload is not valid base64")
    else:
        raise CollaboratorFailure("Unsupported image payload")

    if not raw_base64:
        raise CollaboratorFailure("Image payload is empty")

    if raw_base64.startswith('/9j'):
        mime_type = 'image/jpeg'
    elif raw_base64.startswith('iVBOR'):
        mime_type = 'image/png'
    else:
        mime_type = 'application/octet-stream'

    return {"mime_type": mime_type, "data": raw_base64}


def image_data_url(image: Union[bytes, str]) -> Optional[str]:
    """Data URL for storing a donation photo, or None when the payload is unusable"""
    try:
        inline = normalize_image_payload(image)
    except CollaboratorFailure:
        return None
    return f"data:{inline['mime_type']};base64,{inline['data']}"


def _optional_number(value: Any, cast):
    if value is None:
        return None
    try:
        number = cast(round(value)) if cast is int else cast(value)
    except (TypeError, ValueError, OverflowError):
        return None
    if not math.isfinite(number) or number <= 0:
        return None
    return number


class GenAIService:
    """
    Client for the Gemini generateContent endpoint.

    Both public calls are best-effort enrichments: failures are logged and replaced by
    fallback values, never raised. Without an API key the service runs in mock mode and
    returns the fallbacks directly.
    """

    def __init__(self, settings: Optional[Dict[str, Any]] = None,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        """
        Args:
            settings: the 'genai' config section; read from Config when omitted
            transport: httpx transport override (tests)
        """
        if settings is None:
            settings = Config().section('genai')

        self.api_key = settings.get('api_key') or None
        self.model = settings.get('model', 'gemini-2.5-flash')
        self.base_url = settings.get('base_url', 'https://generativelanguage.googleapis.com/v1beta').rstrip('/')
        self.timeout = float(settings.get('timeout_seconds', 20))
        self.transport = transport

        if not self.api_key:
            logger.warning("GenAI API key not configured, using fallback enrichment")
            self.mock_mode = True
        else:
            self.mock_mode = False

    async def generate_alert_message(self, food_item: str, servings: int) -> Dict[str, str]:
        """
        Generate the notification text for a new donation.

        Returns:
            {"alert_message": str}
        """
        fallback = {"alert_message": fallback_alert_message(food_item, servings)}
        if self.mock_mode:
            return fallback

        prompt = (
            f'A university dining hall has a surplus of {servings} servings of "{food_item}". '
            "Generate a concise, urgent, and friendly alert message for local charities and students."
        )

        try:
            data = await self._generate_json([{"text": prompt}], ALERT_SCHEMA, temperature=0.7)
        except CollaboratorFailure as e:
            logger.warning(f"Alert generation failed, using fallback: {e.message}")
            return fallback

        message = data.get("alertMessage")
        if not isinstance(message, str) or not message.strip():
            return fallback
        return {"alert_message": message.strip()}

    async def analyze_food_image(self, image: Union[bytes, str]) -> AIAnalysis:
        """
        Describe a food photo and estimate servings and weight.

        Args:
            image: raw bytes, base64 text or data URL

        Returns:
            AIAnalysis, or the fallback analysis on any failure
        """
        if self.mock_mode:
            return FALLBACK_ANALYSIS

        try:
            inline = normalize_image_payload(image)
            data = await self._generate_json(
                [{"text": IMAGE_ANALYSIS_PROMPT}, {"inline_data": inline}],
                IMAGE_ANALYSIS_SCHEMA,
                temperature=0,
            )
        except CollaboratorFailure as e:
            logger.warning(f"Image analysis failed, using fallback: {e.message}")
            return FALLBACK_ANALYSIS

        observations = data.get("observations")
        if not isinstance(observations, list):
            observations = []

        return AIAnalysis(
            food_name=str(data.get("foodName") or ""),
            summary=str(data.get("summary") or "Could not generate summary."),
            observations=[str(o) for o in observations] or ["No specific observations available."],
            estimated_servings=_optional_number(data.get("estimatedServings"), int),
            estimated_weight_lbs=_optional_number(data.get("estimatedWeightLbs"), float),
        )

    async def _generate_json(self, parts, schema: Dict[str, Any], temperature: float) -> Dict[str, Any]:
        """
        Call generateContent with a JSON response schema and parse the reply.

        Raises:
            CollaboratorFailure: transport error, non-2xx status, or unexpected reply shape
        """
        url = f"{self.base_url}/models/{self.model}:generateContent"
        payload = {
            "contents": [{"parts": parts}],
            "generationConfig": {
                "responseMimeType": "application/json",
                "responseSchema": schema,
                "temperature": temperature,
            },
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(url, params={"key": self.api_key}, json=payload)
                response.raise_for_status()
                body = response.json()
        except httpx.HTTPStatusError as e:
            raise CollaboratorFailure(f"GenAI returned HTTP {e.response.status_code}")
        except httpx.HTTPError as e:
            raise CollaboratorFailure(f"GenAI request failed: {e}")
        except ValueError:
            raise CollaboratorFailure("GenAI reply is not JSON")

        try:
            text = body["candidates"][0]["content"]["parts"][0]["text"]
            data = json.loads(text.strip())
        except (KeyError, IndexError, TypeError, AttributeError, ValueError):
            raise CollaboratorFailure("GenAI reply has an unexpected shape")

        if not isinstance(data, dict):
            raise CollaboratorFailure("GenAI reply is not a JSON object")
        return data
