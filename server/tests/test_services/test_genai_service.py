# Enrichment service tests, run against an httpx mock transport

import asyncio
import base64
import json

import httpx
import pytest

from api.donations.genai_service import (
    GenAIService, FALLBACK_ANALYSIS, normalize_image_payload, image_data_url
)
from utils.exceptions import CollaboratorFailure

SETTINGS = {
    "api_key": "test-key",
    "model": "gemini-2.5-flash",
    "base_url": "https://genai.test/v1beta",
    "timeout_seconds": 5,
}

JPEG_BASE64 = "/9j/4AAQSkZJRg=="


def gemini_reply(payload):
    """Wrap a JSON object the way generateContent returns it"""
    return {"candidates": [{"content": {"parts": [{"text": json.dumps(payload)}]}}]}


def service_with(handler):
    return GenAIService(settings=SETTINGS, transport=httpx.MockTransport(handler))


class TestAlertMessage:
    """Alert text generation"""

    def test_generated_message(self):
        seen = {}

        def handler(request):
            seen['url'] = str(request.url)
            seen['body'] = json.loads(request.content)
            return httpx.Response(200, json=gemini_reply({"alertMessage": " Free pasta now! "}))

        result = asyncio.run(service_with(handler).generate_alert_message("Pasta", 10))

        assert result == {"alert_message": "Free pasta now!"}
        assert "models/gemini-2.5-flash:generateContent" in seen['url']
        assert "key=test-key" in seen['url']
        assert "10 servings" in seen['body']['contents'][0]['parts'][0]['text']

    def test_http_error_falls_back(self):
        service = service_with(lambda request: httpx.Response(500, json={"error": "down"}))
        result = asyncio.run(service.generate_alert_message("Pasta", 10))
        assert result == {"alert_message": "Alert: 10 servings of Pasta are available for pickup now!"}

    def test_unexpected_shape_falls_back(self):
        service = service_with(lambda request: httpx.Response(200, json={"candidates": []}))
        result = asyncio.run(service.generate_alert_message("Soup", 3))
        assert result["alert_message"] == "Alert: 3 servings of Soup are available for pickup now!"

    def test_connection_error_falls_back(self):
        def handler(request):
            raise httpx.ConnectError("unreachable", request=request)

        result = asyncio.run(service_with(handler).generate_alert_message("Soup", 3))
        assert result["alert_message"].startswith("Alert: 3 servings")

    def test_mock_mode_without_key(self):
        service = GenAIService(settings={})
        assert service.mock_mode is True
        result = asyncio.run(service.generate_alert_message("Rice", 5))
        assert result["alert_message"] == "Alert: 5 servings of Rice are available for pickup now!"


class TestImageAnalysis:
    """Food photo analysis"""

    def test_analysis_parsed(self):
        seen = {}

        def handler(request):
            seen['body'] = json.loads(request.content)
            return httpx.Response(200, json=gemini_reply({
                "foodName": "Vegetable Lasagna",
                "summary": "Half tray of lasagna",
                "observations": ["foil tray", "cheese topping"],
                "estimatedServings": 11.6,
                "estimatedWeightLbs": 8.5,
            }))

        analysis = asyncio.run(service_with(handler).analyze_food_image(JPEG_BASE64))

        assert analysis.food_name == "Vegetable Lasagna"
        assert analysis.estimated_servings == 12
        assert analysis.estimated_weight_lbs == 8.5
        assert analysis.observations == ["foil tray", "cheese topping"]
        inline = seen['body']['contents'][0]['parts'][1]['inline_data']
        assert inline['mime_type'] == 'image/jpeg'

    def test_invalid_estimates_dropped(self):
        def handler(request):
            return httpx.Response(200, json=gemini_reply({
                "foodName": "Salad",
                "summary": "Bowl of salad",
                "observations": [],
                "estimatedServings": 0,
                "estimatedWeightLbs": "heavy",
            }))

        analysis = asyncio.run(service_with(handler).analyze_food_image(JPEG_BASE64))

        assert analysis.estimated_servings is None
        assert analysis.estimated_weight_lbs is None
        assert analysis.observations == ["No specific observations available."]

    def test_non_finite_estimates_dropped(self):
        def handler(request):
            # 1e400 is valid JSON and parses to inf
            text = ('{"foodName": "Rice", "summary": "Pot of rice", "observations": ["lid"], '
                    '"estimatedServings": 1e400, "estimatedWeightLbs": 1e400}')
            return httpx.Response(200, json={"candidates": [{"content": {"parts": [{"text": text}]}}]})

        analysis = asyncio.run(service_with(handler).analyze_food_image(JPEG_BASE64))

        assert analysis.food_name == "Rice"
        assert analysis.estimated_servings is None
        assert analysis.estimated_weight_lbs is None

    def test_non_json_text_falls_back(self):
        def handler(request):
            return httpx.Response(200, json={"candidates": [{"content": {"parts": [{"text": "not json"}]}}]})

        analysis = asyncio.run(service_with(handler).analyze_food_image(JPEG_BASE64))
        assert analysis == FALLBACK_ANALYSIS

    def test_bad_image_falls_back_without_request(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(200, json=gemini_reply({}))

        analysis = asyncio.run(service_with(handler).analyze_food_image("%%% not base64 %%%"))

        assert analysis == FALLBACK_ANALYSIS
        assert calls == []

    def test_mock_mode_returns_fallback(self):
        analysis = asyncio.run(GenAIService(settings={}).analyze_food_image(JPEG_BASE64))
        assert analysis == FALLBACK_ANALYSIS


class TestImagePayload:
    """Image payload normalization"""

    def test_data_url_prefix_stripped(self):
        inline = normalize_image_payload(f"data:image/jpeg;base64,{JPEG_BASE64}")
        assert inline == {"mime_type": "image/jpeg", "data": JPEG_BASE64}

    def test_png_bytes(self):
        inline = normalize_image_payload(b"\x89PNG\r\n\x1a\n")
        assert inline['mime_type'] == 'image/png'
        assert base64.b64decode(inline['data']) == b"\x89PNG\r\n\x1a\n"

    @pytest.mark.parametrize("image", ["", "not base64!", 42])
    def test_rejects_unusable_payload(self, image):
        with pytest.raises(CollaboratorFailure):
            normalize_image_payload(image)

    def test_image_data_url(self):
        assert image_data_url(JPEG_BASE64) == f"data:image/jpeg;base64,{JPEG_BASE64}"
        assert image_data_url("not base64!") is None
