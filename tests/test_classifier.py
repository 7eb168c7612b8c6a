"""Tests for the Vision API client."""

import json

import httpx
import pytest

from conftest import VISION_URL
from visionbot.utils.errors import ClassificationError
from visionbot.vision.classifier import VisionClient, build_request_body, parse_response
from visionbot.vision.schemas import Likelihood


@pytest.fixture
def vision(http_client, api_key):
    return VisionClient(http_client, api_key, api_url=VISION_URL)


def test_request_body_shape():
    assert build_request_body("QUJD") == {
        "requests": [
            {
                "image": {"content": "QUJD"},
                "features": [
                    {"type": "LABEL_DETECTION", "maxResults": 5},
                    {"type": "SAFE_SEARCH_DETECTION", "maxResults": 1},
                ],
            }
        ]
    }


async def test_annotate_success(vision, routes, sent_requests, vision_payload):
    routes[VISION_URL] = httpx.Response(200, json=vision_payload)

    result = await vision.annotate("QUJD")

    assert result.labels == ("cat", "animal")
    assert result.safe_search["adult"] is Likelihood.VERY_UNLIKELY
    assert result.safe_search["racy"] is Likelihood.POSSIBLE

    request = sent_requests[0]
    assert request.method == "POST"
    assert request.url.params["key"] == "test-key"
    assert request.headers["content-type"] == "application/json"
    assert json.loads(request.content) == build_request_body("QUJD")


async def test_annotate_structured_error(vision, routes):
    routes[VISION_URL] = httpx.Response(
        200,
        json={"responses": [{"error": {"code": 3, "message": "Bad image data."}}]},
    )

    with pytest.raises(ClassificationError, match="Bad image data."):
        await vision.annotate("QUJD")


async def test_annotate_top_level_error(vision, routes):
    routes[VISION_URL] = httpx.Response(
        400,
        json={"error": {"code": 400, "message": "API key not valid.", "status": "INVALID_ARGUMENT"}},
    )

    with pytest.raises(ClassificationError, match="API key not valid."):
        await vision.annotate("QUJD")


async def test_annotate_http_error_without_body(vision, routes):
    routes[VISION_URL] = httpx.Response(503, text="Service Unavailable")

    with pytest.raises(ClassificationError):
        await vision.annotate("QUJD")


async def test_annotate_network_error_hides_key(vision, routes):
    routes[VISION_URL] = httpx.ConnectError("connection refused")

    with pytest.raises(ClassificationError) as exc_info:
        await vision.annotate("QUJD")

    assert "test-key" not in str(exc_info.value)


class TestParseResponse:
    def test_empty_annotations(self):
        result = parse_response({"responses": [{}]})

        assert result.labels == ()
        assert result.safe_search == {}

    def test_unknown_likelihoods_are_dropped(self):
        result = parse_response(
            {
                "responses": [
                    {
                        "safeSearchAnnotation": {
                            "adult": "SOMEWHAT",
                            "violence": "LIKELY",
                            "adultConfidence": 0.4,
                        }
                    }
                ]
            }
        )

        assert result.safe_search == {"violence": Likelihood.LIKELY}

    def test_no_responses(self):
        with pytest.raises(ClassificationError):
            parse_response({"responses": []})

    def test_malformed(self):
        with pytest.raises(ClassificationError):
            parse_response(["not", "an", "object"])
