"""Pytest fixtures for VisionBot tests."""

import inspect
import io

import httpx
import pytest
from PIL import Image
from pydantic import SecretStr

from visionbot.vision.schemas import SafeSearchPolicy

VISION_URL = "https://vision.googleapis.com/v1/images:annotate"


def make_png(width: int, height: int) -> bytes:
    """Render a solid PNG of the given size."""
    buffer = io.BytesIO()
    Image.new("RGB", (width, height), (200, 30, 30)).save(buffer, format="PNG")
    return buffer.getvalue()


def png_response(width: int, height: int) -> httpx.Response:
    return httpx.Response(
        200, headers={"content-type": "image/png"}, content=make_png(width, height)
    )


def html_response(body: str) -> httpx.Response:
    return httpx.Response(200, headers={"content-type": "text/html; charset=utf-8"}, text=body)


@pytest.fixture
def routes():
    """URL (without query string) -> Response, exception, or callable(request)."""
    return {}


@pytest.fixture
def sent_requests():
    return []


@pytest.fixture
async def http_client(routes, sent_requests):
    """AsyncClient whose transport serves from ``routes``; unknown URLs are 404."""

    async def handler(request: httpx.Request) -> httpx.Response:
        sent_requests.append(request)
        route = routes.get(str(request.url).split("?", 1)[0])

        if route is None:
            return httpx.Response(404)
        if isinstance(route, Exception):
            raise route
        if callable(route):
            result = route(request)
            if inspect.isawaitable(result):
                result = await result
            return result
        return route

    async with httpx.AsyncClient(
        transport=httpx.MockTransport(handler), follow_redirects=True
    ) as client:
        yield client


@pytest.fixture
def api_key():
    return SecretStr("test-key")


@pytest.fixture
def policy():
    """The policy every shipped deployment uses."""
    return SafeSearchPolicy(adult="POSSIBLE", spoof="", medical="POSSIBLE", violence="VERY_LIKELY")


@pytest.fixture
def vision_payload():
    """A successful images:annotate response."""
    return {
        "responses": [
            {
                "labelAnnotations": [
                    {"mid": "/m/01yrx", "description": "cat", "score": 0.98},
                    {"mid": "/m/0jbk", "description": "animal", "score": 0.93},
                ],
                "safeSearchAnnotation": {
                    "adult": "VERY_UNLIKELY",
                    "spoof": "UNLIKELY",
                    "medical": "VERY_UNLIKELY",
                    "violence": "UNLIKELY",
                    "racy": "POSSIBLE",
                },
            }
        ]
    }
