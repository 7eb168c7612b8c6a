"""Tests for image dimension probing."""

import asyncio

import httpx

from conftest import html_response, png_response
from visionbot.vision.probe import SizeProbe
from visionbot.vision.schemas import ImageCandidate


async def test_probe_reports_area(http_client, routes):
    routes["http://x.com/a.png"] = png_response(400, 300)

    candidate = await SizeProbe(http_client).probe("http://x.com/a.png")

    assert candidate == ImageCandidate(url="http://x.com/a.png", pixel_area=120000)


async def test_probe_adds_scheme_but_keeps_original_url(http_client, routes):
    routes["http://www.x.com/a.png"] = png_response(10, 10)

    candidate = await SizeProbe(http_client).probe("www.x.com/a.png")

    assert candidate.url == "www.x.com/a.png"
    assert candidate.pixel_area == 100


async def test_probe_failures_degrade_to_unresolved(http_client, routes):
    routes["http://x.com/missing.png"] = httpx.Response(404)
    routes["http://x.com/page.png"] = html_response("<html>not an image</html>")
    routes["http://x.com/down.png"] = httpx.ConnectError("connection refused")
    routes["http://x.com/garbage.png"] = httpx.Response(
        200, content=b"this is definitely not an image\n" * 20
    )

    probe = SizeProbe(http_client)
    for url in routes:
        assert await probe.probe(url) == ImageCandidate.unresolved()


async def test_probe_gives_up_after_header_budget(http_client, routes):
    routes["http://x.com/huge.png"] = httpx.Response(200, content=b"\xff" * 50_000)

    candidate = await SizeProbe(http_client, max_header_bytes=8192).probe(
        "http://x.com/huge.png"
    )

    assert candidate.url is None
    assert candidate.pixel_area == 0


async def test_probe_times_out(http_client, routes):
    async def slow(request):
        await asyncio.sleep(1)
        return png_response(500, 500)

    routes["http://x.com/slow.png"] = slow

    candidate = await SizeProbe(http_client, timeout=0.05).probe("http://x.com/slow.png")

    assert candidate == ImageCandidate.unresolved()


async def test_probe_never_raises_on_invalid_url(http_client):
    candidate = await SizeProbe(http_client).probe("http://")
    assert candidate.pixel_area == 0


async def test_probe_all_keeps_input_order(http_client, routes):
    routes["http://x.com/1.png"] = png_response(20, 20)
    routes["http://x.com/2.png"] = png_response(10, 10)

    results = await SizeProbe(http_client).probe_all(
        ["http://x.com/1.png", "http://x.com/missing.png", "http://x.com/2.png"]
    )

    assert [c.pixel_area for c in results] == [400, 0, 100]
