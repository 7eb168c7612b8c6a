"""Resolves a chat-posted URL to the single best image on it."""

import httpx

from visionbot.utils.errors import ImageFetchError
from visionbot.utils.logging import get_logger
from visionbot.vision.extractor import ensure_scheme, extract_candidates
from visionbot.vision.probe import SizeProbe
from visionbot.vision.schemas import ResolvedImage

logger = get_logger(__name__)

# Equivalent of a 300 x 300 px image
MIN_IMAGE_SIZE = 90000

# Max HTML read from a source page (5MB)
MAX_PAGE_BYTES = 5 * 1024 * 1024


class ImageResolver:
    """Turns one URL into at most one image URL worth classifying.

    If the URL already serves an image it is used as is. Otherwise the body
    is scanned for image links, every link is probed concurrently and the
    largest one of at least ``min_area`` pixels wins. Among equally large
    candidates the first one found on the page is chosen.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        probe: SizeProbe,
        min_area: int = MIN_IMAGE_SIZE,
        max_page_bytes: int = MAX_PAGE_BYTES,
    ):
        self._client = client
        self._probe = probe
        self._min_area = min_area
        self._max_page_bytes = max_page_bytes

    async def resolve(self, url: str) -> ResolvedImage | None:
        """Resolve a URL to an image.

        Args:
            url: URL as posted in chat.

        Returns:
            The chosen image, or None if nothing on the page is large enough.

        Raises:
            ImageFetchError: If the source URL cannot be fetched.
        """
        logger.info("resolving_url", url=url)

        content_type, body = await self._fetch_source(url)

        if "image" in content_type:
            logger.info("url_is_image", url=url, content_type=content_type)
            return ResolvedImage(url=url)

        candidates = extract_candidates(body, base_url=url)
        if not candidates:
            logger.info("no_image_candidates", url=url)
            return None

        probed = await self._probe.probe_all(candidates)
        qualifying = [
            c for c in probed if c.url is not None and c.pixel_area >= self._min_area
        ]

        logger.info(
            "image_candidates_probed",
            url=url,
            candidates=len(candidates),
            qualifying=len(qualifying),
        )

        if not qualifying:
            return None

        # max() keeps the first of equal maxima, i.e. page order
        best = max(qualifying, key=lambda c: c.pixel_area)

        logger.info("image_resolved", url=url, image_url=best.url, area=best.pixel_area)

        return ResolvedImage(url=best.url, pixel_area=best.pixel_area)

    async def _fetch_source(self, url: str) -> tuple[str, str]:
        """Fetch the source URL's content type and, unless it is an image, its body."""
        try:
            async with self._client.stream("GET", ensure_scheme(url)) as response:
                response.raise_for_status()

                content_type = response.headers.get("content-type", "")
                if "image" in content_type:
                    return content_type, ""

                raw = bytearray()
                async for chunk in response.aiter_bytes():
                    raw.extend(chunk)
                    if len(raw) >= self._max_page_bytes:
                        logger.info("source_page_truncated", url=url, limit=self._max_page_bytes)
                        break

                encoding = response.encoding or "utf-8"
                return content_type, bytes(raw[: self._max_page_bytes]).decode(
                    encoding, errors="replace"
                )

        except httpx.HTTPStatusError as e:
            logger.error(
                "source_fetch_failed",
                url=url,
                status_code=e.response.status_code,
            )
            raise ImageFetchError(
                f"HTTP {e.response.status_code} fetching {url}",
                details={"url": url, "status": e.response.status_code},
            ) from e
        except httpx.HTTPError as e:
            logger.error("source_fetch_error", url=url, error=str(e))
            raise ImageFetchError(
                f"Request failed: {e}",
                details={"url": url},
            ) from e
        except LookupError as e:
            logger.error("source_decode_error", url=url, error=str(e))
            raise ImageFetchError(
                f"Unreadable body: {e}",
                details={"url": url},
            ) from e
