"""Downloads the resolved image and encodes it for the Vision API."""

import base64

import httpx

from visionbot.utils.errors import ImageFetchError
from visionbot.utils.logging import get_logger
from visionbot.vision.extractor import ensure_scheme
from visionbot.vision.schemas import ResolvedImage

logger = get_logger(__name__)

# Max file size to download (10MB)
MAX_FILE_SIZE_BYTES = 10 * 1024 * 1024


class ImageDownloader:
    """Fetches image bytes over a shared HTTP client.

    Unlike candidate probing, failures here propagate: there is only one
    image left to try.
    """

    def __init__(self, client: httpx.AsyncClient, max_bytes: int = MAX_FILE_SIZE_BYTES):
        self._client = client
        self._max_bytes = max_bytes

    async def download_image(self, image: ResolvedImage) -> bytes:
        """Download an image.

        Args:
            image: The resolved image.

        Returns:
            Raw image bytes.

        Raises:
            ImageFetchError: If download fails or the image is too large.
        """
        logger.info("downloading_image", url=image.url)

        try:
            async with self._client.stream("GET", ensure_scheme(image.url)) as response:
                response.raise_for_status()

                content = bytearray()
                async for chunk in response.aiter_bytes():
                    content.extend(chunk)
                    if len(content) > self._max_bytes:
                        raise ImageFetchError(
                            f"File too large: over {self._max_bytes} bytes",
                            details={"url": image.url},
                        )

        except httpx.HTTPStatusError as e:
            logger.error(
                "image_download_failed",
                url=image.url,
                status_code=e.response.status_code,
            )
            raise ImageFetchError(
                f"HTTP {e.response.status_code} downloading image",
                details={"url": image.url, "status": e.response.status_code},
            ) from e
        except httpx.HTTPError as e:
            logger.error(
                "image_download_error",
                url=image.url,
                error=str(e),
            )
            raise ImageFetchError(
                f"Request failed: {e}",
                details={"url": image.url},
            ) from e

        logger.info("image_downloaded", url=image.url, size_bytes=len(content))

        return bytes(content)

    async def download_base64(self, image: ResolvedImage) -> str:
        """Download an image and return it base64-encoded."""
        content = await self.download_image(image)
        return base64.b64encode(content).decode("ascii")
