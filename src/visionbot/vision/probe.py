"""Image dimension probing from partial downloads."""

import asyncio

import httpx
from PIL import ImageFile

from visionbot.utils.errors import ImageProbeError
from visionbot.utils.logging import get_logger
from visionbot.vision.extractor import ensure_scheme
from visionbot.vision.schemas import ImageCandidate

logger = get_logger(__name__)

# Bytes per read while looking for the image header
PROBE_CHUNK_SIZE = 4096

# Give up on a candidate whose header has not appeared after this many bytes
MAX_HEADER_BYTES = 512 * 1024


class SizeProbe:
    """Determines image dimensions by reading only as much as the header needs.

    A probe never raises: any failure yields ImageCandidate.unresolved(),
    which downstream filtering discards.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        timeout: float = 10.0,
        max_header_bytes: int = MAX_HEADER_BYTES,
    ):
        self._client = client
        self._timeout = timeout
        self._max_header_bytes = max_header_bytes

    async def probe(self, url: str) -> ImageCandidate:
        """Probe one candidate URL.

        Args:
            url: Candidate image URL.

        Returns:
            The candidate with its pixel area, or an unresolved candidate.
        """
        try:
            return await asyncio.wait_for(self._read_dimensions(url), self._timeout)
        except asyncio.TimeoutError:
            logger.debug("image_probe_timeout", url=url, timeout=self._timeout)
        except Exception as e:
            logger.debug("image_probe_failed", url=url, error=str(e))
        return ImageCandidate.unresolved()

    async def probe_all(self, urls: list[str]) -> list[ImageCandidate]:
        """Probe all candidates concurrently, in input order."""
        return list(await asyncio.gather(*(self.probe(url) for url in urls)))

    async def _read_dimensions(self, url: str) -> ImageCandidate:
        parser = ImageFile.Parser()
        received = 0

        async with self._client.stream("GET", ensure_scheme(url)) as response:
            response.raise_for_status()

            async for chunk in response.aiter_bytes(PROBE_CHUNK_SIZE):
                parser.feed(chunk)
                received += len(chunk)

                if parser.image is not None:
                    width, height = parser.image.size
                    logger.debug(
                        "image_probed",
                        url=url,
                        dimensions=f"{width}x{height}",
                        bytes_read=received,
                    )
                    return ImageCandidate(url=url, pixel_area=width * height)

                if received >= self._max_header_bytes:
                    break

        raise ImageProbeError(
            "Could not read image dimensions",
            details={"url": url, "bytes_read": received},
        )
