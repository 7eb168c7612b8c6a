"""URL extraction from chat text and image candidate extraction from HTML."""

import re

from visionbot.utils.logging import get_logger

logger = get_logger(__name__)

# Extensions recognised as image links (case-sensitive)
IMAGE_EXTENSIONS = ("jpeg", "jpg", "tiff", "png", "gif", "bmp", "svg")

# Anything starting with http://, https:// or www. up to the next whitespace
URL_PATTERN = re.compile(r"(?:https?://|www\.)\S*")

# Image links inside markup. Quotes and angle brackets end a URL so that
# adjacent tags on one line do not fuse into a single candidate.
IMAGE_PATTERN = re.compile(
    r"(?:https?://|www\.)[^\s\"'<>]+\.(?:"
    + "|".join(IMAGE_EXTENSIONS)
    + r")/?"
)


def extract_urls(text: str | None) -> list[str]:
    """Find every URL in a chat message, in order, duplicates included."""
    if not text:
        return []
    return URL_PATTERN.findall(text)


def extract_candidates(html: str | None, base_url: str = "") -> list[str]:
    """Extract distinct image-looking URLs from an HTML document.

    Matching is purely textual, so malformed markup is fine. Duplicates are
    dropped by exact string comparison; order is first occurrence.

    Args:
        html: Page body.
        base_url: Page the body came from, used for logging only.

    Returns:
        Distinct candidate URLs, possibly empty.
    """
    if not html:
        return []

    candidates = list(dict.fromkeys(IMAGE_PATTERN.findall(html)))

    logger.debug("image_candidates_extracted", url=base_url, count=len(candidates))

    return candidates


def ensure_scheme(url: str) -> str:
    """Make a scheme-less www. link fetchable."""
    if url.startswith(("http://", "https://")):
        return url
    return f"http://{url}"
