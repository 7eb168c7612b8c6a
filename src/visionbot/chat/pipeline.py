"""Per-message processing: every URL in a chat line gets its own reply."""

import asyncio

from visionbot.chat.client import ChatClient
from visionbot.utils.errors import VisionBotError
from visionbot.utils.logging import get_logger
from visionbot.vision.classifier import VisionClient
from visionbot.vision.downloader import ImageDownloader
from visionbot.vision.extractor import extract_urls
from visionbot.vision.formatter import format_analysis
from visionbot.vision.resolver import ImageResolver
from visionbot.vision.schemas import SafeSearchPolicy

logger = get_logger(__name__)

FALLBACK_REPLY = "Could not process image :("


class MessagePipeline:
    """Runs resolve -> download -> classify -> format for each URL in a message.

    URLs are processed concurrently and independently. A failure on one URL
    produces the fallback reply for that URL only. A URL with no suitable
    image produces no reply.
    """

    def __init__(
        self,
        chat: ChatClient,
        resolver: ImageResolver,
        downloader: ImageDownloader,
        vision: VisionClient,
        policy: SafeSearchPolicy,
    ):
        self._chat = chat
        self._resolver = resolver
        self._downloader = downloader
        self._vision = vision
        self._policy = policy

    def register(self) -> None:
        """Subscribe to the chat client's text messages."""
        self._chat.on_text_message(self.handle_message)

    async def handle_message(self, sender: str, target: str, text: str) -> None:
        """Process every URL found in one chat message."""
        urls = extract_urls(text)
        if not urls:
            return

        logger.info("urls_detected", sender=sender, target=target, count=len(urls))

        await asyncio.gather(*(self._process_url(target, url) for url in urls))

    async def analyze_url(self, url: str) -> str | None:
        """Produce the reply text for one URL, or None if there is nothing to say.

        Raises:
            ImageFetchError: If the page or image cannot be fetched.
            ClassificationError: If the Vision API call fails.
        """
        image = await self._resolver.resolve(url)
        if image is None:
            return None

        content = await self._downloader.download_base64(image)
        result = await self._vision.annotate(content)
        return format_analysis(result, self._policy) or None

    async def _process_url(self, channel: str, url: str) -> None:
        try:
            reply = await self.analyze_url(url)
        except VisionBotError as e:
            logger.warning(
                "url_processing_failed",
                url=url,
                error_type=type(e).__name__,
                error=e.message,
                details=e.details,
            )
            reply = FALLBACK_REPLY
        except Exception as e:
            logger.error("url_processing_error", url=url, error=str(e), exc_info=True)
            reply = FALLBACK_REPLY

        if reply is None:
            logger.info("no_suitable_image", url=url)
            return

        await self._chat.send_message(channel, reply)
