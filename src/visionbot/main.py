"""Application entry point for VisionBot."""

import asyncio
import sys

import httpx

from visionbot.chat.client import ChatClient, ConsoleChatClient
from visionbot.chat.pipeline import MessagePipeline
from visionbot.config import BotConfig, load_config, load_settings
from visionbot.utils.errors import ConfigurationError
from visionbot.utils.logging import get_logger, setup_logging
from visionbot.vision.classifier import VisionClient
from visionbot.vision.downloader import ImageDownloader
from visionbot.vision.probe import SizeProbe
from visionbot.vision.resolver import ImageResolver

logger = get_logger(__name__)


def create_http_client(config: BotConfig) -> httpx.AsyncClient:
    """Shared HTTP client for page fetches, probes, downloads and the Vision API."""
    settings = config.settings
    return httpx.AsyncClient(
        timeout=settings.http_timeout_seconds,
        follow_redirects=True,
        headers={"User-Agent": settings.user_agent},
    )


def build_pipeline(
    config: BotConfig,
    chat: ChatClient,
    client: httpx.AsyncClient,
) -> MessagePipeline:
    """Wire the pipeline components together.

    Returns:
        A pipeline already subscribed to ``chat``.
    """
    settings = config.settings

    probe = SizeProbe(client, timeout=settings.probe_timeout_seconds)
    resolver = ImageResolver(
        client,
        probe,
        min_area=settings.min_image_area,
        max_page_bytes=settings.max_page_bytes,
    )
    downloader = ImageDownloader(client, max_bytes=settings.max_image_bytes)
    vision = VisionClient(client, config.api_key, api_url=settings.vision_api_url)

    pipeline = MessagePipeline(
        chat,
        resolver,
        downloader,
        vision,
        config.safe_search_policy,
    )
    pipeline.register()
    return pipeline


async def run(config: BotConfig, text: str | None = None) -> None:
    """Run the bot against the console.

    Args:
        config: Runtime configuration.
        text: Process just this message and return. Interactive if None.
    """
    irc = config.deployment.irc
    chat = ConsoleChatClient(channel=irc.channels[0])

    logger.info(
        "starting_visionbot",
        env=config.settings.app_env,
        server=irc.server,
        nick=irc.nick,
        channels=list(irc.channels),
    )

    async with create_http_client(config) as client:
        build_pipeline(config, chat, client)

        if text is not None:
            await chat.dispatch(text)
        else:
            print("VisionBot")
            print("=" * 40)
            print("Paste a message with links and press Enter.")
            print("Type 'quit' or 'exit' to stop.")
            print("=" * 40)
            await chat.run()


def main():
    """Main entry point."""
    try:
        settings = load_settings()
        setup_logging(log_level=settings.log_level, json_format=settings.log_json)
        config = load_config(settings)
    except ConfigurationError as e:
        logger.error("configuration_error", error=e.message, **e.details)
        sys.exit(1)

    text = " ".join(sys.argv[1:]) if len(sys.argv) > 1 else None

    try:
        asyncio.run(run(config, text))
    except KeyboardInterrupt:
        print("\nInterrupted. Goodbye!")


if __name__ == "__main__":
    main()
