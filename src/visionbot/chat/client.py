"""Chat client interface and a console implementation for local runs."""

import asyncio
import sys
from collections.abc import Awaitable, Callable
from typing import Protocol

from visionbot.utils.logging import get_logger

logger = get_logger(__name__)

# handler(sender, target, text)
MessageHandler = Callable[[str, str, str], Awaitable[None]]


class ChatClient(Protocol):
    """What the pipeline needs from a chat connection."""

    def on_text_message(self, handler: MessageHandler) -> None: ...

    async def send_message(self, channel: str, text: str) -> None: ...


class ConsoleChatClient:
    """Reads messages from stdin and prints replies.

    Every line typed is treated as a message from ``nick`` to ``channel``.
    """

    def __init__(self, channel: str, nick: str = "you"):
        self.channel = channel
        self.nick = nick
        self._handlers: list[MessageHandler] = []
        self._pending: set[asyncio.Task] = set()

    def on_text_message(self, handler: MessageHandler) -> None:
        self._handlers.append(handler)

    async def send_message(self, channel: str, text: str) -> None:
        print(f"[{channel}] {text}")

    async def dispatch(self, text: str) -> None:
        """Deliver one message to every handler and wait for them."""
        await asyncio.gather(
            *(handler(self.nick, self.channel, text) for handler in self._handlers)
        )

    async def run(self) -> None:
        """Read stdin until EOF or 'quit'.

        Each message is handled in its own task so a slow link never holds
        up the next line. Pending messages are finished before returning.
        """
        logger.info("console_chat_started", channel=self.channel)

        while True:
            line = await asyncio.to_thread(sys.stdin.readline)
            if not line:
                break

            text = line.strip()
            if not text:
                continue
            if text.lower() in ("quit", "exit", "q"):
                break

            task = asyncio.create_task(self.dispatch(text))
            self._pending.add(task)
            task.add_done_callback(self._pending.discard)

        if self._pending:
            await asyncio.gather(*self._pending)

        logger.info("console_chat_stopped")
