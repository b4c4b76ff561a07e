"""Chat turn orchestration: stream a reply, pick up artifacts, resolve media"""

import asyncio
from dataclasses import dataclass, field
from datetime import datetime
from typing import Awaitable, Callable, Dict, Optional

from studio import llm, storage
from studio.errors import CapabilityDisabledError, SystemBusyError
from studio.extractor import ArtifactStream, find_media_directive, strip_media_directives
from studio.logger import get_logger
from studio.models import Bot, Capability, ChatMessage
from studio.store import DocumentStore

logger = get_logger(__name__)

EventCallback = Callable[[dict], Awaitable[None]]


@dataclass
class ChatResult:
    """Result of one chat turn"""

    status: str  # "success" or "error"
    message: str
    text: str = ""
    artifacts: Dict[str, str] = field(default_factory=dict)
    media_url: Optional[str] = None


def require(bot: Bot, capability: Capability):
    if not bot.has(capability):
        raise CapabilityDisabledError(f"Bot {bot.id} does not have {capability.value} enabled")


class ChatTurn:
    """Single chat turn for a bot, writing artifacts into the bot's project store"""

    def __init__(
        self,
        bot: Bot,
        store: DocumentStore,
        stream_fn=None,
        image_fn=None,
    ):
        self.bot = bot
        self.store = store
        self.stream_fn = stream_fn or llm.stream_chat
        self.image_fn = image_fn or llm.generate_image

    async def run(self, message: str, on_event: Optional[EventCallback] = None) -> ChatResult:
        logger.info(f"Processing chat turn for bot: {self.bot.id}")
        emit = on_event or _ignore
        history = storage.load_chat_history(self.bot.id)
        artifacts = ArtifactStream()

        chunks = None
        try:
            chunks = iter(self.stream_fn(self.bot, history, message))
            while True:
                # the transport is blocking, keep the event loop free between chunks
                chunk = await asyncio.to_thread(next, chunks, None)
                if chunk is None:
                    break
                await emit({"type": "chunk", "text": chunk})
                changed = artifacts.feed(chunk)
                if changed:
                    await emit({"type": "artifacts", "files": changed})
        except SystemBusyError as e:
            await emit({"type": "error", "text": str(e)})
            return ChatResult(status="error", message=str(e), text=artifacts.text)
        except Exception as e:
            logger.error(f"Bot {self.bot.id}: chat stream failed: {str(e)}", exc_info=True)
            await emit({"type": "error", "text": "Network instability detected."})
            return ChatResult(status="error", message=f"Error: {str(e)}", text=artifacts.text)
        finally:
            # release the upstream response even when the turn is cancelled
            self._close_stream(chunks)

        reply = artifacts.text
        files = artifacts.files
        now = datetime.now().isoformat()
        storage.append_chat_messages(
            self.bot.id,
            ChatMessage(role="user", text=message, timestamp=now),
            ChatMessage(role="model", text=strip_media_directives(reply), timestamp=now),
        )
        storage.touch_bot(self.bot.id)

        if files and self.bot.has(Capability.PREVIEW_CODE):
            self.store.apply_artifacts(files)
            await emit(
                {
                    "type": "preview",
                    "files": dict(self.store.files),
                    "active_file": self.store.active_file,
                    "handle": self.store.preview_handle,
                }
            )

        media_url = await self._resolve_media(reply, emit)
        await emit({"type": "done", "text": reply})
        return ChatResult(
            status="success", message="ok", text=reply, artifacts=files, media_url=media_url
        )

    def _close_stream(self, chunks):
        close = getattr(chunks, "close", None)
        if close is None:
            return
        try:
            close()
        except ValueError:
            # still inside next() on the worker thread; it ends with the response
            logger.debug(f"Bot {self.bot.id}: stream busy in worker thread, not closed")

    async def _resolve_media(self, reply: str, emit: EventCallback) -> Optional[str]:
        directive = find_media_directive(reply)
        if not directive:
            return None
        if not self.bot.has(Capability.IMAGE_GEN):
            logger.debug(f"Bot {self.bot.id}: ignoring image directive, image_gen disabled")
            return None
        try:
            url = await asyncio.to_thread(self.image_fn, directive)
        except Exception as e:
            logger.error(f"Bot {self.bot.id}: image generation failed: {str(e)}")
            return None

        storage.append_chat_messages(
            self.bot.id,
            ChatMessage(
                role="model",
                text="Visual asset generated.",
                timestamp=datetime.now().isoformat(),
                type="image",
                media_url=url,
            ),
        )
        await emit({"type": "image", "url": url})
        return url


async def _ignore(_event: dict):
    return None
