"""Telegram client - connect, resolve peers, upload and send."""
import asyncio
import hashlib
import logging
from typing import Any, BinaryIO, Callable
from telethon import TelegramClient as Telethon
from telethon.helpers import generate_random_long
from telethon.tl import functions, types
from ..cancel import CancelToken
from ..config import session_path
from ..models import CaptionSegment
from .styling import render

log = logging.getLogger(__name__)

# Files above this size must use the big-file part API.
BIG_FILE_SIZE = 10 * 1024 * 1024


class TelegramClient:
    """Telegram operations: connect, resolve, upload, send."""

    def __init__(self, api_id: int, api_hash: str):
        self._client = Telethon(str(session_path()), api_id, api_hash)

    async def start(self) -> bool:
        """Start client, return True if authorized."""
        await self._client.connect()
        return await self._client.is_user_authorized()

    async def login(self, phone: str, code_cb: Callable, password_cb: Callable) -> bool:
        """Interactive login."""
        await self._client.start(phone=phone, code_callback=code_cb, password=password_cb)
        return await self._client.is_user_authorized()

    async def logout(self) -> None:
        """Logout and disconnect."""
        await self._client.log_out()

    async def close(self) -> None:
        """Close connection."""
        await self._client.disconnect()

    # Peer directory
    async def resolve(self, ref: str) -> Any:
        """Resolve a chat id, @username or t.me link to an input peer."""
        target: str | int = ref.strip()
        try:
            target = int(target)
        except ValueError:
            pass
        return await self._client.get_input_entity(target)

    async def self_peer(self) -> Any:
        return types.InputPeerSelf()

    # Uploads
    async def upload(
        self,
        fh: BinaryIO,
        size: int,
        name: str,
        part_size: int,
        threads: int,
        progress: Callable[[int, int], None] | None = None,
        token: CancelToken | None = None,
    ) -> types.InputFile | types.InputFileBig:
        """Upload a stream in parts, with up to `threads` parts in flight."""
        file_id = generate_random_long()
        is_big = size > BIG_FILE_SIZE
        part_count = max(1, (size + part_size - 1) // part_size)
        md5 = hashlib.md5()
        slots = asyncio.Semaphore(threads)
        pending: list[asyncio.Task] = []
        uploaded = 0

        async def send_part(index: int, data: bytes):
            nonlocal uploaded
            try:
                if is_big:
                    request = functions.upload.SaveBigFilePartRequest(file_id, index, part_count, data)
                else:
                    request = functions.upload.SaveFilePartRequest(file_id, index, data)
                if not await self._client(request):
                    raise RuntimeError(f"part {index}/{part_count} was not saved")
                uploaded += len(data)
                if progress:
                    progress(uploaded, size)
            finally:
                slots.release()

        try:
            for index in range(part_count):
                await slots.acquire()
                for task in pending:
                    if task.done() and task.exception():
                        raise task.exception()
                if token is not None:
                    token.raise_if_cancelled()
                data = await asyncio.to_thread(fh.read, part_size)
                if not is_big:
                    md5.update(data)
                pending.append(asyncio.create_task(send_part(index, data)))
            await asyncio.gather(*pending)
        except BaseException:
            for task in pending:
                task.cancel()
            await asyncio.gather(*pending, return_exceptions=True)
            raise

        log.debug(f"Uploaded {name}: {part_count} parts")
        if is_big:
            return types.InputFileBig(file_id, part_count, name)
        return types.InputFile(file_id, part_count, name, md5.hexdigest())

    async def upload_simple(self, fh: BinaryIO, name: str) -> types.InputFile:
        """Single-shot upload for small auxiliary files like thumbnails."""
        return await self._client.upload_file(fh, file_name=name)

    # Messages
    async def send_media(
        self,
        peer: Any,
        media: Any,
        caption: list[CaptionSegment],
        reply_to: int = 0,
    ):
        """Send an uploaded media with a styled caption, optionally into a thread."""
        text, entities = render(caption)
        return await self._client.send_file(
            peer,
            media,
            caption=text,
            formatting_entities=entities,
            reply_to=reply_to or None,
        )
