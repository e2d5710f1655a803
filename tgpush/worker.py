"""Transfer worker - one unit from chunked upload to sent message."""
import asyncio
import logging
from pathlib import Path
from typing import Any, Callable
from telethon.tl import types
from .cancel import CancelToken
from .errors import Cancelled, TransferError
from .models import MediaClassification, MediaKind, TransferUnit
from .services.media import classify

log = logging.getLogger(__name__)


def build_media(
    file: Any,
    name: str,
    media: MediaClassification,
    as_photo: bool = False,
    thumb: Any = None,
) -> Any:
    """Pick the outbound representation for an uploaded file.

    Documents are the default. Webp never becomes a photo since Telegram
    turns those into stickers.
    """
    if media.kind == MediaKind.IMAGE and as_photo:
        return types.InputMediaUploadedPhoto(file=file)

    attributes: list[Any] = [types.DocumentAttributeFilename(file_name=name)]
    if media.kind == MediaKind.VIDEO and media.probed:
        attributes.append(types.DocumentAttributeVideo(
            duration=media.duration,
            w=media.width,
            h=media.height,
            supports_streaming=True,
        ))
    elif media.kind == MediaKind.AUDIO:
        attributes.append(types.DocumentAttributeAudio(duration=0, title=Path(name).stem))

    return types.InputMediaUploadedDocument(
        file=file,
        mime_type=media.mime,
        attributes=attributes,
        thumb=thumb,
    )


class Transfer:
    """Uploads and sends one unit at a time; many may run concurrently."""

    def __init__(self, client, part_size: int, threads: int):
        self._client = client
        self._part_size = part_size
        self._threads = threads

    async def transfer(
        self,
        unit: TransferUnit,
        token: CancelToken,
        progress: Callable[[int, int], None] | None = None,
    ) -> None:
        """Send a unit. Raises Cancelled or TransferError."""
        token.raise_if_cancelled()

        try:
            uploaded = await self._client.upload(
                unit.file, unit.size, unit.name,
                self._part_size, self._threads,
                progress=progress, token=token,
            )
        except Cancelled:
            raise
        except Exception as e:
            raise TransferError("upload file", e) from e

        try:
            media = await asyncio.to_thread(classify, unit.file)
        except OSError as e:
            raise TransferError("classify file", e) from e

        token.raise_if_cancelled()
        thumb = await self._upload_thumb(unit)

        token.raise_if_cancelled()
        try:
            await self._client.send_media(
                unit.peer,
                build_media(uploaded, unit.name, media, unit.as_photo, thumb),
                unit.caption,
                reply_to=unit.thread,
            )
        except Exception as e:
            raise TransferError("send message", e) from e

        log.info(f"Sent {unit.name} as {media.kind.value}")

    async def _upload_thumb(self, unit: TransferUnit) -> Any:
        """Thumbnail failures only cost the thumbnail."""
        if unit.thumb is None:
            return None
        try:
            return await self._client.upload_simple(unit.thumb, Path(unit.thumb.name).name)
        except Exception as e:
            log.warning(f"Thumbnail upload for {unit.name} failed, sending without: {e}")
            return None
