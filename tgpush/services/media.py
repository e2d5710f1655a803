"""Media sniffing and container probing."""
import logging
from pathlib import Path
from typing import BinaryIO
import filetype
from hachoir.core import config as hachoir_config
from hachoir.metadata import extractMetadata
from hachoir.parser import guessParser
from hachoir.stream import InputIOStream
from ..models import MediaClassification, MediaKind

log = logging.getLogger(__name__)

hachoir_config.quiet = True

SNIFF_SIZE = 8192
DEFAULT_MIME = "application/octet-stream"
TEXT_MIME = "text/plain"
WEBP_MIME = "image/webp"


class ProbeError(Exception):
    """Container metadata could not be read."""


_BINARY_BYTES = frozenset(b for b in range(0x20) if b not in b"\t\n\x0c\r\x1b")


def _is_text(head: bytes) -> bool:
    if not head or not _BINARY_BYTES.isdisjoint(head):
        return False
    try:
        head.decode("utf-8")
    except UnicodeDecodeError as e:
        # a multi-byte sequence cut at the end of the sniffed prefix
        return e.start >= len(head) - 3 and e.reason == "unexpected end of data"
    return True


def _from_bytes(head: bytes) -> str:
    kind = filetype.guess(head)
    if kind is not None:
        return kind.mime
    if _is_text(head):
        return TEXT_MIME
    return DEFAULT_MIME


def detect_path(path: str | Path) -> str:
    """Sniff the mime type of a file on disk from its content."""
    with open(path, "rb") as fh:
        return detect_reader(fh)


def detect_reader(fh: BinaryIO) -> str:
    """Sniff the mime type from the stream prefix, keeping the read position.

    Only the bytes count; the file name is never consulted.
    """
    pos = fh.tell()
    try:
        head = fh.read(SNIFF_SIZE)
    finally:
        fh.seek(pos)
    return _from_bytes(head)


def is_image(mime: str) -> bool:
    return mime.startswith("image/")


def is_video(mime: str) -> bool:
    return mime.startswith("video/")


def is_audio(mime: str) -> bool:
    return mime.startswith("audio/")


def kind_of(mime: str) -> MediaKind:
    if mime == WEBP_MIME:
        return MediaKind.WEBP
    if is_image(mime):
        return MediaKind.IMAGE
    if is_video(mime):
        return MediaKind.VIDEO
    if is_audio(mime):
        return MediaKind.AUDIO
    return MediaKind.DOCUMENT


def probe_video(fh: BinaryIO) -> tuple[int, int, int]:
    """Return (duration seconds, width, height) using hachoir's parsers."""
    fh.seek(0)
    try:
        parser = guessParser(InputIOStream(fh, source=f"file:{getattr(fh, 'name', '<stream>')}"))
        meta = extractMetadata(parser) if parser is not None else None
    except Exception as e:
        raise ProbeError(f"parse container: {e}") from e
    if parser is None:
        raise ProbeError("unknown container")
    if meta is None or not meta.has("duration"):
        raise ProbeError("no duration in container metadata")

    width = meta.get("width") if meta.has("width") else 0
    height = meta.get("height") if meta.has("height") else 0
    return round(meta.get("duration").total_seconds()), int(width), int(height)


def classify(fh: BinaryIO) -> MediaClassification:
    """Classify a stream from offset zero; video streams are also probed.

    The stream is left at offset zero. A failed probe still yields a video
    classification, only without duration and resolution.
    """
    fh.seek(0)
    mime = detect_reader(fh)
    kind = kind_of(mime)
    if kind != MediaKind.VIDEO:
        return MediaClassification(kind=kind, mime=mime)

    try:
        duration, width, height = probe_video(fh)
    except ProbeError as e:
        log.debug(f"Probe failed for {getattr(fh, 'name', fh)}: {e}")
        return MediaClassification(kind=kind, mime=mime)
    finally:
        fh.seek(0)

    return MediaClassification(
        kind=kind, mime=mime, duration=duration, width=width, height=height, probed=True
    )
