"""Data models - pure data, no logic."""
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, BinaryIO


@dataclass(frozen=True)
class SourceFile:
    """A local file to send, with an optional thumbnail."""
    path: Path
    thumb: Path | None = None


@dataclass(frozen=True)
class ExprEnv:
    """Names visible to routing and caption expressions."""
    File: str = ""
    Thumb: str = ""
    Filename: str = ""
    Extension: str = ""
    Mime: str = ""

    def as_names(self) -> dict[str, str]:
        return {
            "File": self.File,
            "Thumb": self.Thumb,
            "Filename": self.Filename,
            "Extension": self.Extension,
            "Mime": self.Mime,
        }


@dataclass(frozen=True)
class Destination:
    """Where a unit goes. Empty peer means Saved Messages."""
    peer: str = ""
    thread: int = 0


class Style(Enum):
    PLAIN = "plain"
    MENTION = "mention"
    HASHTAG = "hashtag"
    BOT_COMMAND = "bot_command"
    URL = "url"
    EMAIL = "email"
    BOLD = "bold"
    ITALIC = "italic"
    CODE = "code"
    PRE = "pre"
    TEXT_URL = "text_url"
    MENTION_NAME = "mention_name"
    PHONE = "phone"
    CASHTAG = "cashtag"
    UNDERLINE = "underline"
    STRIKE = "strike"
    BLOCKQUOTE = "blockquote"
    BANK_CARD = "bank_card"
    SPOILER = "spoiler"
    CUSTOM_EMOJI = "custom_emoji"


@dataclass(frozen=True)
class CaptionSegment:
    """A run of caption text with one rendering style."""
    style: Style
    text: str
    language: str = ""
    url: str = ""
    user_id: int = 0
    document_id: int = 0


@dataclass(eq=False)
class TransferUnit:
    """One file's transfer job. Owned by exactly one worker, never retried."""
    file: BinaryIO
    size: int
    peer: Any
    destination: Destination
    caption: list[CaptionSegment] = field(default_factory=list)
    thumb: BinaryIO | None = None
    thread: int = 0
    as_photo: bool = False
    remove: bool = False

    @property
    def path(self) -> Path:
        return Path(self.file.name)

    @property
    def name(self) -> str:
        return self.path.name

    def close(self) -> None:
        self.file.close()
        if self.thumb is not None:
            self.thumb.close()


class MediaKind(Enum):
    DOCUMENT = "document"
    IMAGE = "image"
    VIDEO = "video"
    AUDIO = "audio"
    WEBP = "webp"


@dataclass(frozen=True)
class MediaClassification:
    """Content kind of a file; duration and size are only set for video."""
    kind: MediaKind
    mime: str
    duration: int = 0
    width: int = 0
    height: int = 0
    probed: bool = False


@dataclass
class Stats:
    """Run statistics."""
    total: int = 0
    uploaded: int = 0
    failed: int = 0
