"""Styled caption records and their Telegram entities."""
from typing import Any
from pydantic import BaseModel, ConfigDict, ValidationError
from telethon.helpers import add_surrogate
from telethon.tl import types
from ..errors import StyleError
from ..models import CaptionSegment, Style


class StyledRecord(BaseModel):
    """Lenient shape of a caption element like {"style": "code", "text": Mime}."""
    model_config = ConfigDict(coerce_numbers_to_str=True, extra="ignore")

    style: str = "plain"
    text: str = ""
    language: str = ""
    url: str = ""
    user_id: int = 0
    document_id: int = 0


def parse_styled(record: dict[str, Any]) -> CaptionSegment:
    """Turn an expression record into a caption segment."""
    try:
        parsed = StyledRecord.model_validate({str(k).lower(): v for k, v in record.items()})
    except ValidationError as e:
        raise StyleError(f"invalid styled text {record!r}: {e}") from e

    try:
        style = Style(parsed.style.strip().lower())
    except ValueError:
        known = ", ".join(s.value for s in Style)
        raise StyleError(f"unknown style {parsed.style!r}, expected one of: {known}") from None

    if style == Style.TEXT_URL and not parsed.url:
        raise StyleError(f"style text_url requires url: {record!r}")
    if style == Style.MENTION_NAME and not parsed.user_id:
        raise StyleError(f"style mention_name requires user_id: {record!r}")
    if style == Style.CUSTOM_EMOJI and not parsed.document_id:
        raise StyleError(f"style custom_emoji requires document_id: {record!r}")

    return CaptionSegment(
        style=style,
        text=parsed.text,
        language=parsed.language,
        url=parsed.url,
        user_id=parsed.user_id,
        document_id=parsed.document_id,
    )


_SIMPLE = {
    Style.MENTION: types.MessageEntityMention,
    Style.HASHTAG: types.MessageEntityHashtag,
    Style.BOT_COMMAND: types.MessageEntityBotCommand,
    Style.URL: types.MessageEntityUrl,
    Style.EMAIL: types.MessageEntityEmail,
    Style.BOLD: types.MessageEntityBold,
    Style.ITALIC: types.MessageEntityItalic,
    Style.CODE: types.MessageEntityCode,
    Style.PHONE: types.MessageEntityPhone,
    Style.CASHTAG: types.MessageEntityCashtag,
    Style.UNDERLINE: types.MessageEntityUnderline,
    Style.STRIKE: types.MessageEntityStrike,
    Style.BLOCKQUOTE: types.MessageEntityBlockquote,
    Style.BANK_CARD: types.MessageEntityBankCard,
    Style.SPOILER: types.MessageEntitySpoiler,
}


def _entity(segment: CaptionSegment, offset: int, length: int):
    if segment.style in _SIMPLE:
        return _SIMPLE[segment.style](offset, length)
    if segment.style == Style.PRE:
        return types.MessageEntityPre(offset, length, segment.language)
    if segment.style == Style.TEXT_URL:
        return types.MessageEntityTextUrl(offset, length, segment.url)
    if segment.style == Style.MENTION_NAME:
        return types.InputMessageEntityMentionName(
            offset, length, types.InputUser(segment.user_id, 0)
        )
    if segment.style == Style.CUSTOM_EMOJI:
        return types.MessageEntityCustomEmoji(offset, length, segment.document_id)
    return None


def render(segments: list[CaptionSegment]) -> tuple[str, list]:
    """Concatenate segments into message text plus entities.

    Telegram measures offsets in UTF-16 code units, so lengths are taken on
    the surrogate-expanded text.
    """
    text = ""
    entities = []
    offset = 0
    for segment in segments:
        if not segment.text:
            continue
        length = len(add_surrogate(segment.text))
        entity = _entity(segment, offset, length)
        if entity is not None:
            entities.append(entity)
        text += segment.text
        offset += length
    return text, entities
