"""Per-file destination and caption evaluation."""
import logging
from typing import Any
from pydantic import BaseModel, ConfigDict, ValidationError
from ..errors import EvaluationError
from ..models import CaptionSegment, Destination, ExprEnv, SourceFile, Style
from ..telegram.styling import parse_styled
from . import expr
from .media import detect_path

log = logging.getLogger(__name__)


def build_env(source: SourceFile) -> ExprEnv:
    """Names an expression sees for one file. Mime falls back to '' on error."""
    try:
        mime = detect_path(source.path)
    except OSError as e:
        log.error(f"Detect mime of {source.path} failed: {e}")
        mime = ""
    return ExprEnv(
        File=str(source.path),
        Thumb=str(source.thumb) if source.thumb else "",
        Filename=source.path.stem,
        Extension=source.path.suffix,
        Mime=mime,
    )


class _Dest(BaseModel):
    """Lenient shape of a routing record like {"Peer": "chat", "Thread": 5}."""
    model_config = ConfigDict(coerce_numbers_to_str=True, extra="ignore")

    peer: str = ""
    thread: int = 0


def _type_name(value: Any) -> str:
    return type(value).__name__


def decode_destination(result: Any) -> Destination:
    """Decode a router result: a bare peer or a {Peer, Thread} record."""
    if isinstance(result, str):
        return Destination(peer=result)

    if isinstance(result, dict):
        try:
            dest = _Dest.model_validate({str(k).lower(): v for k, v in result.items()})
        except ValidationError as e:
            raise EvaluationError(f"decode dest {result!r}: {e}") from e
        return Destination(peer=dest.peer, thread=dest.thread)

    raise EvaluationError(f"message router must return str or dict, got {_type_name(result)}")


def decode_caption(result: Any) -> list[CaptionSegment]:
    """Decode a caption result: a plain string or a list of strings and style records."""
    if isinstance(result, str):
        return [CaptionSegment(Style.PLAIN, result)]

    if isinstance(result, (list, tuple)):
        segments = []
        for item in result:
            if isinstance(item, str):
                segments.append(CaptionSegment(Style.PLAIN, item))
            elif isinstance(item, dict):
                segments.append(parse_styled(item))
            else:
                raise EvaluationError(
                    f"caption elements must be str or dict, got {_type_name(item)}"
                )
        return segments

    raise EvaluationError(f"caption must return str or list, got {_type_name(result)}")


def resolve_destination(program: expr.Program, env: ExprEnv) -> Destination:
    return decode_destination(expr.run(program, env.as_names()))


def resolve_caption(program: expr.Program, env: ExprEnv) -> list[CaptionSegment]:
    return decode_caption(expr.run(program, env.as_names()))
