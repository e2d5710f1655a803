"""Transfer unit iterator - turns source files into ready-to-send units."""
import logging
import os
from contextlib import ExitStack
from enum import Enum
from typing import Any, BinaryIO, Protocol
from .cancel import CancelToken
from .errors import EvaluationError, PreparationError, TgPushError
from .models import CaptionSegment, Destination, ExprEnv, SourceFile, TransferUnit
from .services import expr
from .services.media import detect_path, is_image
from .services.router import build_env, resolve_caption, resolve_destination

log = logging.getLogger(__name__)


class PeerDirectory(Protocol):
    async def resolve(self, ref: str) -> Any: ...

    async def self_peer(self) -> Any: ...


class State(Enum):
    READY = "ready"
    EXHAUSTED = "exhausted"
    FAILED = "failed"


class UnitIterator:
    """Pull-based unit builder.

    Not safe for concurrent use: only one flow of control may drive it.
    Any preparation error is terminal, later files are never considered.
    """

    def __init__(
        self,
        files: list[SourceFile],
        peers: PeerDirectory,
        to: expr.Program | None = None,
        caption: expr.Program | None = None,
        chat: str = "",
        topic: int = 0,
        photo: bool = False,
        remove: bool = False,
    ):
        self._files = list(files)
        self._peers = peers
        self._to = to
        self._caption = caption
        self._chat = chat
        self._topic = topic
        self._photo = photo
        self._remove = remove

        self._cur = 0
        self._err: TgPushError | None = None
        self._unit: TransferUnit | None = None

    @property
    def state(self) -> State:
        if self._err is not None:
            return State.FAILED
        if self._cur >= len(self._files):
            return State.EXHAUSTED
        return State.READY

    def has_next(self) -> bool:
        return self.state == State.READY

    async def advance(self, token: CancelToken) -> bool:
        """Build the next unit. False means exhausted or failed, see last_error()."""
        if token.cancelled:
            self._err = token.reason
            return False
        if not self.has_next():
            return False

        source = self._files[self._cur]
        self._cur += 1

        try:
            self._unit = await self._prepare(source)
        except PreparationError as e:
            log.error(f"Prepare {source.path} failed: {e}")
            self._err = e
            return False
        return True

    def current(self) -> TransferUnit:
        if self._unit is None:
            raise RuntimeError("no unit yet, call advance() first")
        return self._unit

    def last_error(self) -> TgPushError | None:
        return self._err

    async def _prepare(self, source: SourceFile) -> TransferUnit:
        with ExitStack() as stack:
            try:
                file = stack.enter_context(open(source.path, "rb"))
            except OSError as e:
                raise PreparationError(f"open file: {e}") from e

            env: ExprEnv | None = None
            if self._to is None:
                dest = Destination(peer=self._chat, thread=self._topic)
            else:
                env = build_env(source)
                try:
                    dest = resolve_destination(self._to, env)
                except EvaluationError as e:
                    raise type(e)(f"message routing: {e}") from e
            peer = await self._resolve_peer(dest.peer)

            caption: list[CaptionSegment] = []
            if self._caption is not None:
                env = env or build_env(source)
                try:
                    caption = resolve_caption(self._caption, env)
                except EvaluationError as e:
                    raise type(e)(f"caption: {e}") from e

            thumb = None
            if source.thumb:
                thumb = stack.enter_context(self._open_thumb(source.thumb))

            try:
                size = os.fstat(file.fileno()).st_size
            except OSError as e:
                raise PreparationError(f"stat file: {e}") from e

            stack.pop_all()

        return TransferUnit(
            file=file,
            size=size,
            peer=peer,
            destination=dest,
            caption=caption,
            thumb=thumb,
            thread=dest.thread,
            as_photo=self._photo,
            remove=self._remove,
        )

    async def _resolve_peer(self, ref: str) -> Any:
        try:
            if not ref:
                return await self._peers.self_peer()
            return await self._peers.resolve(ref)
        except Exception as e:
            raise PreparationError(f"resolve peer {ref!r}: {e}") from e

    @staticmethod
    def _open_thumb(path) -> BinaryIO:
        try:
            mime = detect_path(path)
        except OSError as e:
            raise PreparationError(f"invalid thumbnail file {path}: {e}") from e
        if not is_image(mime):
            raise PreparationError(f"invalid thumbnail file {path}: {mime} is not an image")
        try:
            return open(path, "rb")
        except OSError as e:
            raise PreparationError(f"open thumbnail file: {e}") from e
