"""Error taxonomy.

Configuration and preparation errors stop a batch, transfer errors only
fail the unit they belong to, cancellation stops everything.
"""


class TgPushError(Exception):
    """Base error."""


class ConfigError(TgPushError):
    """Invalid options, raised before any file is touched."""


class PreparationError(TgPushError):
    """A source file could not be turned into a transfer unit."""


class EvaluationError(PreparationError):
    """A routing or caption expression failed or returned an unsupported shape."""


class StyleError(EvaluationError):
    """A styled caption record could not be parsed."""


class TransferError(TgPushError):
    """A worker stage failed for a single unit."""

    def __init__(self, stage: str, cause: BaseException):
        super().__init__(f"{stage}: {cause}")
        self.stage = stage
        self.cause = cause


class Cancelled(TgPushError):
    """The shared cancellation was signalled."""

    def __init__(self, message: str = "canceled"):
        super().__init__(message)
