"""Sandboxed expression engine for routing and captions."""
import logging
from dataclasses import dataclass
from typing import Any
from simpleeval import EvalWithCompoundTypes
from ..errors import ConfigError, EvaluationError

log = logging.getLogger(__name__)

DEFAULT_CAPTION = '[{"style": "code", "text": Filename}, " - ", {"style": "code", "text": Mime}]'

ENV_FIELDS = {
    "File": "File path",
    "Thumb": "Thumbnail path",
    "Filename": "File name without extension",
    "Extension": "File extension, with the leading dot",
    "Mime": "File mime type",
}


@dataclass(frozen=True)
class Program:
    """A parsed expression, evaluated once per file."""
    source: str
    tree: Any


def compile_expr(source: str) -> Program:
    """Parse an expression once so each file only pays for evaluation."""
    source = source.strip()
    if not source:
        raise ConfigError("expression must not be empty")
    try:
        tree = EvalWithCompoundTypes.parse(source)
    except SyntaxError as e:
        raise ConfigError(f"compile expression {source!r}: {e}") from e
    return Program(source=source, tree=tree)


def run(program: Program, names: dict[str, Any]) -> Any:
    """Evaluate a compiled program against the given names."""
    evaluator = EvalWithCompoundTypes(names=names)
    try:
        return evaluator.eval(program.source, previously_parsed=program.tree)
    except Exception as e:
        raise EvaluationError(f"run expression {program.source!r}: {e}") from e
