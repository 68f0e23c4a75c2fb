"""Expression calculator engine: text in, one float out"""
import logging

from exprcalc import runtime
from exprcalc.parser import ParseError, ParseErrorKind, parse
from exprcalc.runtime import EvalError, EvalErrorKind
from exprcalc.tokenizer import LexError, LexErrorKind, tokenize
from exprcalc.utils import EngineError

__all__ = [
    "EngineError",
    "EvalError",
    "EvalErrorKind",
    "LexError",
    "LexErrorKind",
    "ParseError",
    "ParseErrorKind",
    "evaluate",
]

logger = logging.getLogger(__name__)


def evaluate(expression_text: str) -> float:
    """Tokenize, parse and evaluate one expression.

    Raises LexError, ParseError or EvalError (all EngineError subclasses);
    numeric edge cases come back as inf/nan instead.
    """
    logger.debug("Evaluating %r", expression_text)
    expression = parse(tokenize(expression_text))
    return runtime.evaluate(expression)
