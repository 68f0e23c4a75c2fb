from typing import Type

import pytest

from exprcalc import (
    EngineError,
    EvalError,
    EvalErrorKind,
    LexError,
    LexErrorKind,
    ParseError,
    ParseErrorKind,
    evaluate,
)
from exprcalc.utils import PrintableEnum, excerpt


@pytest.mark.parametrize(
    "code, error_type, kind",
    [
        pytest.param("foo", EvalError, EvalErrorKind.UNKNOWN_CONSTANT),
        pytest.param("x", EvalError, EvalErrorKind.UNKNOWN_CONSTANT),
        pytest.param("a_LoNg_1", EvalError, EvalErrorKind.UNKNOWN_CONSTANT),
        pytest.param("銹", EvalError, EvalErrorKind.UNKNOWN_CONSTANT),
        pytest.param("sqrt", EvalError, EvalErrorKind.UNKNOWN_CONSTANT),
        pytest.param("sqrt(foo)", EvalError, EvalErrorKind.UNKNOWN_CONSTANT),
        pytest.param("foo(1)", EvalError, EvalErrorKind.UNKNOWN_FUNCTION),
        pytest.param("pi(1)", EvalError, EvalErrorKind.UNKNOWN_FUNCTION),
        pytest.param("round(1,2,3)", EvalError, EvalErrorKind.ARITY_MISMATCH),
        pytest.param("round()", EvalError, EvalErrorKind.ARITY_MISMATCH),
        pytest.param("sqrt()", EvalError, EvalErrorKind.ARITY_MISMATCH),
        pytest.param("sqrt(1, 2)", EvalError, EvalErrorKind.ARITY_MISMATCH),
        pytest.param("max()", EvalError, EvalErrorKind.ARITY_MISMATCH),
        # argument count is checked before the arguments are evaluated
        pytest.param("round(foo, 1, 2)", EvalError, EvalErrorKind.ARITY_MISMATCH),
        pytest.param("", ParseError, ParseErrorKind.UNEXPECTED_END_OF_INPUT),
        pytest.param("1 + ", ParseError, ParseErrorKind.UNEXPECTED_END_OF_INPUT),
        pytest.param("(1 + 2", ParseError, ParseErrorKind.UNMATCHED_PARENTHESIS),
        pytest.param("1 * / 2", ParseError, ParseErrorKind.UNEXPECTED_TOKEN),
        pytest.param("1 2", ParseError, ParseErrorKind.TRAILING_INPUT),
        # parse errors win over unknown names
        pytest.param("foo(1", ParseError, ParseErrorKind.UNMATCHED_PARENTHESIS),
        pytest.param("1 $ 2", LexError, LexErrorKind.UNEXPECTED_CHARACTER),
        pytest.param("👋", LexError, LexErrorKind.UNEXPECTED_CHARACTER),
        pytest.param("3e", LexError, LexErrorKind.INVALID_NUMBER),
        pytest.param("foo + $", LexError, LexErrorKind.UNEXPECTED_CHARACTER),
    ],
)
def test_error_kinds(code: str, error_type: Type[EngineError], kind: PrintableEnum) -> None:
    with pytest.raises(error_type) as exc_info:
        evaluate(code)
    assert isinstance(exc_info.value, EngineError)
    assert exc_info.value.kind is kind  # type: ignore


def test_eval_error_names_offender() -> None:
    with pytest.raises(EvalError) as exc_info:
        evaluate("2 * Foo(1)")
    assert exc_info.value.name == "Foo"
    assert exc_info.value.position == 4
    assert str(exc_info.value) == "Unknown function 'Foo'"


def test_arity_message() -> None:
    with pytest.raises(EvalError) as exc_info:
        evaluate("round(1, 2, 3)")
    assert str(exc_info.value) == "round() takes 1 to 2 argument(s), 3 given"


def test_error_does_not_affect_next_evaluation() -> None:
    with pytest.raises(EngineError):
        evaluate("(1 +")
    assert evaluate("1 + 1") == 2.0


@pytest.mark.parametrize(
    "code, expected",
    [
        pytest.param("1 $ 2", "[Tokenizer error] Unexpected character: '$'\n1 $ 2\n  ^"),
        pytest.param("2 * foo", "[Runtime error] Unknown constant 'foo'\n2 * foo\n    ^"),
        pytest.param("(1 + 2", "[Parser error] Unclosed bracket\n(1 + 2\n^"),
        pytest.param("1 +", "[Parser error] Unexpected end of input, expected a value\n1 +\n   ^"),
    ],
)
def test_render(code: str, expected: str) -> None:
    with pytest.raises(EngineError) as exc_info:
        evaluate(code)
    assert exc_info.value.render(code) == expected


def test_render_long_input() -> None:
    code = "1 + 2 + 3 + 4 + 5 + $ + 6 + 7 + 8 + 9"
    with pytest.raises(LexError) as exc_info:
        evaluate(code)
    _, source_line, caret_line = exc_info.value.render(code).split("\n")
    assert source_line == "...+ 4 + 5 + $ + 6 + 7 ..."
    assert caret_line.index("^") == source_line.index("$")


def test_render_without_position() -> None:
    error = EvalError("Unknown constant 'x'", position=None, kind=EvalErrorKind.UNKNOWN_CONSTANT, name="x")
    assert error.render("x") == "[Runtime error] Unknown constant 'x'"


def test_excerpt_short_input() -> None:
    assert excerpt("abc", 1) == ["abc", " ^"]


@pytest.mark.parametrize(
    "code, error_type, kind",
    [
        pytest.param("-" * 600 + "1", ParseError, ParseErrorKind.TOO_DEEP, id="prefix-minus"),
        pytest.param("^".join(["1"] * 1500), ParseError, ParseErrorKind.TOO_DEEP, id="right-assoc-power"),
        pytest.param("(" * 250 + "1" + ")" * 250, ParseError, ParseErrorKind.TOO_DEEP, id="brackets"),
        pytest.param("sqrt(" * 250 + "1" + ")" * 250, ParseError, ParseErrorKind.TOO_DEEP, id="calls"),
        pytest.param("1" + " + 1" * 5000, EvalError, EvalErrorKind.TOO_DEEP, id="left-assoc-chain"),
    ],
)
def test_deep_nesting_is_reported(code: str, error_type: Type[EngineError], kind: PrintableEnum) -> None:
    with pytest.raises(error_type) as exc_info:
        evaluate(code)
    assert exc_info.value.kind is kind  # type: ignore


def test_nesting_limit_position() -> None:
    with pytest.raises(ParseError) as exc_info:
        evaluate("-" * 600 + "1")
    assert exc_info.value.position == 200


@pytest.mark.parametrize(
    "code, expected_ret_val",
    [
        pytest.param("(" * 150 + "1" + ")" * 150, 1.0),
        pytest.param("-" * 150 + "1", 1.0),
        pytest.param("sqrt(" * 100 + "1" + ")" * 100, 1.0),
        pytest.param("1" + " + 1" * 500, 501.0),
    ],
)
def test_moderate_nesting_evaluates(code: str, expected_ret_val: float) -> None:
    assert evaluate(code) == expected_ret_val
