import enum
import re
from dataclasses import dataclass
from typing import Iterable, Iterator

from exprcalc.utils import EngineError, PrintableEnum


class LexErrorKind(PrintableEnum):
    UNEXPECTED_CHARACTER = enum.auto()
    INVALID_NUMBER = enum.auto()


@dataclass
class LexError(EngineError):
    kind: LexErrorKind
    found: str

    stage = "Tokenizer"


class TokenType(PrintableEnum):
    NUMBER = enum.auto()
    IDENTIFIER = enum.auto()
    PLUS = enum.auto()
    MINUS = enum.auto()
    STAR = enum.auto()
    SLASH = enum.auto()
    PERCENT = enum.auto()
    CARET = enum.auto()
    BANG = enum.auto()
    ROOT = enum.auto()
    BRACKET_OPEN = enum.auto()
    BRACKET_CLOSE = enum.auto()
    COMMA = enum.auto()
    EXPR_END = enum.auto()


@dataclass(frozen=True)
class Token:
    type: TokenType
    lexeme: str
    position: int = 0

    def __str__(self) -> str:
        return f"<{self.type}>{self.lexeme}"


SINGLE_CHAR_TOKENS = {
    "+": TokenType.PLUS,
    "-": TokenType.MINUS,
    "*": TokenType.STAR,
    "/": TokenType.SLASH,
    "%": TokenType.PERCENT,
    "^": TokenType.CARET,
    "!": TokenType.BANG,
    "√": TokenType.ROOT,
    "(": TokenType.BRACKET_OPEN,
    ")": TokenType.BRACKET_CLOSE,
    ",": TokenType.COMMA,
}


def _is_digit(s: str) -> bool:
    # str.isdigit() also accepts superscripts and other scripts' digits
    return "0" <= s <= "9"


def _starts_number(code: str, i: int) -> bool:
    if _is_digit(code[i]):
        return True
    return code[i] == "." and i + 1 < len(code) and _is_digit(code[i + 1])


def _is_valid_in_identifier(s: str) -> bool:
    return s.isalnum() or s == "_"


def _scan_number(code: str, i: int) -> int:
    """Index just past the number literal starting at i"""
    j = i
    while j < len(code) and _is_digit(code[j]):
        j += 1
    if j < len(code) and code[j] == ".":
        j += 1
        while j < len(code) and _is_digit(code[j]):
            j += 1
    if j < len(code) and code[j] in "eE":
        j += 1
        if j < len(code) and code[j] in "+-":
            j += 1
        while j < len(code) and _is_digit(code[j]):
            j += 1
    return j


def tokenize(code: str) -> Iterator[Token]:
    """Lazily split code into tokens, finishing with a single EXPR_END token.

    Errors are raised when the offending character is reached, so tokens
    before it have already been handed out.
    """
    i = 0
    while i < len(code):
        char = code[i]
        if char.isspace():
            i += 1
        elif _starts_number(code, i):
            number_end_idx = _scan_number(code, i)
            lexeme = code[i:number_end_idx]
            try:
                float(lexeme)
            except ValueError:
                raise LexError(
                    f"Invalid number literal: {lexeme!r}",
                    position=i,
                    kind=LexErrorKind.INVALID_NUMBER,
                    found=lexeme,
                ) from None
            yield Token(type=TokenType.NUMBER, lexeme=lexeme, position=i)
            i = number_end_idx
            if i < len(code) and code[i] == ".":
                # 3.14.15, 3e2.1
                raise LexError(
                    "Unexpected character: '.'",
                    position=i,
                    kind=LexErrorKind.UNEXPECTED_CHARACTER,
                    found=".",
                )
        elif char.isalpha():
            ident_end_idx = i + 1
            while ident_end_idx < len(code) and _is_valid_in_identifier(code[ident_end_idx]):
                ident_end_idx += 1
            yield Token(type=TokenType.IDENTIFIER, lexeme=code[i:ident_end_idx], position=i)
            i = ident_end_idx
        elif char in SINGLE_CHAR_TOKENS:
            yield Token(type=SINGLE_CHAR_TOKENS[char], lexeme=char, position=i)
            i += 1
        else:
            raise LexError(
                f"Unexpected character: {char!r}",
                position=i,
                kind=LexErrorKind.UNEXPECTED_CHARACTER,
                found=char,
            )

    yield Token(type=TokenType.EXPR_END, lexeme="", position=len(code))


def untokenize(tokens: Iterable[Token]) -> str:
    result = " ".join(t.lexeme for t in tokens if t.type is not TokenType.EXPR_END)

    # ( 1 + 2 ) => (1 + 2)
    result = re.sub(r"\(\s+", "(", result)
    result = re.sub(r"\s+\)", ")", result)

    # sqrt ( 2 ) => sqrt(2), 1 , 2 => 1, 2
    result = re.sub(r"(\w)\s+\(", r"\1(", result)
    result = re.sub(r"\s+,", ",", result)

    # 4 ^ 5 => 4^5, 5 ! => 5!, √ 4 => √4
    result = re.sub(r"\s+\^\s+", "^", result)
    result = re.sub(r"\s+!", "!", result)
    result = re.sub(r"√\s+", "√", result)
    return result
