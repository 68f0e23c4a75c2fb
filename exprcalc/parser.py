import enum
import logging
from dataclasses import dataclass, field
from typing import Iterable, Iterator, Optional

from exprcalc.tokenizer import Token, TokenType, untokenize
from exprcalc.utils import EngineError, PrintableEnum

logger = logging.getLogger(__name__)


class ParseErrorKind(PrintableEnum):
    UNEXPECTED_TOKEN = enum.auto()
    UNEXPECTED_END_OF_INPUT = enum.auto()
    UNMATCHED_PARENTHESIS = enum.auto()
    TRAILING_INPUT = enum.auto()
    TOO_DEEP = enum.auto()


@dataclass
class ParseError(EngineError):
    kind: ParseErrorKind
    found: Optional[Token] = None

    stage = "Parser"


class BinaryOperator(PrintableEnum):
    ADD = enum.auto()
    SUB = enum.auto()
    MUL = enum.auto()
    DIV = enum.auto()
    MOD = enum.auto()
    POW = enum.auto()


class UnaryOperator(PrintableEnum):
    NEG = enum.auto()
    POS = enum.auto()
    SQRT = enum.auto()
    FACTORIAL = enum.auto()


class Fixity(PrintableEnum):
    PREFIX = enum.auto()
    INFIX = enum.auto()
    POSTFIX = enum.auto()


class Associativity(PrintableEnum):
    LEFT = enum.auto()
    RIGHT = enum.auto()


Operator = BinaryOperator | UnaryOperator


@dataclass(frozen=True)
class OperatorInfo:
    operator: Operator
    precedence: int
    associativity: Associativity
    fixity: Fixity

    def operand_precedence(self) -> int:
        """Minimum precedence for the operand parsed after this operator"""
        if self.associativity is Associativity.LEFT:
            return self.precedence + 1
        return self.precedence


def _op(operator: Operator, precedence: int, associativity: Associativity, fixity: Fixity) -> OperatorInfo:
    return OperatorInfo(operator=operator, precedence=precedence, associativity=associativity, fixity=fixity)


LEFT, RIGHT = Associativity.LEFT, Associativity.RIGHT

# prefix + and - sit above every infix/postfix level, so they take a single primary term
PREFIX_OPERATORS: dict[TokenType, OperatorInfo] = {
    TokenType.PLUS: _op(UnaryOperator.POS, 5, RIGHT, Fixity.PREFIX),
    TokenType.MINUS: _op(UnaryOperator.NEG, 5, RIGHT, Fixity.PREFIX),
    TokenType.ROOT: _op(UnaryOperator.SQRT, 1, RIGHT, Fixity.PREFIX),
}

# infix and postfix share the loop after a term, and never share a token type
TRAILING_OPERATORS: dict[TokenType, OperatorInfo] = {
    TokenType.BANG: _op(UnaryOperator.FACTORIAL, 4, LEFT, Fixity.POSTFIX),
    TokenType.CARET: _op(BinaryOperator.POW, 3, RIGHT, Fixity.INFIX),
    TokenType.STAR: _op(BinaryOperator.MUL, 2, LEFT, Fixity.INFIX),
    TokenType.SLASH: _op(BinaryOperator.DIV, 2, LEFT, Fixity.INFIX),
    TokenType.PERCENT: _op(BinaryOperator.MOD, 2, LEFT, Fixity.INFIX),
    TokenType.PLUS: _op(BinaryOperator.ADD, 1, LEFT, Fixity.INFIX),
    TokenType.MINUS: _op(BinaryOperator.SUB, 1, LEFT, Fixity.INFIX),
}

LOWEST_PRECEDENCE = 0
# prefix operators, brackets, call arguments and right operands each open a level
MAX_NESTING = 200


@dataclass
class Literal:
    value: float


@dataclass
class ConstantRef:
    name: str
    position: Optional[int] = field(default=None, compare=False)


@dataclass
class UnaryOp:
    operator: UnaryOperator
    operand: "Expression"
    fixity: Fixity = Fixity.PREFIX


@dataclass
class BinaryOp:
    operator: BinaryOperator
    left: "Expression"
    right: "Expression"


@dataclass
class Call:
    name: str
    arguments: list["Expression"] = field(default_factory=list)
    position: Optional[int] = field(default=None, compare=False)


Expression = Literal | ConstantRef | UnaryOp | BinaryOp | Call


class _TokenStream:
    """One-token lookahead over a lazy token iterator"""

    def __init__(self, tokens: Iterable[Token]) -> None:
        self._tokens: Iterator[Token] = iter(tokens)
        self._peeked: Optional[Token] = None
        self._last: Optional[Token] = None
        self.consumed: list[Token] = []
        self.depth = 0

    def peek(self) -> Token:
        if self._peeked is None:
            # a stream that stops without EXPR_END is treated as ended right after its last token
            fallback_pos = self._last.position + len(self._last.lexeme) if self._last else 0
            self._peeked = next(self._tokens, Token(type=TokenType.EXPR_END, lexeme="", position=fallback_pos))
            logger.debug("Read token %s at %d", self._peeked, self._peeked.position)
        return self._peeked

    def advance(self) -> Token:
        token = self.peek()
        if token.type is not TokenType.EXPR_END:
            self._peeked = None
            self._last = token
            self.consumed.append(token)
        return token


def parse(tokens: Iterable[Token]) -> Expression:
    stream = _TokenStream(tokens)
    expr = _parse_expression(stream, LOWEST_PRECEDENCE)
    trailing = stream.peek()
    if trailing.type is not TokenType.EXPR_END:
        raise ParseError(
            f"Unexpected {trailing.lexeme!r} after the end of the expression",
            position=trailing.position,
            kind=ParseErrorKind.TRAILING_INPUT,
            found=trailing,
        )
    if logger.isEnabledFor(logging.DEBUG):
        logger.debug("Parsed expression %r: %s", untokenize(stream.consumed), expr)
    return expr


def _parse_expression(stream: _TokenStream, min_precedence: int) -> Expression:
    if stream.depth >= MAX_NESTING:
        token = stream.peek()
        raise ParseError(
            f"Expression is nested more than {MAX_NESTING} levels deep",
            position=token.position,
            kind=ParseErrorKind.TOO_DEEP,
            found=token,
        )
    stream.depth += 1
    left = _parse_primary(stream)
    while True:
        info = TRAILING_OPERATORS.get(stream.peek().type)
        if info is None or info.precedence < min_precedence:
            stream.depth -= 1
            return left
        stream.advance()
        if info.fixity is Fixity.POSTFIX:
            left = UnaryOp(operator=info.operator, operand=left, fixity=Fixity.POSTFIX)  # type: ignore
        else:
            right = _parse_expression(stream, info.operand_precedence())
            left = BinaryOp(operator=info.operator, left=left, right=right)  # type: ignore


def _parse_primary(stream: _TokenStream) -> Expression:
    token = stream.advance()
    if token.type is TokenType.NUMBER:
        return Literal(float(token.lexeme))
    elif token.type is TokenType.IDENTIFIER:
        if stream.peek().type is TokenType.BRACKET_OPEN:
            opening = stream.advance()
            return Call(name=token.lexeme, arguments=_parse_arguments(stream, opening), position=token.position)
        return ConstantRef(token.lexeme, position=token.position)
    elif token.type is TokenType.BRACKET_OPEN:
        inner = _parse_expression(stream, LOWEST_PRECEDENCE)
        _expect_closing(stream, opening=token, expected="')'")
        return inner
    elif token.type in PREFIX_OPERATORS:
        info = PREFIX_OPERATORS[token.type]
        operand = _parse_expression(stream, info.operand_precedence())
        return UnaryOp(operator=info.operator, operand=operand)  # type: ignore
    elif token.type is TokenType.EXPR_END:
        raise ParseError(
            "Unexpected end of input, expected a value",
            position=token.position,
            kind=ParseErrorKind.UNEXPECTED_END_OF_INPUT,
            found=token,
        )
    else:
        raise ParseError(
            f"Expected a value, found {token.lexeme!r}",
            position=token.position,
            kind=ParseErrorKind.UNEXPECTED_TOKEN,
            found=token,
        )


def _parse_arguments(stream: _TokenStream, opening: Token) -> list[Expression]:
    arguments: list[Expression] = []
    if stream.peek().type is TokenType.BRACKET_CLOSE:
        stream.advance()
        return arguments
    while True:
        arguments.append(_parse_expression(stream, LOWEST_PRECEDENCE))
        if stream.peek().type is TokenType.COMMA:
            stream.advance()
            continue
        _expect_closing(stream, opening=opening, expected="',' or ')'")
        return arguments


def _expect_closing(stream: _TokenStream, opening: Token, expected: str) -> None:
    token = stream.advance()
    if token.type is TokenType.BRACKET_CLOSE:
        return
    if token.type is TokenType.EXPR_END:
        raise ParseError(
            "Unclosed bracket",
            position=opening.position,
            kind=ParseErrorKind.UNMATCHED_PARENTHESIS,
            found=token,
        )
    raise ParseError(
        f"Expected {expected}, found {token.lexeme!r}",
        position=token.position,
        kind=ParseErrorKind.UNEXPECTED_TOKEN,
        found=token,
    )
