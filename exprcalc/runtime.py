import enum
import logging
import operator
from dataclasses import dataclass
from typing import Callable

from exprcalc.builtins import divide, factorial, lookup_constant, lookup_func, power, remainder, sqrt_
from exprcalc.parser import BinaryOp, BinaryOperator, Call, ConstantRef, Expression, Literal, UnaryOp, UnaryOperator
from exprcalc.utils import EngineError, PrintableEnum

logger = logging.getLogger(__name__)


class EvalErrorKind(PrintableEnum):
    UNKNOWN_CONSTANT = enum.auto()
    UNKNOWN_FUNCTION = enum.auto()
    ARITY_MISMATCH = enum.auto()
    TOO_DEEP = enum.auto()


@dataclass
class EvalError(EngineError):
    kind: EvalErrorKind
    name: str

    stage = "Runtime"


UnaryOperationImpl = Callable[[float], float]
BinaryOperationImpl = Callable[[float, float], float]

unary_impls: dict[UnaryOperator, UnaryOperationImpl] = {
    UnaryOperator.NEG: operator.neg,
    UnaryOperator.POS: operator.pos,
    UnaryOperator.SQRT: sqrt_,
    UnaryOperator.FACTORIAL: factorial,
}

# + - * never raise on floats, the others need explicit IEEE handling
binary_impls: dict[BinaryOperator, BinaryOperationImpl] = {
    BinaryOperator.ADD: operator.add,
    BinaryOperator.SUB: operator.sub,
    BinaryOperator.MUL: operator.mul,
    BinaryOperator.DIV: divide,
    BinaryOperator.MOD: remainder,
    BinaryOperator.POW: power,
}


def evaluate(expression: Expression) -> float:
    """Reduce an expression tree to a single float.

    Numeric trouble (division by zero, domain errors, overflow) comes back as
    inf or nan; only unknown names, wrong argument counts and trees too deep
    to walk raise EvalError.
    """
    try:
        return evaluate_expression(expression)
    except RecursionError:
        raise EvalError(
            "Expression is too deeply nested to evaluate",
            position=None,
            kind=EvalErrorKind.TOO_DEEP,
            name="",
        ) from None


def evaluate_expression(expression: Expression) -> float:
    if isinstance(expression, Literal):
        return expression.value
    elif isinstance(expression, ConstantRef):
        value = lookup_constant(expression.name)
        if value is None:
            raise EvalError(
                f"Unknown constant {expression.name!r}",
                position=expression.position,
                kind=EvalErrorKind.UNKNOWN_CONSTANT,
                name=expression.name,
            )
        return value
    elif isinstance(expression, UnaryOp):
        operand = evaluate_expression(expression.operand)
        return unary_impls[expression.operator](operand)
    elif isinstance(expression, BinaryOp):
        left = evaluate_expression(expression.left)
        right = evaluate_expression(expression.right)
        return binary_impls[expression.operator](left, right)
    elif isinstance(expression, Call):
        return _evaluate_call(expression)
    else:
        raise TypeError(f"Unexpected expression type: {expression!r}")


def _evaluate_call(call: Call) -> float:
    func = lookup_func(call.name)
    if func is None:
        raise EvalError(
            f"Unknown function {call.name!r}",
            position=call.position,
            kind=EvalErrorKind.UNKNOWN_FUNCTION,
            name=call.name,
        )
    if not func.accepts(len(call.arguments)):
        raise EvalError(
            f"{func.name}() takes {func.arity()} argument(s), {len(call.arguments)} given",
            position=call.position,
            kind=EvalErrorKind.ARITY_MISMATCH,
            name=call.name,
        )
    args = [evaluate_expression(arg) for arg in call.arguments]
    result = func.fn(*args)
    logger.debug("%s(%s) = %r", func.name, ", ".join(map(repr, args)), result)
    return float(result)
