import decimal
import functools
import math
import types
from dataclasses import dataclass
from typing import Callable, Mapping, Optional

NumericFunc = Callable[..., float]


@dataclass(frozen=True)
class BuiltinFunc:
    name: str
    min_args: int
    max_args: Optional[int]  # None for any number of arguments
    fn: NumericFunc

    def accepts(self, arg_count: int) -> bool:
        return arg_count >= self.min_args and (self.max_args is None or arg_count <= self.max_args)

    def arity(self) -> str:
        if self.max_args is None:
            return f"at least {self.min_args}"
        elif self.max_args == self.min_args:
            return str(self.min_args)
        return f"{self.min_args} to {self.max_args}"


_BUILTIN_FUNCS: dict[str, BuiltinFunc] = dict()
BUILTIN_FUNCS: Mapping[str, BuiltinFunc] = types.MappingProxyType(_BUILTIN_FUNCS)

CONSTANTS: Mapping[str, float] = types.MappingProxyType(
    {
        "e": math.e,
        "pi": math.pi,
        "π": math.pi,
        "tau": math.tau,
        "inf": math.inf,
        "nan": math.nan,
    }
)


def normalize_name(name: str) -> str:
    return name.casefold()


def lookup_constant(name: str) -> Optional[float]:
    return CONSTANTS.get(normalize_name(name))


def lookup_func(name: str) -> Optional[BuiltinFunc]:
    return BUILTIN_FUNCS.get(normalize_name(name))


def ieee(fn: NumericFunc) -> NumericFunc:
    """Turn math module domain errors into nan and overflows into inf"""

    @functools.wraps(fn)
    def decorated(*args: float) -> float:
        try:
            return fn(*args)
        except ValueError:
            return math.nan
        except OverflowError:
            return math.inf

    return decorated


def register_builtin_func(name: str, min_args: int = 1, max_args: Optional[int] = None, variadic: bool = False):
    """max_args defaults to min_args; variadic functions take any number from min_args up"""

    def decorator(fn: NumericFunc) -> NumericFunc:
        key = normalize_name(name)
        if key in _BUILTIN_FUNCS:
            raise ValueError(f"Built-in function {name!r} is already registered")
        _BUILTIN_FUNCS[key] = BuiltinFunc(
            name=name,
            min_args=min_args,
            max_args=None if variadic else (min_args if max_args is None else max_args),
            fn=fn,
        )
        return fn

    return decorator


def divide(a: float, b: float) -> float:
    try:
        return a / b
    except ZeroDivisionError:
        if a == 0 or math.isnan(a):
            return math.nan
        return math.copysign(math.inf, a) * math.copysign(1.0, b)


def remainder(a: float, b: float) -> float:
    """Truncating remainder: sign of the dividend, magnitude below |b|"""
    if not (math.isfinite(a) and math.isfinite(b)) or b == 0:
        return math.nan
    return math.fmod(a, b)


def _is_odd_integer(x: float) -> bool:
    return math.isfinite(x) and x.is_integer() and x % 2 == 1


def power(a: float, b: float) -> float:
    try:
        return math.pow(a, b)
    except OverflowError:
        return -math.inf if a < 0 and _is_odd_integer(b) else math.inf
    except ValueError:
        if a == 0 and b < 0:
            return math.copysign(math.inf, a) if _is_odd_integer(b) else math.inf
        return math.nan


def factorial(x: float) -> float:
    if math.isnan(x) or x < 0 or not (math.isinf(x) or x.is_integer()):
        return math.nan
    if math.isinf(x):
        return math.inf
    try:
        return math.gamma(x + 1)
    except OverflowError:
        return math.inf


@register_builtin_func("sqrt")
@ieee
def sqrt_(x: float) -> float:
    return math.sqrt(x)


@register_builtin_func("abs")
def abs_(x: float) -> float:
    return math.fabs(x)


@register_builtin_func("exp")
@ieee
def exp_(x: float) -> float:
    return math.exp(x)


@register_builtin_func("ln")
@ieee
def ln_(x: float) -> float:
    if x == 0:
        return -math.inf
    return math.log(x)


@register_builtin_func("log", min_args=1, max_args=2)
@ieee
def log_(x: float, base: float = math.e) -> float:
    if base == math.e:
        return ln_(x)
    return divide(ln_(x), ln_(base))


@register_builtin_func("log10")
@ieee
def log10_(x: float) -> float:
    if x == 0:
        return -math.inf
    return math.log10(x)


@register_builtin_func("log2")
@ieee
def log2_(x: float) -> float:
    if x == 0:
        return -math.inf
    return math.log2(x)


@register_builtin_func("sin")
@ieee
def sin_(x: float) -> float:
    return math.sin(x)


@register_builtin_func("cos")
@ieee
def cos_(x: float) -> float:
    return math.cos(x)


@register_builtin_func("tan")
@ieee
def tan_(x: float) -> float:
    return math.tan(x)


@register_builtin_func("asin")
@ieee
def asin_(x: float) -> float:
    return math.asin(x)


@register_builtin_func("acos")
@ieee
def acos_(x: float) -> float:
    return math.acos(x)


@register_builtin_func("atan")
def atan_(x: float) -> float:
    return math.atan(x)


@register_builtin_func("atan2", min_args=2)
def atan2_(y: float, x: float) -> float:
    return math.atan2(y, x)


@register_builtin_func("degrees")
def degrees_(x: float) -> float:
    return math.degrees(x)


@register_builtin_func("radians")
def radians_(x: float) -> float:
    return math.radians(x)


# math.floor and friends return ints and raise on inf/nan


@register_builtin_func("floor")
def floor_(x: float) -> float:
    return float(math.floor(x)) if math.isfinite(x) else x


@register_builtin_func("ceil")
def ceil_(x: float) -> float:
    return float(math.ceil(x)) if math.isfinite(x) else x


@register_builtin_func("trunc")
def trunc_(x: float) -> float:
    return float(math.trunc(x)) if math.isfinite(x) else x


# every finite double is exact with 1074 decimal places
_MAX_ROUND_DIGITS = 1074
_ROUND_CONTEXT = decimal.Context(prec=1500, rounding=decimal.ROUND_HALF_UP)


@register_builtin_func("round", min_args=1, max_args=2)
def round_(x: float, digits: float = 0.0) -> float:
    """Round half away from zero to `digits` decimal places"""
    if not math.isfinite(digits) or digits < 0 or not digits.is_integer():
        return math.nan
    if not math.isfinite(x) or digits > _MAX_ROUND_DIGITS:
        return x
    quantum = decimal.Decimal(1).scaleb(-int(digits))
    rounded = decimal.Decimal(x).quantize(quantum, context=_ROUND_CONTEXT)
    return math.copysign(float(rounded), x)


@register_builtin_func("min", min_args=1, variadic=True)
def min_(*args: float) -> float:
    if any(math.isnan(a) for a in args):
        return math.nan
    return min(args)


@register_builtin_func("max", min_args=1, variadic=True)
def max_(*args: float) -> float:
    if any(math.isnan(a) for a in args):
        return math.nan
    return max(args)
