import argparse
import logging
import math
from typing import Optional, Sequence

from exprcalc import EngineError, evaluate

try:
    import readline  # noqa: F401  line editing and history for input()
except ModuleNotFoundError:
    pass

logger = logging.getLogger(__name__)


def format_result(value: float) -> str:
    if math.isnan(value):
        return "nan"
    elif math.isinf(value):
        return "inf" if value > 0 else "-inf"
    elif value.is_integer() and abs(value) < 1e16:
        return str(int(value))
    return repr(value)


def run_once(code: str) -> tuple[bool, str]:
    """Evaluate one line; returns (success, text to print)"""
    try:
        return True, format_result(evaluate(code))
    except EngineError as e:
        logger.debug("Failed to evaluate %r: %s %s", code, type(e).__name__, getattr(e, "kind", ""))
        return False, e.render(code)


def build_arg_parser() -> argparse.ArgumentParser:
    arg_parser = argparse.ArgumentParser(description="Evaluate mathematical expressions")
    arg_parser.add_argument("expr", nargs="?", help="expression to evaluate once; starts a prompt when omitted")
    arg_parser.add_argument("-d", "--debug", action="store_true", help="log tokens and parse trees")
    arg_parser.add_argument("--prompt", default="> ", help="interactive prompt (default: %(default)r)")
    return arg_parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_arg_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.expr is not None:
        ok, text = run_once(args.expr)
        print(text)
        return 0 if ok else 1

    while True:
        try:
            code = input(args.prompt)
        except (EOFError, KeyboardInterrupt):
            print()
            return 0

        if not code.strip():
            continue

        _, text = run_once(code)
        print(text)


if __name__ == "__main__":
    raise SystemExit(main())
