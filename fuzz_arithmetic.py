"""Compare the engine against Python's own arithmetic on random + - * / ( ) expressions"""
import math
import random
import re
import string
import warnings

from exprcalc import EngineError, evaluate


def eval_py(code: str) -> float | str | None:
    try:
        res = eval(code, {"__builtins__": {}})
    except ZeroDivisionError:
        return None  # Python raises where IEEE gives inf/nan, nothing to compare
    except Exception as e:
        return str(e)
    if isinstance(res, (int, float)) and not isinstance(res, bool):
        return float(res)
    return f"not a number: {res!r}"


def eval_my(code: str) -> float | str:
    try:
        return evaluate(code)
    except EngineError as e:
        return str(e)


def agree(res_py: float | str | None, res_my: float | str) -> bool:
    if res_py is None:
        return True
    if isinstance(res_py, float) and isinstance(res_my, float):
        return math.isclose(res_my, res_py) or (math.isnan(res_py) and math.isnan(res_my))
    if isinstance(res_py, str) and isinstance(res_my, str):
        return True
    if isinstance(res_py, str) and res_py.startswith("leading zeros in decimal integer literals are not permitted"):
        return True
    return False


if __name__ == "__main__":
    warnings.filterwarnings("ignore")
    alphabet = string.digits + ".()+-*/ "

    def generate(length: int) -> str:
        return "".join(random.choices(alphabet, k=length))

    while True:
        code = generate(10)

        if re.findall(r"\*\s*\*", code):
            continue  # avoid generating powers (10**4)

        if re.findall(r"/\s*/", code):
            continue  # avoid generating int devision (10 // 3)

        res_py = eval_py(code)
        res_my = eval_my(code)
        if not agree(res_py, res_my):
            print(f"{code!r}\npy: {res_py}\nmy: {res_my}\n\n")
