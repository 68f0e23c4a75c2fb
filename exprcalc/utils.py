import enum
from dataclasses import dataclass
from typing import Optional


class PrintableEnum(enum.Enum):
    def __str__(self) -> str:
        return self.name

    __repr__ = __str__


def excerpt(code: str, idx: int, context: int = 10) -> list[str]:
    """Up to `context` characters around `idx` and a caret line pointing at it"""
    print_start_idx = max(0, idx - context)
    print_ellipsis_pre = print_start_idx > 0
    print_end_idx = min(len(code), idx + context)
    print_ellipsis_post = print_end_idx < len(code)
    return [
        ("..." if print_ellipsis_pre else "")
        + code[print_start_idx:print_end_idx]
        + ("..." if print_ellipsis_post else ""),
        " " * (idx - print_start_idx + (3 if print_ellipsis_pre else 0)) + "^",
    ]


@dataclass
class EngineError(Exception):
    errmsg: str
    position: Optional[int]

    stage = "Engine"

    def __str__(self) -> str:
        return self.errmsg

    def render(self, code: str) -> str:
        lines = [f"[{self.stage} error] {self.errmsg}"]
        if self.position is not None:
            lines.extend(excerpt(code, min(self.position, len(code))))
        return "\n".join(lines)
