# src/clipchunk/core/frame.py
from typing import Iterable

from clipchunk.config import HEADER_TEMPLATE


def build_header(path: str) -> str:
    return HEADER_TEMPLATE.format(path=path)


def build_frame(path: str, lines: Iterable[str]) -> str:
    """
    Prefixes the provenance header and terminates every line with a newline.
    Lines arrive already stripped of their terminators, so a file that ends
    without a trailing newline comes out the same as one that has it.
    """
    parts = [build_header(path)]
    for line in lines:
        parts.append(line)
        parts.append("\n")
    return "".join(parts)
