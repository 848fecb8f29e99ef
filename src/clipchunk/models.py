# src/clipchunk/models.py
from dataclasses import dataclass
from typing import Tuple

from clipchunk.config import CHUNK_SEPARATOR


@dataclass(frozen=True)
class SourceFile:
    """One enumerated file and the lines that could be read from it."""
    path: str
    lines: Tuple[str, ...]


@dataclass(frozen=True)
class Chunk:
    """A bounded run of tokens handed to the sink in one delivery."""
    index: int
    tokens: Tuple[str, ...]

    def __len__(self) -> int:
        return len(self.tokens)

    @property
    def text(self) -> str:
        return CHUNK_SEPARATOR.join(self.tokens)
