# src/clipchunk/core/packer.py
import sys
from typing import Iterable, Iterator, List, Sequence

from clipchunk.config import DEFAULT_TOKEN_LIMIT, MODE_OVERFLOW, MODE_SPLIT, PACKING_MODES
from clipchunk.errors import ConfigurationError
from clipchunk.models import Chunk


def validate_token_limit(token_limit) -> int:
    if isinstance(token_limit, bool) or not isinstance(token_limit, int):
        raise ConfigurationError(f"Token limit must be an integer, got {token_limit!r}")
    if token_limit < 1:
        raise ConfigurationError(f"Token limit must be at least 1, got {token_limit}")
    return token_limit


class ChunkPacker:
    """
    Packs per-file token frames into chunks of at most `token_limit` tokens.

    Frames are never reordered. A frame that does not fit in the space left
    in the current chunk closes that chunk and starts a new one. A frame that
    is larger than a whole chunk is cut into `token_limit` sized pieces
    ("split" mode) or emitted whole with a warning ("overflow" mode).

    State is per instance; call reset() (or pack()) to start a new run.
    """

    def __init__(self, token_limit: int = DEFAULT_TOKEN_LIMIT, mode: str = MODE_SPLIT):
        self.token_limit = validate_token_limit(token_limit)
        if mode not in PACKING_MODES:
            raise ConfigurationError(
                f"Unknown packing mode '{mode}' (choose from {', '.join(PACKING_MODES)})"
            )
        self.mode = mode
        self.reset()

    def reset(self) -> None:
        self._current: List[str] = []
        self._count = 0
        self._emitted = 0

    @property
    def current_chunk(self) -> List[str]:
        return list(self._current)

    @property
    def current_count(self) -> int:
        return self._count

    def _emit(self, tokens: Sequence[str]) -> Chunk:
        chunk = Chunk(index=self._emitted, tokens=tuple(tokens))
        self._emitted += 1
        return chunk

    def _flush(self) -> Iterator[Chunk]:
        if self._current:
            yield self._emit(self._current)
        self._current = []
        self._count = 0

    def add(self, tokens: Sequence[str]) -> Iterator[Chunk]:
        """Feeds one frame; yields every chunk that the frame completes."""
        remaining = list(tokens)
        limit = self.token_limit

        while remaining:
            if self._count + len(remaining) > limit:
                yield from self._flush()

            if len(remaining) > limit:
                if self.mode == MODE_OVERFLOW:
                    print(
                        f"  > [Warning] Frame of {len(remaining)} tokens exceeds the limit of "
                        f"{limit}; emitting it as one oversized chunk",
                        file=sys.stderr,
                    )
                    yield self._emit(remaining)
                    remaining = []
                else:
                    # Forced mid-file boundary
                    yield self._emit(remaining[:limit])
                    remaining = remaining[limit:]
            else:
                self._current.extend(remaining)
                self._count += len(remaining)
                remaining = []

    def finish(self) -> Iterator[Chunk]:
        """Yields the last, partially filled chunk if there is one."""
        yield from self._flush()

    def pack(self, frames: Iterable[Sequence[str]]) -> Iterator[Chunk]:
        self.reset()
        for tokens in frames:
            yield from self.add(tokens)
        yield from self.finish()
