# src/clipchunk/core/delivery.py
import sys
from abc import ABC, abstractmethod
from typing import Callable, Iterable, Optional, TextIO

import pyperclip

from clipchunk.config import CONTINUE_PROMPT
from clipchunk.errors import SinkError
from clipchunk.models import Chunk


class BaseSink(ABC):
    announce = False

    @abstractmethod
    def deliver(self, text: str) -> None:
        pass


class ClipboardSink(BaseSink):
    """Puts each chunk on the system clipboard via pyperclip."""
    announce = True

    def __init__(self):
        # Fails fast when no copy/paste mechanism exists on this machine
        try:
            pyperclip.paste()
        except pyperclip.PyperclipException as e:
            raise SinkError(f"Failed to initialize the clipboard: {e}") from e

    def deliver(self, text: str) -> None:
        try:
            pyperclip.copy(text)
        except pyperclip.PyperclipException as e:
            raise SinkError(f"Failed to set clipboard contents: {e}") from e


class StreamSink(BaseSink):
    def __init__(self, stream: Optional[TextIO] = None):
        self.stream = stream if stream is not None else sys.stdout

    def deliver(self, text: str) -> None:
        try:
            self.stream.write(text)
            self.stream.write("\n")
            self.stream.flush()
        except OSError as e:
            raise SinkError(f"Failed to write chunk: {e}") from e


def wait_for_enter() -> None:
    try:
        input(CONTINUE_PROMPT)
    except EOFError:
        # stdin closed: nobody can confirm the next chunk
        raise KeyboardInterrupt from None


def no_wait() -> None:
    pass


def deliver_chunks(chunks: Iterable[Chunk], sink: BaseSink, wait: Callable[[], None] = wait_for_enter) -> int:
    """
    Hands chunks to the sink in order, calling wait() between chunks but not
    after the last one. The stream is consumed lazily with one chunk of
    lookahead. Returns the number of chunks delivered.
    """
    delivered = 0
    iterator = iter(chunks)
    pending = next(iterator, None)

    while pending is not None:
        sink.deliver(pending.text)
        delivered += 1
        if sink.announce:
            print(f"Copied chunk {delivered} ({len(pending)} tokens).", file=sys.stderr)
        following = next(iterator, None)
        if following is not None:
            wait()
        pending = following

    return delivered
