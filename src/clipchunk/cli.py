# src/clipchunk/cli.py
import sys
import argparse
import itertools
from pathlib import Path
from typing import Callable, Iterator, List, Optional

import pathspec

# Module imports
from clipchunk.config import (
    DEFAULT_TOKEN_LIMIT,
    MODE_SPLIT,
    PACKING_MODES,
    TOKENIZER_DEFAULT,
    TOKENIZER_NAMES,
)
from clipchunk.core.delivery import BaseSink, ClipboardSink, StreamSink, deliver_chunks, no_wait, wait_for_enter
from clipchunk.core.frame import build_frame
from clipchunk.core.ignore import load_exclude_spec
from clipchunk.core.packer import ChunkPacker
from clipchunk.core.scanner import FileScanner
from clipchunk.errors import ClipchunkError
from clipchunk.models import Chunk
from clipchunk.utils.tokenizer import Tokenizer, get_tokenizer


def positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Failed to parse token limit: '{value}' is not an integer")
    if number < 1:
        raise argparse.ArgumentTypeError(f"Token limit must be at least 1, got {number}")
    return number


def create_arg_parser():
    parser = argparse.ArgumentParser(
        description="Split the text of matching files into token-bounded chunks and copy them to the clipboard one at a time."
    )
    parser.add_argument("directory", type=str, help="Directory to search (recursively)")
    parser.add_argument("pattern", type=str, help="Glob pattern for file names, e.g. '*.txt'")
    parser.add_argument(
        "token_limit",
        type=positive_int,
        nargs="?",
        default=DEFAULT_TOKEN_LIMIT,
        help=f"Maximum tokens per chunk (default: {DEFAULT_TOKEN_LIMIT})",
    )
    parser.add_argument(
        "--mode",
        choices=PACKING_MODES,
        default=MODE_SPLIT,
        help="How to handle a file larger than one chunk: split it, or emit it whole with a warning",
    )
    parser.add_argument("--tokenizer", choices=TOKENIZER_NAMES, default=TOKENIZER_DEFAULT, help="Tokenizer variant")
    parser.add_argument("--exclude", action="append", default=[], metavar="PATTERN", help="Exclude paths matching a .gitignore-style pattern (repeatable)")
    parser.add_argument("--ignore-file", type=Path, default=None, help="Read exclude patterns from a .gitignore-style file")
    parser.add_argument("--stdout", action="store_true", help="Write chunks to stdout instead of the clipboard")
    parser.add_argument("-y", "--yes", action="store_true", help="Do not pause between chunks")
    parser.add_argument("--stats", action="store_true", help="Print chunk sizes with estimated LLM tokens before delivery")
    return parser


def iter_chunks(
    directory: str,
    pattern: str,
    token_limit: int = DEFAULT_TOKEN_LIMIT,
    mode: str = MODE_SPLIT,
    tokenizer: str = TOKENIZER_DEFAULT,
    exclude_spec: Optional[pathspec.PathSpec] = None,
) -> Iterator[Chunk]:
    """
    Builds the lazy chunk stream. Configuration and pattern errors are
    raised here, before any file is read.
    """
    packer = ChunkPacker(token_limit, mode)
    split = get_tokenizer(tokenizer)
    scanner = FileScanner(directory, pattern, exclude_spec)

    frames = (split(build_frame(sf.path, sf.lines)) for sf in scanner.scan())
    return packer.pack(frames)


def build_chunks(directory: str, pattern: str, token_limit: int = DEFAULT_TOKEN_LIMIT, **kwargs) -> List[Chunk]:
    return list(iter_chunks(directory, pattern, token_limit, **kwargs))


def print_stats(chunks: List[Chunk], out) -> None:
    print("\n--- Chunks ---", file=out)
    print(f"{'Chunk':<6} | {'Tokens':<8} | {'Est. LLM tokens'}", file=out)
    print("-" * 40, file=out)
    for chunk in chunks:
        print(f"{chunk.index + 1:<6} | {len(chunk):<8} | {Tokenizer.count(chunk.text)}", file=out)
    print("-" * 40, file=out)
    print(f"Total chunks: {len(chunks)}", file=out)
    print(f"Total tokens: {sum(len(c) for c in chunks)}", file=out)
    print("-" * 40, file=out)


def run(
    directory: str,
    pattern: str,
    token_limit: int = DEFAULT_TOKEN_LIMIT,
    *,
    mode: str = MODE_SPLIT,
    tokenizer: str = TOKENIZER_DEFAULT,
    exclude_spec: Optional[pathspec.PathSpec] = None,
    sink: Optional[BaseSink] = None,
    wait: Callable[[], None] = wait_for_enter,
    stats: bool = False,
    out=None,
) -> int:
    """
    Packs the matching files and delivers the chunks one by one.
    The clipboard is only acquired once there is something to deliver.
    Returns the number of chunks delivered.
    """
    out = out if out is not None else sys.stdout
    chunks = iter_chunks(directory, pattern, token_limit, mode=mode, tokenizer=tokenizer, exclude_spec=exclude_spec)

    if stats:
        chunks = list(chunks)
        if chunks:
            print_stats(chunks, out)
        chunks = iter(chunks)

    first = next(chunks, None)
    if first is None:
        print("No matching files found.", file=out)
        return 0

    if sink is None:
        sink = ClipboardSink()

    return deliver_chunks(itertools.chain([first], chunks), sink, wait)


def main():
    try:
        # 1. Setup
        parser = create_arg_parser()
        args = parser.parse_args()

        # Keep stdout clean for chunk text when it is the sink
        out = sys.stderr if args.stdout else sys.stdout

        exclude_spec = load_exclude_spec(args.ignore_file, extra_patterns=args.exclude)

        print(f"--- clipchunk ---", file=out)
        print(f"Scanning: {args.directory}", file=out)
        print(f"Pattern:  {args.pattern}", file=out)
        print(f"Limit:    {args.token_limit} tokens per chunk ({args.mode})", file=out)

        # 2. Pack & deliver
        sink = StreamSink(sys.stdout) if args.stdout else None
        wait = no_wait if (args.yes or args.stdout) else wait_for_enter

        delivered = run(
            args.directory,
            args.pattern,
            args.token_limit,
            mode=args.mode,
            tokenizer=args.tokenizer,
            exclude_spec=exclude_spec,
            sink=sink,
            wait=wait,
            stats=args.stats,
            out=out,
        )

        if delivered:
            target = "stdout" if args.stdout else "clipboard"
            print(f"\nDone! {delivered} chunk(s) delivered to {target}.", file=out)

    except KeyboardInterrupt:
        print("\nCancelled.", file=sys.stderr)
        sys.exit(1)

    except ClipchunkError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    except Exception as e:
        print(f"An unexpected error occurred: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
