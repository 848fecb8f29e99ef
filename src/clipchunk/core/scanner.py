# src/clipchunk/core/scanner.py
import sys
import os
from pathlib import Path, PurePath
from typing import Iterator, List, Optional

import pathspec

from clipchunk.models import SourceFile
from clipchunk.core.ignore import compile_pattern
from clipchunk.errors import ConfigurationError


def read_lines(path: str) -> Optional[List[str]]:
    """
    Reads a file line by line, stripping line terminators.
    Lines that are not valid UTF-8 are reported and skipped.
    Returns None if the file cannot be opened at all.
    """
    lines: List[str] = []
    try:
        f = open(path, "rb")
    except OSError as e:
        print(f"  > [Warning] Failed to open file {path}: {e}", file=sys.stderr)
        return None

    with f:
        lineno = 0
        try:
            for raw in f:
                lineno += 1
                if raw.endswith(b"\r\n"):
                    raw = raw[:-2]
                elif raw.endswith(b"\n"):
                    raw = raw[:-1]
                try:
                    lines.append(raw.decode("utf-8"))
                except UnicodeDecodeError as e:
                    print(f"  > [Warning] Failed to read line {lineno} in {path}: {e}", file=sys.stderr)
        except OSError as e:
            print(f"  > [Warning] Read error in {path} after line {lineno}: {e}", file=sys.stderr)

    return lines


def _report_walk_error(error: OSError) -> None:
    print(f"  > [Warning] Skipping directory {error.filename}: {error.strerror or error}", file=sys.stderr)


class FileScanner:
    def __init__(self, directory: str, pattern: str, exclude_spec: Optional[pathspec.PathSpec] = None):
        if not directory:
            raise ConfigurationError("A directory is required")
        if not Path(directory).is_dir():
            raise ConfigurationError(f"Invalid directory '{directory}'")
        self.directory = directory
        self.pattern = pattern
        self.pattern_spec = compile_pattern(pattern)
        # Without a slash the glob selects by file name, like `find -name`
        self.match_name_only = "/" not in pattern
        self.exclude_spec = exclude_spec

    def _is_selected(self, rel_path: PurePath) -> bool:
        candidate = rel_path.name if self.match_name_only else rel_path.as_posix()
        return self.pattern_spec.match_file(candidate)

    def _is_excluded(self, rel_path: PurePath, is_directory: bool) -> bool:
        if self.exclude_spec is None:
            return False
        candidate = rel_path.as_posix()
        if is_directory:
            # "build/" style rules only match paths with a trailing slash
            candidate += "/"
        return self.exclude_spec.match_file(candidate)

    def iter_paths(self) -> Iterator[str]:
        """
        Yields matching file paths in a stable order: the files of a directory
        sorted by name, then each subdirectory (sorted) in turn. Paths are the
        given directory joined with the relative path, not resolved.
        """
        root = self.directory
        for current, dirs, files in os.walk(root, onerror=_report_walk_error):
            rel_dir = PurePath(os.path.relpath(current, root))

            # Prune excluded directories and fix the descent order
            kept = [d for d in dirs if not self._is_excluded(rel_dir / d, is_directory=True)]
            dirs[:] = sorted(kept)

            for name in sorted(files):
                rel_path = rel_dir / name
                if self._is_excluded(rel_path, is_directory=False):
                    continue
                if not self._is_selected(rel_path):
                    continue
                yield os.path.join(current, name)

    def scan(self) -> Iterator[SourceFile]:
        """Reads each matching file in order; unreadable files are skipped."""
        for path in self.iter_paths():
            lines = read_lines(path)
            if lines is None:
                continue
            yield SourceFile(path=path, lines=tuple(lines))
