# src/clipchunk/core/ignore.py
from pathlib import Path
from typing import List, Optional

import pathspec

from clipchunk.errors import ConfigurationError, EnumerationError


def compile_pattern(pattern: str) -> pathspec.PathSpec:
    """
    Compiles the file selection pattern with gitignore-style matching.
    The pattern is always a literal selector: a leading "!" or "#" is
    escaped so it is not read as a negation or a comment.
    """
    if not pattern or not pattern.strip():
        raise ConfigurationError("A file pattern is required")
    line = "\\" + pattern if pattern[0] in "!#" else pattern
    try:
        return pathspec.GitIgnoreSpec.from_lines([line])
    except ValueError as e:
        raise EnumerationError(f"Invalid file pattern '{pattern}': {e}") from e


def load_exclude_spec(
    ignore_file: Optional[Path] = None, extra_patterns: Optional[List[str]] = None
) -> Optional[pathspec.PathSpec]:
    """
    Loads exclusion rules from an ignore file (.gitignore syntax) and
    appends any extra patterns. Returns None when there are no rules.
    """
    lines: List[str] = []

    if ignore_file is not None:
        try:
            with open(ignore_file, "r", encoding="utf-8") as f:
                lines = f.read().splitlines()
        except OSError as e:
            raise ConfigurationError(f"Cannot read ignore file '{ignore_file}': {e}") from e

    if extra_patterns:
        lines.extend(extra_patterns)

    if not any(line.strip() and not line.lstrip().startswith("#") for line in lines):
        return None

    try:
        return pathspec.GitIgnoreSpec.from_lines(lines)
    except ValueError as e:
        raise EnumerationError(f"Error parsing exclude rules: {e}") from e
