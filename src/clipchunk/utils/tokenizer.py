# src/clipchunk/utils/tokenizer.py
import re
from typing import Callable, List

import tiktoken

from clipchunk.config import ESTIMATE_ENCODINGS, TOKENIZER_DEFAULT, TOKENIZER_WHITESPACE
from clipchunk.errors import ConfigurationError

# Any run of whitespace that contains no newline
_SEPARATOR_RE = re.compile(r"[^\S\n]+")


def tokenize(text: str) -> List[str]:
    """
    Splits text on whitespace other than newline.
    Newlines stay inside the token that precedes them, so
    "world!\\nThis" is a single token.
    """
    return [t for t in _SEPARATOR_RE.split(text) if t]


def tokenize_whitespace(text: str) -> List[str]:
    """Plain whitespace splitting; newlines are separators and are dropped."""
    return text.split()


_TOKENIZERS = {
    TOKENIZER_DEFAULT: tokenize,
    TOKENIZER_WHITESPACE: tokenize_whitespace,
}


def get_tokenizer(name: str) -> Callable[[str], List[str]]:
    try:
        return _TOKENIZERS[name]
    except KeyError:
        raise ConfigurationError(
            f"Unknown tokenizer '{name}' (choose from {', '.join(_TOKENIZERS)})"
        ) from None


class Tokenizer:
    """Estimates LLM token counts for chunk statistics."""
    _encoding = None

    @classmethod
    def get_encoding(cls):
        if cls._encoding is None:
            last_error = None
            for name in ESTIMATE_ENCODINGS:
                try:
                    cls._encoding = tiktoken.get_encoding(name)
                    break
                except Exception as e:
                    last_error = e
            if cls._encoding is None:
                raise RuntimeError(f"No tiktoken encoding available: {last_error}")
        return cls._encoding

    @staticmethod
    def count(text: str) -> int:
        """Estimates token count for a given text."""
        try:
            encoding = Tokenizer.get_encoding()
            return len(encoding.encode(text))
        except Exception:
            # Fallback estimation strategy
            return len(text) // 4
