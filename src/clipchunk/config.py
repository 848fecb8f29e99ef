# src/clipchunk/config.py

DEFAULT_TOKEN_LIMIT = 4096

# Provenance header prefixed to every file before tokenization
HEADER_TEMPLATE = "=====<{path}>=====\n"

# Tokens inside a chunk are joined with this when delivered
CHUNK_SEPARATOR = " "

MODE_SPLIT = "split"
MODE_OVERFLOW = "overflow"
PACKING_MODES = (MODE_SPLIT, MODE_OVERFLOW)

TOKENIZER_DEFAULT = "default"
TOKENIZER_WHITESPACE = "whitespace"
TOKENIZER_NAMES = (TOKENIZER_DEFAULT, TOKENIZER_WHITESPACE)

CONTINUE_PROMPT = "Copied a chunk. Press Enter to continue..."

# tiktoken encodings tried in order for --stats estimates
ESTIMATE_ENCODINGS = ["cl100k_base", "p50k_base"]
