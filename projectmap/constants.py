# projectmap/constants.py
# Shared constants for the scanner, accounting and rendering modules,
# kept in one place to avoid circular imports.

# --- Limits ---
MAX_COLLECTED_FILES = 10000
MAX_PREVIEW_BYTES = 1 * 1024 * 1024
BINARY_CACHE_SIZE = 5000
TOKEN_CACHE_SIZE = 5000
FS_CONCURRENCY = 24
TOKENIZE_CONCURRENCY = 8
BINARY_SNIFF_BYTES = 512

# --- Ignore handling ---
IGNORE_FILE_NAME = ".gitignore"
# Always ignored regardless of the ignore file
DEFAULT_IGNORE_PATTERNS = (".git/", ".git")
# Change notifications under these segments are noise
WATCHER_IGNORED_DIRS = frozenset({
    '.git', 'node_modules', '.vscode', 'dist', 'build', 'out', 'target',
    '.next', '.nuxt'
})

# --- Tokenizer ---
ENCODING_NAME = "cl100k_base"

# --- Symbols for the file map ---
LINE_VERTICAL = "│   "
LINE_INTERSECTION = "├── "
LINE_CORNER = "└── "
LINE_EMPTY = "    "
SELECTED_MARKER = " *"
FILE_MAP_LEGEND = "(* denotes selected files)"
