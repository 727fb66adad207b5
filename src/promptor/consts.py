"""Constants for Promptor application"""

import re

# ==================== File Paths ====================
DATABASE_PATH = "data/promptor.db"
CONFIG_FILE_DEFAULT = "config.toml"
LOG_FILE_DEFAULT = "data/promptor.log"
EXPORT_DIR_DEFAULT = "data/exports"

# ==================== Placeholder Syntax ====================
PLACEHOLDER_OPEN = "{{"
PLACEHOLDER_CLOSE = "}}"
# `{{` + one or more non-`}` characters + `}}`, non-greedy by construction
PLACEHOLDER_PATTERN = re.compile(r"\{\{([^}]+)\}\}")

# ==================== Ref Derivation ====================
REF_GROUP_PATTERN = re.compile(r"\([^)]*\)|\[[^\]]*\]")
REF_SEPARATOR_PATTERN = re.compile(r"[^a-zA-Z0-9]+")
REF_SEPARATOR = "_"

# ==================== Export Names ====================
EXPORT_PROMPT_SUFFIX = "_prompt.md"
EXPORT_INPUT_SUFFIX = "_input.json"
EXPORT_JSON_INDENT = 2

# ==================== Colors ====================
# Slots: background, foreground, input background, input foreground
COLOR_MIN_SLOTS = 2
COLOR_MAX_SLOTS = 8
FALLBACK_COLOR_KEY = "bg"

DEFAULT_COLORS = {
    "c1": ["#6f1d1b", "#ffe6a7", "#ffe6a7", "#000000"],
    "c2": ["#99582a", "#ffe6a7", "#ffe6a7", "#000000"],
    "c3": ["#432818", "#ffe6a7", "#ffe6a7", "#000000"],
    "c4": ["#bb9457", "#000000", "#ffffff", "#000000"],
    "c5": ["#ffe6a7", "#000000", "#ffffff", "#000000"],
    "modal": [
        "#6f1d1b",
        "#ffe6a7",
        "#bbbbbb",
        "#000000",
        "#ffce54",
        "#000000",
        "#ffde6a",
        "#000000",
    ],
    "bg": ["#432818", "#d8d8d8", "#ffffff", "#000000"],
}

# ==================== Database Configuration ====================
DB_MAX_CONNECTIONS = 20
DB_STALE_TIMEOUT = 300  # 5 minutes
DB_JOURNAL_MODE = "wal"
DB_SYNCHRONOUS = "NORMAL"
DB_BUSY_TIMEOUT = 5000  # 5 seconds
DB_CACHE_SIZE = -64 * 1000  # 64MB

# ==================== Database Pragmas ====================
DB_PRAGMAS = {
    "journal_mode": DB_JOURNAL_MODE,
    "synchronous": DB_SYNCHRONOUS,
    "busy_timeout": DB_BUSY_TIMEOUT,
    "foreign_keys": 1,
    "cache_size": DB_CACHE_SIZE,
}

# ==================== Messages ====================
MSG_SCHEMA_NOT_FOUND = "No UI found for: {key}"
