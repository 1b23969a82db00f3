"""Shared constants and helpers for Forest.

Centralizes the sentinel type labels, default ignore directories, file
extensions and timezone-aware datetime helpers.
"""

from datetime import datetime, timezone


def utcnow() -> datetime:
    """Return the current UTC time as a timezone-aware datetime."""
    return datetime.now(timezone.utc)


# Sentinel labels returned instead of raising. Callers compare against these
# to tell "no static information" apart from a real classification.
INFERRED = "inferred"
INFERRED_FROM_CONTEXT = "inferred from context"
UNKNOWN = "unknown"

# Placeholder for a context line that could not be resolved.
UNKNOWN_CONTEXT = "unknown"

RUST_EXTENSIONS: tuple[str, ...] = (".rs",)

# Maximum file size to analyse (1 MB). Larger files are skipped.
MAX_FILE_SIZE: int = 1_000_000

# Directories to skip during file traversal.
DEFAULT_IGNORE_DIRS: frozenset[str] = frozenset(
    {
        "target",
        ".git",
        ".hg",
        ".svn",
        "node_modules",
        ".idea",
        ".vscode",
    }
)

# Name of the project manifest read for name/version metadata.
MANIFEST_FILE = "Cargo.toml"
