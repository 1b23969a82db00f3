"""
File discovery and reading for Rust source trees.

Walks are sorted so that a run over an unchanged tree visits files in the
same order every time.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from forest.constants import RUST_EXTENSIONS
from forest.types.errors import ErrorCode, ErrorContext, ResourceError
from forest.utils.logger import logger

if TYPE_CHECKING:
    from forest.config import ForestConfig


def _is_hidden(name: str) -> bool:
    return name.startswith(".")


def _skip_dir(path: Path, config: ForestConfig) -> bool:
    if path.name in config.ignore_dirs:
        return True
    return not config.follow_hidden and _is_hidden(path.name)


def _sorted_children(directory: Path) -> list[Path]:
    try:
        return sorted(directory.iterdir(), key=lambda p: p.name)
    except OSError as e:
        logger.warning(f"Cannot list directory {directory}: {e}")
        return []


def discover_rust_files(root: str | Path, config: ForestConfig) -> list[Path]:
    """Collect every ``.rs`` file under ``root`` in deterministic order.

    Args:
        root: Project directory.
        config: Supplies ignored directory names and the hidden-dir policy.

    Returns:
        Paths sorted depth-first by name.

    Raises:
        ResourceError: If ``root`` is not an existing directory.
    """
    root_path = Path(root)
    if not root_path.is_dir():
        raise ResourceError(
            f"Project directory not found: {root_path}",
            user_message=f"Directory '{root_path}' does not exist.",
            code=ErrorCode.DIRECTORY_NOT_FOUND,
            context=ErrorContext(operation="discover", file_path=str(root_path)),
        )

    found: list[Path] = []
    stack = [root_path]
    while stack:
        directory = stack.pop()
        subdirs: list[Path] = []
        for child in _sorted_children(directory):
            if child.is_dir():
                if not _skip_dir(child, config):
                    subdirs.append(child)
            elif child.suffix in RUST_EXTENSIONS:
                found.append(child)
        # Reverse so the alphabetically first directory is popped first
        stack.extend(reversed(subdirs))

    logger.debug(f"Discovered {len(found)} Rust files under {root_path}")
    return found


def read_source(path: str | Path) -> str:
    """Read a source file as UTF-8, replacing undecodable bytes.

    Raises:
        ResourceError: On any OS-level read failure.
    """
    try:
        return Path(path).read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        raise ResourceError.from_os_error(e, str(path), "read") from e


def render_tree(root: str | Path, config: ForestConfig) -> list[str]:
    """Render the directory tree under ``root`` as display lines.

    Only directories and Rust files are listed. Ignored directories such as
    ``target`` are shown but not descended into.
    """
    root_path = Path(root)
    lines = [f"📂 {root_path.name or root_path}"]
    _render_dir(root_path, config, 1, lines)
    return lines


def _render_dir(directory: Path, config: ForestConfig, depth: int, lines: list[str]) -> None:
    indent = "  " * depth
    for child in _sorted_children(directory):
        if child.is_dir():
            if not config.follow_hidden and _is_hidden(child.name):
                continue
            lines.append(f"{indent}📂 {child.name}")
            if child.name not in config.ignore_dirs:
                _render_dir(child, config, depth + 1, lines)
        elif child.suffix in RUST_EXTENSIONS:
            lines.append(f"{indent}📄 {child.name}")
