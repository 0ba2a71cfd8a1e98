"""Filesystem operations for source discovery and bundling.

Pure declaration parsing lives in :mod:`closuredeps.domain.declarations`.
This module handles the actual file I/O and directory walking.
"""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

from closuredeps.domain.declarations import Declarations, extract_declarations, is_source_file

DEFAULT_SKIP_DIRS = frozenset({".git", "node_modules"})


def find_source_files(
    root: Path,
    *,
    source_suffix: str = ".js",
    compiled_suffix: str = ".min.js",
    skip_dirs: Iterable[str] = DEFAULT_SKIP_DIRS,
) -> list[Path]:
    """Discover all source files below *root*.

    Compiled output (``*.min.js``) and anything under a directory named in
    *skip_dirs* is ignored. The result is sorted so scans are deterministic.
    """
    skip = frozenset(skip_dirs)
    if not root.is_dir():
        return []

    results: list[Path] = []
    for path in root.rglob(f"*{source_suffix}"):
        if not path.is_file():
            continue
        if any(part in skip for part in path.relative_to(root).parts):
            continue
        if is_source_file(path, source_suffix=source_suffix, compiled_suffix=compiled_suffix):
            results.append(path)
    return sorted(results)


def read_declarations(path: Path) -> Declarations:
    """Read *path* and extract its provide/require declarations.

    Raises:
        OSError: The file could not be read.
        UnicodeDecodeError: The file is not valid UTF-8.
    """
    return extract_declarations(path.read_text(encoding="utf-8"))


def concat_sources(paths: Iterable[Path], *, separator: str = "\n") -> str:
    """Concatenate file contents in the given order.

    Raises:
        OSError: A file could not be read.
        UnicodeDecodeError: A file is not valid UTF-8.
    """
    return separator.join(path.read_text(encoding="utf-8") for path in paths)


def resolve_within(root: Path, relative: str | Path) -> Path:
    """Resolve *relative* against *root*, refusing paths that escape it."""
    candidate = Path(relative)
    if not candidate.is_absolute():
        candidate = root / candidate
    result = candidate.resolve()
    if not result.is_relative_to(root.resolve()):
        msg = f"Path escapes source root: {relative}"
        raise ValueError(msg)
    return result
