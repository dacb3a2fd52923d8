"""File enumerator: walks a directory tree and lists files by name filter."""

import logging
import os
import re
from pathlib import Path

import anyio

from .errors import EnumerationFailure
from .patterns import compile_file_filter

logger = logging.getLogger(__name__)

# Directories skipped when skip_ignored is set
IGNORED_DIRS = frozenset(
    {
        "node_modules",
        "target",
        "build",
        "dist",
        "venv",
        "env",
        ".git",
        ".pixi",
        ".vscode",
        ".idea",
        "__pycache__",
    },
)


def list_files(
    root: str | Path,
    file_filter: str | re.Pattern | None = None,
    include_hidden: bool = True,
    skip_ignored: bool = False,
) -> list[str]:
    """List files under root whose name matches file_filter.

    Args:
        root: Root directory path.
        file_filter: Regex (or regex source) searched in each file name.
        include_hidden: Whether to include dot files and dot directories.
        skip_ignored: Whether to skip IGNORED_DIRS.

    Returns:
        File paths, joined onto root.

    Raises:
        EnumerationFailure: root is missing or not a directory.
    """
    name_filter = compile_file_filter(file_filter)

    root_path = Path(root) if isinstance(root, str) else root
    if not root_path.exists():
        raise EnumerationFailure(f"Path does not exist: {root}", root)
    if not root_path.is_dir():
        raise EnumerationFailure(f"Path is not a directory: {root}", root)

    files: list[str] = []
    visited: set[str] = set()

    def on_error(err: OSError) -> None:
        if os.path.normpath(str(err.filename)) == os.path.normpath(str(root_path)):
            raise EnumerationFailure(f"Cannot list {root}: {err}", root) from err
        logger.debug("Skipping unlistable directory %s: %s", err.filename, err)

    for dirpath, dirnames, filenames in os.walk(str(root_path), onerror=on_error):
        try:
            real_path = os.path.realpath(dirpath)
            if real_path in visited:
                dirnames.clear()
                continue
            visited.add(real_path)
        except OSError:
            dirnames.clear()
            continue

        dirnames[:] = sorted(
            d
            for d in dirnames
            if not (skip_ignored and d in IGNORED_DIRS)
            and (include_hidden or not d.startswith("."))
        )

        for filename in sorted(filenames):
            if not include_hidden and filename.startswith("."):
                continue
            if name_filter.search(filename):
                files.append(os.path.join(dirpath, filename))

    logger.debug("Enumerated %d files under %s", len(files), root)
    return files


async def alist_files(
    root: str | Path,
    file_filter: str | re.Pattern | None = None,
    include_hidden: bool = True,
    skip_ignored: bool = False,
) -> list[str]:
    """Async variant of list_files; the walk runs in a worker thread."""
    return await anyio.to_thread.run_sync(
        lambda: list_files(root, file_filter, include_hidden, skip_ignored)
    )
