"""File matcher: reads one file and applies the content and line regexes."""

from dataclasses import dataclass
from pathlib import Path

import anyio

from .errors import FileReadFailure
from .patterns import CompiledPattern


@dataclass
class FileMatch:
    """Match data for one file; match and lines are None when nothing matched."""

    filename: str
    match: list[str] | None
    lines: list[str] | None


def search_content(
    filename: str,
    content: str,
    content_pattern: CompiledPattern,
    line_pattern: CompiledPattern,
) -> FileMatch:
    return FileMatch(
        filename=filename,
        match=content_pattern.matches(content),
        lines=line_pattern.matches(content),
    )


def read_text(path: str | Path) -> str:
    """Read a file as UTF-8, blocking.

    Text mode turns CRLF line endings into LF before matching, so a content
    pattern that looks for carriage returns or whitespace can count
    differently than it would on the raw bytes.
    """
    try:
        return Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise FileReadFailure(path, e) from e


async def aread_text(path: str | Path) -> str:
    """Read a file as UTF-8 without blocking the event loop; newlines as read_text."""
    try:
        return await anyio.Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise FileReadFailure(path, e) from e


async def match_file(
    path: str,
    content_pattern: CompiledPattern,
    line_pattern: CompiledPattern,
) -> FileMatch:
    """Read path and match it; read errors raise FileReadFailure."""
    content = await aread_text(path)
    return search_content(path, content, content_pattern, line_pattern)
