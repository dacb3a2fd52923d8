"""Search operations over directory trees.

``find`` and ``find_sync`` read every candidate file concurrently and
tolerate unreadable files. ``match_found`` and ``get_array_of_capturing_group``
scan sequentially and stop on the first unreadable file.
"""

import asyncio
import logging
import re
from collections.abc import Awaitable, Iterable, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .errors import FileReadFailure, InvalidPattern
from .matcher import FileMatch, match_file, read_text
from .patterns import CONTENT, LINE, CompiledPattern, compile_file_filter, compile_pattern
from .scanner import alist_files, list_files

logger = logging.getLogger(__name__)


@dataclass
class Outcome:
    """Settled result of one awaitable: either value or error is set."""

    value: Any = None
    error: BaseException | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


async def settle(aws: Iterable[Awaitable]) -> list[Outcome]:
    """Wait for every awaitable, collecting successes and failures alike."""
    results = await asyncio.gather(*aws, return_exceptions=True)
    return [
        Outcome(error=r) if isinstance(r, BaseException) else Outcome(value=r) for r in results
    ]


def build_results(outcomes: Iterable[Outcome]) -> dict[str, dict]:
    """Build the result map from settled file matches.

    Failed reads and files without a content match are left out; any
    other failure is re-raised.
    """
    results: dict[str, dict] = {}
    for outcome in outcomes:
        if not outcome.ok:
            if not isinstance(outcome.error, FileReadFailure):
                raise outcome.error
            logger.debug("Skipping unreadable file: %s", outcome.error)
            continue
        file_match: FileMatch = outcome.value
        if file_match.match is not None:
            results[file_match.filename] = {
                "matches": file_match.match,
                "count": len(file_match.match),
                "line": file_match.lines,
            }
    return results


async def _match_files(
    files: Sequence[str],
    content_pattern: CompiledPattern,
    line_pattern: CompiledPattern,
    max_concurrency: int | None,
) -> dict[str, dict]:
    if max_concurrency is None:
        tasks = [match_file(f, content_pattern, line_pattern) for f in files]
    else:
        semaphore = asyncio.Semaphore(max_concurrency)

        async def bounded(path: str) -> FileMatch:
            async with semaphore:
                return await match_file(path, content_pattern, line_pattern)

        tasks = [bounded(f) for f in files]

    outcomes = await settle(tasks)
    return build_results(outcomes)


def _compile(pattern, max_concurrency: int | None) -> tuple[CompiledPattern, CompiledPattern]:
    if max_concurrency is not None and max_concurrency < 1:
        raise ValueError(f"max_concurrency must be at least 1, got {max_concurrency}")
    return compile_pattern(pattern, CONTENT), compile_pattern(pattern, LINE)


def find(
    pattern,
    directory: str | Path,
    file_filter: str | re.Pattern | None = None,
    *,
    max_concurrency: int | None = None,
) -> Awaitable[dict[str, dict]]:
    """Search every file under directory for pattern.

    Patterns are compiled before this returns, so InvalidPattern is raised
    here rather than when the result is awaited.

    Args:
        pattern: Regex source, {"term", "flags"} mapping, Plain or Flagged.
        directory: Root directory.
        file_filter: Regex searched in file names (default: every file).
        max_concurrency: Optional cap on concurrent file reads.

    Returns:
        Awaitable of {filename: {"matches", "count", "line"}} holding only
        files with at least one match. Awaiting raises EnumerationFailure
        when directory cannot be listed.
    """
    content_pattern, line_pattern = _compile(pattern, max_concurrency)
    name_filter = compile_file_filter(file_filter)

    async def run() -> dict[str, dict]:
        files = await alist_files(directory, name_filter)
        return await _match_files(files, content_pattern, line_pattern, max_concurrency)

    return run()


def find_sync(
    pattern,
    directory: str | Path,
    file_filter: str | re.Pattern | None = None,
    *,
    max_concurrency: int | None = None,
) -> Awaitable[dict[str, dict]]:
    """Same as find, but lists files with a blocking walk.

    File matching still runs concurrently once the listing is done.
    """
    content_pattern, line_pattern = _compile(pattern, max_concurrency)
    name_filter = compile_file_filter(file_filter)

    async def run() -> dict[str, dict]:
        files = list_files(directory, name_filter)
        return await _match_files(files, content_pattern, line_pattern, max_concurrency)

    return run()


def _list_all(directories: Iterable[str | Path], file_filter) -> list[str]:
    name_filter = compile_file_filter(file_filter)
    files: list[str] = []
    for directory in directories:
        files.extend(list_files(directory, name_filter))
    return files


def match_found(
    pattern,
    directories: Iterable[str | Path],
    file_filter: str | re.Pattern | None = None,
) -> bool:
    """Check whether at least one file under directories matches pattern.

    Returns on the first match. Unreadable files raise FileReadFailure.
    """
    regex = compile_pattern(pattern, CONTENT).regex
    for path in _list_all(directories, file_filter):
        if regex.search(read_text(path)):
            return True
    return False


def get_array_of_capturing_group(
    pattern,
    directories: Iterable[str | Path],
    file_filter: str | re.Pattern | None = None,
) -> set[str]:
    """Collect the first capture group of every match in every file.

    Unreadable files raise FileReadFailure.
    """
    regex = compile_pattern(pattern, CONTENT).regex
    if regex.groups < 1:
        raise InvalidPattern(f"Pattern has no capturing group: {regex.pattern!r}")

    keys: set[str] = set()
    for path in _list_all(directories, file_filter):
        for m in regex.finditer(read_text(path)):
            if m.group(1) is not None:
                keys.add(m.group(1))
    return keys
