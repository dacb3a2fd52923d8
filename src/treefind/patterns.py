"""Pattern compiler: turns a pattern specification into compiled regexes.

A pattern is either ``Plain(term)`` (global multi-match) or
``Flagged(term, flags)`` where ``flags`` uses the single-letter flag
alphabet of JavaScript regex literals (``g``, ``i``, ``m``, ``s``, ``u``, ``d``).
"""

import re
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Union

from .errors import InvalidPattern

DEFAULT_FLAGS = "g"

# Flag letter -> re flag (0 means accepted but no effect on the compiled regex)
FLAG_MAP = {
    "g": 0,
    "i": re.IGNORECASE,
    "m": re.MULTILINE,
    "s": re.DOTALL,
    "u": 0,
    "d": 0,
}

CONTENT = "content"
LINE = "line"


@dataclass(frozen=True)
class Plain:
    """Bare pattern; matched with the default global flags."""

    term: str

    @property
    def flags(self) -> str:
        return DEFAULT_FLAGS


@dataclass(frozen=True)
class Flagged:
    """Pattern with an explicit flag string, used verbatim."""

    term: str
    flags: str


PatternSpec = Union[Plain, Flagged]


@dataclass(frozen=True)
class CompiledPattern:
    regex: re.Pattern
    is_global: bool
    spec: PatternSpec

    def matches(self, content: str) -> list[str] | None:
        """Full matches in ``content``, or None when there are none.

        Global patterns return every non-overlapping match; non-global
        patterns return only the first one.
        """
        if self.is_global:
            found = [m.group(0) for m in self.regex.finditer(content)]
            return found or None
        m = self.regex.search(content)
        return [m.group(0)] if m else None


def to_spec(pattern) -> PatternSpec:
    """Normalize the accepted pattern shapes into a Plain or Flagged value."""
    if isinstance(pattern, (Plain, Flagged)):
        return pattern
    if isinstance(pattern, str):
        return Plain(pattern)
    if isinstance(pattern, re.Pattern):
        return Flagged(pattern.pattern, _flags_from_re(pattern.flags))
    if isinstance(pattern, Mapping):
        term = pattern.get("term")
        if not isinstance(term, str):
            raise InvalidPattern(f"Invalid regex pattern: missing term in {pattern!r}")
        flags = pattern.get("flags")
        if flags is None:
            return Plain(term)
        return Flagged(term, flags)
    raise InvalidPattern(f"Invalid regex pattern: unsupported type {type(pattern).__name__}")


def parse_flags(flags: str) -> tuple[int, bool]:
    """Translate a flag string into (re flags, is_global)."""
    if not isinstance(flags, str):
        raise InvalidPattern(f"Invalid regex flags: {flags!r}")
    value = 0
    for letter in flags:
        if letter not in FLAG_MAP:
            raise InvalidPattern(f"Invalid regex flags: unsupported flag {letter!r}")
        if flags.count(letter) > 1:
            raise InvalidPattern(f"Invalid regex flags: duplicate flag {letter!r}")
        value |= FLAG_MAP[letter]
    return value, "g" in flags


def compile_pattern(pattern, mode: str = CONTENT) -> CompiledPattern:
    """Compile a pattern for whole-content or line matching.

    In line mode the term is wrapped as ``(.*term.*)`` so the whole line
    holding a match is captured as group 1; the term's own groups shift by one.

    Raises:
        InvalidPattern: malformed term, flag string or mode.
    """
    spec = to_spec(pattern)
    re_flags, is_global = parse_flags(spec.flags)

    if mode == LINE:
        source = f"(.*{spec.term}.*)"
    elif mode == CONTENT:
        source = spec.term
    else:
        raise InvalidPattern(f"Unknown pattern mode: {mode!r}")

    try:
        regex = re.compile(source, re_flags)
    except re.error as e:
        raise InvalidPattern(f"Invalid regex pattern: {e}") from e

    return CompiledPattern(regex=regex, is_global=is_global, spec=spec)


def compile_file_filter(file_filter=None) -> re.Pattern:
    """Compile a file-name filter; None accepts every name."""
    if file_filter is None:
        return re.compile(".")
    if isinstance(file_filter, re.Pattern):
        return file_filter
    try:
        return re.compile(file_filter)
    except (re.error, TypeError) as e:
        raise InvalidPattern(f"Invalid file filter: {e}") from e


def _flags_from_re(value: int) -> str:
    flags = DEFAULT_FLAGS
    for letter in ("i", "m", "s"):
        if value & FLAG_MAP[letter]:
            flags += letter
    return flags
