"""treefind - regex search across directory trees."""

__version__ = "0.1.0"

from .errors import EnumerationFailure, FileReadFailure, InvalidPattern, TreefindError
from .finder import find, find_sync, get_array_of_capturing_group, match_found
from .patterns import Flagged, Plain

__all__ = [
    "EnumerationFailure",
    "FileReadFailure",
    "Flagged",
    "InvalidPattern",
    "Plain",
    "TreefindError",
    "__version__",
    "find",
    "find_sync",
    "get_array_of_capturing_group",
    "match_found",
]
