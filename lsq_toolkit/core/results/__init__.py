"""
Result classes.
"""

from .line_search import LineSearchResult

__all__ = [
    "LineSearchResult",
]
