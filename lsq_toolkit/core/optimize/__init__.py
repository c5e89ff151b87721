"""lsq_toolkit.core.optimize

Scalar line-search minimizers.
"""

from .golden_section import (
    GOLDEN_RATIO_SECTION,
    golden_section_search,
    golden_section_search_with_options,
)

__all__ = [
    "GOLDEN_RATIO_SECTION",
    "golden_section_search",
    "golden_section_search_with_options",
]
