"""keepson - Personal content capture with tiered natural-language search."""

from importlib.metadata import version, PackageNotFoundError

_pkg = __package__.split('.')[0]

try:
    __version__: str = version(_pkg)
except PackageNotFoundError:
    __version__: str = "0.0.1-dev"  # fallback for running directly from source

from .core import (
    # Records
    add_record,
    get_record,
    list_records,
    update_record,
    delete_record,
    # Search
    natural_search,
    advanced_search,
    # Dataclasses
    Record,
    RecordPage,
)
from .oracle import OracleError, OracleHints
from .search import (
    AdvancedSearchResult,
    NaturalSearchResult,
    SearchError,
    TIER_DIRECT,
    TIER_ENHANCED,
    TIER_FALLBACK,
)

__all__ = [
    # Records
    "add_record",
    "get_record",
    "list_records",
    "update_record",
    "delete_record",
    # Search
    "natural_search",
    "advanced_search",
    "TIER_DIRECT",
    "TIER_ENHANCED",
    "TIER_FALLBACK",
    # Dataclasses
    "Record",
    "RecordPage",
    "NaturalSearchResult",
    "AdvancedSearchResult",
    "OracleHints",
    # Errors
    "OracleError",
    "SearchError",
]
