"""Data loading layer.

This is the ONLY package that reads files. Scoring and compliance code
receive decoded dicts and DataFrames from here.

Public API:
- load_config / load_default_config: YAML configuration
- load_application: JSON loan application
- validate_application: application sanity checks
- load_watchlist / load_watchlists: screening lists
"""

from .config import get_nested, load_config, load_default_config, merge_config
from .applications import (
    ValidationResult,
    load_application,
    transactions_frame,
    validate_application,
)
from .watchlists import empty_watchlists, load_watchlist, load_watchlists

__all__ = [
    "get_nested",
    "load_config",
    "load_default_config",
    "merge_config",
    "ValidationResult",
    "load_application",
    "transactions_frame",
    "validate_application",
    "empty_watchlists",
    "load_watchlist",
    "load_watchlists",
]
