"""Engine Layer - Query construction and error classification

This module provides the store-independent core of the voter query layer:
- FilterSpec / build_filter_spec: UI state → tagged predicates
- Cursor: (created_at, id) keyset position
- classify_store_error: raw store error → ClassifiedError
- OperationResult / PageResult / KeysetResult: standardized results

The pagers live in ``engine.pager`` (they depend on the store contract,
which itself depends on this package).
"""

from .cursor import Cursor
from .errors import ClassifiedError, ErrorKind, classify_store_error
from .filters import FilterSpec, PredicateKind, build_filter_spec
from .result import KeysetResult, OperationResult, PageResult

__all__ = [
    "Cursor",
    "FilterSpec",
    "PredicateKind",
    "build_filter_spec",
    "OperationResult",
    "PageResult",
    "KeysetResult",
    # Errors
    "ErrorKind",
    "ClassifiedError",
    "classify_store_error",
]
