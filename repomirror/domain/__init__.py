"""
Domain layer for repomirror.

Contains pure domain objects with no I/O or side effects:
- RepositoryPin: Declared remote repository and version to mirror
- RefSpec: The authoritative ref of a pin (commit > tag > branch)
- SyncOutcome / SyncSummary: Results of a sync run
- SearchResult / FileInfo / LibraryEntry: Search and listing results
"""

from .pin import Category, RefKind, RefSpec, RepositoryPin
from .operation import SyncOutcome, SyncSummary, is_failure_status
from .search import SearchResult, FileInfo, LibraryEntry

__all__ = [
    'Category',
    'RefKind',
    'RefSpec',
    'RepositoryPin',
    'SyncOutcome',
    'SyncSummary',
    'is_failure_status',
    'SearchResult',
    'FileInfo',
    'LibraryEntry',
]
