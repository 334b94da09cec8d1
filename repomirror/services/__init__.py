"""
Service layer for repomirror.

Contains the decision logic that sits between the domain objects and
the git/search infrastructure:
- MirrorStore: On-disk working trees, addressed by name
- needs_reclone: Version reconciliation against a pin
- CheckoutStrategy: Clone/fetch/checkout recipes and in-place updates
- SyncService: Batch reconcile with per-repository failure isolation
- SearchService: Code, docs and stdlib search plus file lookup

Services are the primary API for commands and the MCP server.
"""

from .mirror_store import MirrorStore
from .reconciler import needs_reclone
from .checkout import CheckoutStrategy, RepoNotClonedError
from .sync_service import SyncService, SyncRequest
from .search_service import SearchService, file_type

__all__ = [
    'MirrorStore',
    'needs_reclone',
    'CheckoutStrategy',
    'RepoNotClonedError',
    'SyncService',
    'SyncRequest',
    'SearchService',
    'file_type',
]
