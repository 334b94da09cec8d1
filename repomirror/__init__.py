"""
repomirror - A local mirror of the Noir ecosystem.

repomirror clones the Noir compiler, its docs and standard library, example
circuits and community libraries at pinned versions, and searches them with
ripgrep (or an in-process scanner when ripgrep is unavailable).

Quick Start:
    import repomirror

    mirror = repomirror.RepoMirror()

    # Clone or update the core repositories
    summary = mirror.sync()

    # Add the community libraries
    mirror.sync(categories=["libraries"])

    # Search
    for result in mirror.search("fn main"):
        print(result.file, result.line, result.content)

    for result in mirror.search_stdlib("poseidon"):
        print(result.file)

Domain Objects:
    RepositoryPin - Declared remote repository and version
    SyncOutcome / SyncSummary - Results of a sync run
    SearchResult - One matched line

Services:
    SyncService - Batch reconcile with per-repository failure isolation
    SearchService - Code, docs and stdlib search
"""

__version__ = "0.1.0"

# High-level API
from .api import RepoMirror, create

# Domain objects
from .domain import (
    Category,
    RefKind,
    RefSpec,
    RepositoryPin,
    SyncOutcome,
    SyncSummary,
    SearchResult,
    FileInfo,
    LibraryEntry,
)

# Services
from .services import MirrorStore, SyncService, SyncRequest, SearchService

__all__ = [
    '__version__',
    'RepoMirror',
    'create',
    'Category',
    'RefKind',
    'RefSpec',
    'RepositoryPin',
    'SyncOutcome',
    'SyncSummary',
    'SearchResult',
    'FileInfo',
    'LibraryEntry',
    'MirrorStore',
    'SyncService',
    'SyncRequest',
    'SearchService',
]
