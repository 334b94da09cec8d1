"""
High-level Python API for repomirror.

Wires configuration, infrastructure and services together so the CLI,
the MCP server and library users share one entry point.

Example:
    import repomirror

    mirror = repomirror.RepoMirror()

    # Clone or update the core repositories
    summary = mirror.sync()
    print(summary.message)

    # Search Noir code
    for result in mirror.search("fn main", max_results=5):
        print(result.file, result.line, result.content)

    # Use an explicit mirror root (tests, multiple mirrors)
    mirror = repomirror.RepoMirror(root="/tmp/mirror")
"""

import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union

from .catalog import get_repo_names
from .config import load_config, get_mirror_root
from .domain import Category, FileInfo, LibraryEntry, SearchResult, SyncSummary
from .infra import GitClient, RipgrepMatcher, ScanMatcher
from .services import MirrorStore, SearchService, SyncService, SyncRequest

logger = logging.getLogger(__name__)


class RepoMirror:
    """
    High-level API for repomirror.

    Low-level access:
        mirror.store            # MirrorStore
        mirror.sync_service     # SyncService
        mirror.search_service   # SearchService
    """

    def __init__(
        self,
        root: Optional[Union[str, Path]] = None,
        config: Optional[Dict[str, Any]] = None,
    ):
        """
        Initialize RepoMirror.

        Args:
            root: Mirror root (default: from NOIR_MCP_REPOS_DIR or ~/.noir-mcp/repos)
            config: Full config dict (default: load_config())
        """
        self._config = config if config is not None else load_config()
        general = self._config.get('general', {})
        search = self._config.get('search', {})

        self.root = Path(root) if root else get_mirror_root()
        self.git = GitClient(timeout=general.get('git_timeout_seconds', 300))
        self.store = MirrorStore(self.root, git_client=self.git)
        self.sync_service = SyncService(self.store)
        self.search_service = SearchService(
            self.store,
            primary=RipgrepMatcher(
                executable=search.get('matcher', 'rg'),
                timeout=search.get('timeout_seconds', 30),
                max_output_bytes=search.get('max_output_bytes', 10 * 1024 * 1024),
            ),
            fallback=ScanMatcher(search.get('ignore_directories', ['.git', 'node_modules'])),
            default_max_results=search.get('default_max_results', 50),
        )

    @property
    def config(self) -> Dict[str, Any]:
        return self._config

    def sync(
        self,
        version: Optional[str] = None,
        force: bool = False,
        repos: Iterable[str] = (),
        categories: Iterable[Union[str, Category]] = (),
    ) -> SyncSummary:
        """
        Clone or update repositories.

        Raises:
            ValueError: if a category name is unknown
        """
        parsed = [c if isinstance(c, Category) else Category.parse(c) for c in categories]
        request = SyncRequest(
            version=version,
            force=force,
            repos=tuple(repos),
            categories=tuple(parsed),
        )
        return self.sync_service.reconcile(request)

    def status(self) -> Dict[str, Any]:
        return self.sync_service.status()

    def is_cloned(self, name: str) -> bool:
        return self.store.exists(name)

    def any_cloned(self) -> bool:
        return any(self.store.exists(name) for name in get_repo_names())

    def search(
        self,
        query: str,
        file_pattern: str = "*.nr",
        repo: Optional[str] = None,
        max_results: Optional[int] = None,
        case_sensitive: bool = False,
    ) -> List[SearchResult]:
        return self.search_service.search_code(
            query,
            file_pattern=file_pattern,
            repo=repo,
            max_results=max_results,
            case_sensitive=case_sensitive,
        )

    def search_docs(self, query: str, section: Optional[str] = None, max_results: int = 20) -> List[SearchResult]:
        return self.search_service.search_docs(query, section=section, max_results=max_results)

    def search_stdlib(self, query: str, max_results: int = 30) -> List[SearchResult]:
        return self.search_service.search_stdlib(query, max_results=max_results)

    def examples(self, category: Optional[str] = None) -> List[FileInfo]:
        return self.search_service.list_examples(category)

    def find_example(self, name: str) -> Optional[FileInfo]:
        return self.search_service.find_example(name)

    def read_file(self, path: str) -> Optional[str]:
        return self.search_service.read_file(path)

    def libraries(self, category: Optional[Union[str, Category]] = None) -> List[LibraryEntry]:
        if isinstance(category, str):
            category = Category.parse(category)
        return self.search_service.list_libraries(category)


def create(root: Optional[Union[str, Path]] = None, **kwargs) -> RepoMirror:
    """Create a RepoMirror instance."""
    return RepoMirror(root=root, **kwargs)
