"""
On-disk store of mirrored working trees.

Each repository lives at `<root>/<name>`. The store only answers
questions about what is on disk; it makes no decisions.
"""

import logging
import shutil
from pathlib import Path
from typing import Dict, Any, Iterable, Optional, Tuple, Union

from ..domain.pin import RepositoryPin
from ..infra.git_client import GitClient

logger = logging.getLogger(__name__)

SHORT_HASH_LENGTH = 7


class MirrorStore:
    """
    Accessors for the mirror root and the working trees beneath it.

    Commit and tag lookups degrade to None rather than raising.

    Example:
        store = MirrorStore(Path("~/.noir-mcp/repos").expanduser())
        if store.exists("noir"):
            print(store.commit("noir"), store.tag("noir"))
    """

    def __init__(self, root: Union[str, Path], git_client: Optional[GitClient] = None):
        self.root = Path(root).expanduser().resolve()
        self.git = git_client or GitClient()

    def ensure_root(self) -> Path:
        """Create the mirror root if needed."""
        self.root.mkdir(parents=True, exist_ok=True)
        return self.root

    def path_for(self, name: str) -> Path:
        return self.root / name

    def exists(self, name: str) -> bool:
        """True if the working tree exists and has git metadata."""
        return self.git.is_git_repo(self.path_for(name))

    def commit(self, name: str, full: bool = False) -> Optional[str]:
        """
        Current HEAD commit of a mirrored repository.

        Args:
            name: Repository name
            full: Return the full hash instead of the 7-character short form

        Returns:
            Commit hash, or None if not cloned or HEAD cannot be resolved
        """
        if not self.exists(name):
            return None
        commit_hash = self.git.head_commit(self.path_for(name))
        if not commit_hash:
            return None
        return commit_hash if full else commit_hash[:SHORT_HASH_LENGTH]

    def tag(self, name: str) -> Optional[str]:
        """Tag HEAD points at exactly, or None (never the nearest tag)."""
        if not self.exists(name):
            return None
        return self.git.exact_tag(self.path_for(name))

    def sparse_paths(self, name: str) -> Tuple[str, ...]:
        if not self.exists(name):
            return ()
        return tuple(self.git.sparse_checkout_list(self.path_for(name)))

    def remove(self, name: str) -> None:
        """Recursively delete a working tree, if present."""
        path = self.path_for(name)
        if path.exists():
            logger.info(f"Removing {path}")
            shutil.rmtree(path)

    def statuses(self, pins: Iterable[RepositoryPin]) -> Dict[str, Dict[str, Any]]:
        """Clone state and short commit for each pin, keyed by name."""
        result = {}
        for pin in pins:
            cloned = self.exists(pin.name)
            result[pin.name] = {
                'cloned': cloned,
                'commit': self.commit(pin.name) if cloned else None,
            }
        return result
