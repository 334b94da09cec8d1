"""
Checkout strategy: bring one mirrored working tree to its pinned ref.

Fresh checkouts pick one of six clone recipes by ref kind and sparseness:

    commit + sparse  clone --filter=blob:none --sparse --no-checkout,
                     sparse-checkout set, fetch origin <hash>, checkout <hash>
    commit           clone --no-checkout, fetch origin <hash>, checkout <hash>
    tag + sparse     clone --filter=blob:none --sparse --no-checkout,
                     sparse-checkout set, fetch --depth=1 the tag ref, checkout <tag>
    tag              clone --no-checkout, fetch --depth=1 the tag ref, checkout <tag>
    branch + sparse  clone --filter=blob:none --sparse --depth=1 [-b <branch>],
                     sparse-checkout set
    branch           clone --depth=1 [-b <branch>]

Commit and tag pins clone without a checkout because the pinned ref is not
necessarily the remote default tip and has to be fetched by name first.
"""

import logging
from typing import Optional

from ..domain.pin import RefKind, RepositoryPin
from ..infra.git_client import GitClient, GitError
from .mirror_store import MirrorStore
from .reconciler import needs_reclone

logger = logging.getLogger(__name__)

SPARSE_CLONE_OPTIONS = ["--filter=blob:none", "--sparse"]
FULL_HASH_LENGTH = 40


class RepoNotClonedError(Exception):
    """update() was called for a repository that has no working tree."""

    def __init__(self, name: str):
        super().__init__(f"Repository {name} is not cloned")
        self.name = name


def tag_refspec(tag: str) -> str:
    return f"refs/tags/{tag}:refs/tags/{tag}"


class CheckoutStrategy:
    """
    Clones, updates and re-clones mirrored repositories.

    ensure() never raises for git or filesystem failures; it reports them
    in the returned status string ("Error: ..." or "Failed to update ...").

    Example:
        strategy = CheckoutStrategy(MirrorStore(root))
        print(strategy.ensure(pin))   # "Cloned noir @ v1.0.0 (tag, sparse: docs)"
    """

    def __init__(self, store: MirrorStore, git_client: Optional[GitClient] = None):
        self.store = store
        self.git = git_client or store.git

    def ensure(self, pin: RepositoryPin, force: bool = False) -> str:
        """
        Reconcile the mirror of `pin`.

        Args:
            pin: Declared target
            force: Delete and reclone even if the mirror already matches

        Returns:
            Human-readable status string
        """
        try:
            self.store.ensure_root()
            reclone = force or needs_reclone(pin, self.store)

            # Stale state from another pin is never reused
            if reclone and self.store.path_for(pin.name).exists():
                self.store.remove(pin.name)
        except OSError as e:
            return f"Error: {e}"

        if self.store.exists(pin.name):
            return self._update_pinned(pin)

        try:
            return self.fresh_checkout(pin)
        except (GitError, OSError) as e:
            logger.error(f"Checkout of {pin.name} failed: {e}")
            self._discard(pin.name)
            return f"Error: {e}"

    def _update_pinned(self, pin: RepositoryPin) -> str:
        ref = pin.ref_spec
        if ref.kind != RefKind.BRANCH:
            # Commit and tag refs do not move; the reconciler already matched them
            return f"Up to date: {pin.name} @ {ref}"
        return self.update(pin.name, branch=ref.value)

    def update(self, name: str, branch: Optional[str] = None) -> str:
        """
        Update an existing mirror to the latest remote state.

        Shallow-fetches and hard-resets to the remote branch head
        (origin/HEAD when no branch is given), falling back to a plain pull.

        Raises:
            RepoNotClonedError: if the repository has no working tree
        """
        if not self.store.exists(name):
            raise RepoNotClonedError(name)

        path = self.store.path_for(name)
        target = f"origin/{branch}" if branch else "origin/HEAD"

        try:
            self.git.fetch(path, ["--depth=1"])
            self.git.reset_hard(path, target)
            return f"Updated {name}"
        except GitError as e:
            logger.warning(f"Shallow update of {name} failed, trying pull: {e}")

        try:
            self.git.pull(path)
            return f"Updated {name}"
        except GitError as e:
            return f"Failed to update {name}: {type(e).__name__}: {e}"

    def fresh_checkout(self, pin: RepositoryPin) -> str:
        """
        Clone `pin` into an empty mirror slot.

        Raises:
            GitError: if any git step fails
        """
        path = self.store.path_for(pin.name)
        ref = pin.ref_spec
        sparse_options = SPARSE_CLONE_OPTIONS if pin.is_sparse else []

        if ref.kind == RefKind.COMMIT:
            self.git.clone(pin.url, path, [*sparse_options, "--no-checkout"])
            if pin.is_sparse:
                self.git.sparse_checkout_set(path, pin.sparse)
            self._fetch_commit(path, ref.value)
            self.git.checkout(path, ref.value)

        elif ref.kind == RefKind.TAG:
            self.git.clone(pin.url, path, [*sparse_options, "--no-checkout"])
            if pin.is_sparse:
                self.git.sparse_checkout_set(path, pin.sparse)
            self.git.fetch(path, ["--depth=1", "origin", tag_refspec(ref.value)])
            self.git.checkout(path, ref.value)

        else:
            options = [*sparse_options, "--depth=1"]
            if ref.value:
                options.extend(["-b", ref.value])
            self.git.clone(pin.url, path, options)
            if pin.is_sparse:
                self.git.sparse_checkout_set(path, pin.sparse)

        status = f"Cloned {pin.name} @ {ref.label} ({ref.kind.value}"
        if pin.is_sparse:
            status += f", sparse: {', '.join(pin.sparse)}"
        status += ")"
        logger.info(status)
        return status

    def _fetch_commit(self, path, commit: str) -> None:
        """
        Fetch a pinned commit by hash.

        Remotes only serve full hashes by name; an abbreviated pin is
        resolved from the history the clone already brought in.
        """
        try:
            self.git.fetch(path, ["origin", commit])
        except GitError as e:
            if len(commit) >= FULL_HASH_LENGTH:
                raise
            logger.debug(f"Cannot fetch abbreviated commit {commit}, using cloned history: {e}")

    def _discard(self, name: str) -> None:
        try:
            self.store.remove(name)
        except OSError as e:
            logger.error(f"Could not remove partial checkout of {name}: {e}")
