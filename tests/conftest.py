"""
Shared fixtures for repomirror tests.
"""

from pathlib import Path

import pytest

from repomirror.infra.git_client import GitError
from repomirror.services import MirrorStore


class FakeGit:
    """
    In-memory stand-in for GitClient.

    clone() creates `<dest>/.git` so the store sees a working tree.
    Methods named in `fail` raise GitError.
    """

    def __init__(self, head="0123456789abcdef0123456789abcdef01234567", tag=None, fail=()):
        self.head = head
        self.tag = tag
        self.fail = set(fail)
        self.calls = []

    def _call(self, name, *args):
        self.calls.append((name, *args))
        if name in self.fail:
            raise GitError([name], 1, f"{name} exploded")

    def is_git_repo(self, path):
        return (Path(path) / ".git").exists()

    def clone(self, url, dest, options=()):
        self._call("clone", url, Path(dest), list(options))
        (Path(dest) / ".git").mkdir(parents=True)

    def fetch(self, path, args=()):
        self._call("fetch", list(args))

    def checkout(self, path, ref):
        self._call("checkout", ref)

    def reset_hard(self, path, ref):
        self._call("reset_hard", ref)

    def pull(self, path):
        self._call("pull")

    def sparse_checkout_set(self, path, paths):
        self._call("sparse_checkout_set", list(paths))

    def head_commit(self, path):
        return self.head

    def exact_tag(self, path):
        return self.tag

    def sparse_checkout_list(self, path):
        return []

    def names(self):
        return [call[0] for call in self.calls]


@pytest.fixture
def fake_git():
    return FakeGit()


@pytest.fixture
def store(tmp_path, fake_git):
    return MirrorStore(tmp_path / "repos", git_client=fake_git)


def make_clone(store, name):
    """Create an empty working tree for `name` in the store."""
    path = store.path_for(name)
    (path / ".git").mkdir(parents=True)
    return path
