"""
Integration tests against real local git repositories.

Skipped when git is not installed.
"""

import shutil
import subprocess

import pytest

from repomirror.domain import RepositoryPin
from repomirror.infra.git_client import GitClient
from repomirror.services import CheckoutStrategy, MirrorStore, needs_reclone

pytestmark = pytest.mark.skipif(shutil.which("git") is None, reason="git not installed")


def git(cwd, *args):
    subprocess.run(
        ["git", "-c", "user.name=Test", "-c", "user.email=test@example.com", *args],
        cwd=cwd, check=True, capture_output=True,
    )


def head(cwd):
    return subprocess.run(
        ["git", "rev-parse", "HEAD"], cwd=cwd, check=True, capture_output=True, text=True,
    ).stdout.strip()


def add_commit(src, name):
    (src / "src" / name).write_text("fn later() {}\n")
    git(src, "add", ".")
    git(src, "commit", "-m", f"add {name}")


@pytest.fixture
def upstream(tmp_path):
    """A local repository with one tagged commit on main."""
    src = tmp_path / "upstream"
    src.mkdir()
    git(src, "init", "-b", "main")
    (src / "src").mkdir()
    (src / "src" / "main.nr").write_text("fn main() {}\n")
    (src / "README.md").write_text("# demo\n")
    (src / "docs").mkdir()
    (src / "docs" / "intro.md").write_text("Intro\n")
    git(src, "add", ".")
    git(src, "commit", "-m", "initial")
    git(src, "tag", "v1")
    return src


@pytest.fixture
def store(tmp_path):
    return MirrorStore(tmp_path / "repos", git_client=GitClient(timeout=60))


class TestRealGit:
    def test_branch_clone_then_update(self, upstream, store):
        pin = RepositoryPin(name="demo", url=upstream.as_uri(), branch="main")
        strategy = CheckoutStrategy(store)

        assert strategy.ensure(pin) == "Cloned demo @ main (branch)"
        assert (store.path_for("demo") / "src" / "main.nr").exists()
        assert len(store.commit("demo")) == 7
        assert store.tag("demo") == "v1"

        (upstream / "src" / "lib.nr").write_text("fn helper() {}\n")
        git(upstream, "add", ".")
        git(upstream, "commit", "-m", "second")

        assert strategy.ensure(pin) == "Updated demo"
        assert (store.path_for("demo") / "src" / "lib.nr").exists()
        assert store.tag("demo") is None

    def test_tag_mismatch_detected_on_real_tree(self, upstream, store):
        pin = RepositoryPin(name="demo", url=upstream.as_uri(), branch="main")
        CheckoutStrategy(store).ensure(pin)

        assert not needs_reclone(RepositoryPin(name="demo", url="", tag="v1"), store)
        assert needs_reclone(RepositoryPin(name="demo", url="", tag="v2"), store)

    def test_clone_failure_leaves_no_tree(self, tmp_path, store):
        pin = RepositoryPin(name="ghost", url=(tmp_path / "missing").as_uri(), branch="main")

        status = CheckoutStrategy(store).ensure(pin)

        assert status.startswith("Error: ")
        assert not store.path_for("ghost").exists()


class TestRealGitPinnedRefs:
    """Commit and tag pins land on their ref and are left alone on the next run."""

    def test_full_commit_pin(self, upstream, store):
        first = head(upstream)
        add_commit(upstream, "lib.nr")
        pin = RepositoryPin(name="demo", url=upstream.as_uri(), commit=first)
        strategy = CheckoutStrategy(store)

        assert strategy.ensure(pin) == f"Cloned demo @ {first} (commit)"
        assert store.commit("demo", full=True) == first
        assert not (store.path_for("demo") / "src" / "lib.nr").exists()
        assert not needs_reclone(pin, store)

        assert strategy.ensure(pin) == f"Up to date: demo @ {first} (commit)"
        assert store.commit("demo", full=True) == first

    def test_abbreviated_commit_pin(self, upstream, store):
        first = head(upstream)
        add_commit(upstream, "lib.nr")
        pin = RepositoryPin(name="demo", url=upstream.as_uri(), commit=first[:7])
        strategy = CheckoutStrategy(store)

        assert strategy.ensure(pin) == f"Cloned demo @ {first[:7]} (commit)"
        assert store.commit("demo", full=True).startswith(first[:7])
        assert not needs_reclone(pin, store)

        assert strategy.ensure(pin) == f"Up to date: demo @ {first[:7]} (commit)"

    def test_tag_pin(self, upstream, store):
        add_commit(upstream, "lib.nr")
        pin = RepositoryPin(name="demo", url=upstream.as_uri(), tag="v1")
        strategy = CheckoutStrategy(store)

        assert strategy.ensure(pin) == "Cloned demo @ v1 (tag)"
        assert store.tag("demo") == "v1"
        assert not (store.path_for("demo") / "src" / "lib.nr").exists()
        assert not needs_reclone(pin, store)

        assert strategy.ensure(pin) == "Up to date: demo @ v1 (tag)"
        assert store.tag("demo") == "v1"

    def test_sparse_tag_pin(self, upstream, store):
        pin = RepositoryPin(name="demo", url=upstream.as_uri(), tag="v1", sparse=("src",))
        strategy = CheckoutStrategy(store)

        assert strategy.ensure(pin) == "Cloned demo @ v1 (tag, sparse: src)"
        path = store.path_for("demo")
        assert (path / "src" / "main.nr").exists()
        assert not (path / "docs" / "intro.md").exists()
        assert store.tag("demo") == "v1"
        assert not needs_reclone(pin, store)

        assert strategy.ensure(pin) == "Up to date: demo @ v1 (tag)"
