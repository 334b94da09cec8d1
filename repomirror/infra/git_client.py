"""
Git client infrastructure for repomirror.

Provides a clean abstraction over git command execution.
All git operations go through this client, making them:
- Easy to mock for testing
- Consistent in error handling
- Isolated from business logic

Commands are passed to git as argument lists, never through a shell.
"""

import subprocess
from pathlib import Path
from typing import Optional, List, Sequence, Tuple, Union
import logging

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


class GitError(Exception):
    """A git command failed, timed out, or could not be started."""

    def __init__(self, args: Sequence[str], returncode: int, stderr: str = ""):
        self.command = list(args)
        self.returncode = returncode
        self.stderr = (stderr or "").strip()
        detail = self.stderr or f"exit code {returncode}"
        super().__init__(f"git {' '.join(self.command)} failed: {detail}")


class GitClient:
    """
    Abstraction over git commands.

    Provides methods for the clone/fetch/checkout operations the mirror
    needs plus read-only HEAD introspection.

    Example:
        client = GitClient()
        client.clone("https://github.com/noir-lang/noir", "/tmp/noir", ["--depth=1"])
        print(client.head_commit("/tmp/noir"))
    """

    def __init__(self, timeout: int = 300, executable: str = "git"):
        """
        Initialize GitClient.

        Args:
            timeout: Command timeout in seconds (default: 300)
            executable: git binary to invoke
        """
        self.timeout = timeout
        self.executable = executable

    def _run(
        self,
        args: Sequence[str],
        cwd: Optional[PathLike] = None,
        check: bool = False,
    ) -> Tuple[Optional[str], int]:
        """
        Run a git command.

        Args:
            args: git arguments (without the leading "git")
            cwd: Working directory
            check: Raise GitError on non-zero exit, timeout or spawn failure

        Returns:
            Tuple of (stdout, returncode); returncode is -1 when the
            command timed out or could not be started
        """
        cmd = [self.executable, *args]
        logger.debug(f"Running in '{cwd or '.'}': {' '.join(cmd)}")
        try:
            result = subprocess.run(
                cmd,
                cwd=str(cwd) if cwd else None,
                capture_output=True,
                text=True,
                timeout=self.timeout
            )
        except subprocess.TimeoutExpired:
            logger.warning(f"Git command timed out after {self.timeout}s: {' '.join(cmd)}")
            if check:
                raise GitError(args, -1, f"timed out after {self.timeout}s")
            return None, -1
        except OSError as e:
            logger.error(f"Git command failed to start: {' '.join(cmd)} - {e}")
            if check:
                raise GitError(args, -1, str(e))
            return None, -1

        if result.returncode != 0:
            logger.debug(f"git exited {result.returncode}: {result.stderr.strip()}")
            if check:
                raise GitError(args, result.returncode, result.stderr)

        output = result.stdout
        return output.strip() if output else None, result.returncode

    def is_git_repo(self, path: PathLike) -> bool:
        """Check if path is a git repository."""
        git_dir = Path(path) / ".git"
        return git_dir.exists()

    # --- Mutating operations (raise GitError) ---

    def clone(self, url: str, dest: PathLike, options: Sequence[str] = ()) -> None:
        """Clone url into dest with extra clone options."""
        self._run(["clone", *options, url, str(dest)], check=True)

    def fetch(self, path: PathLike, args: Sequence[str] = ()) -> None:
        self._run(["fetch", *args], cwd=path, check=True)

    def checkout(self, path: PathLike, ref: str) -> None:
        self._run(["checkout", ref], cwd=path, check=True)

    def reset_hard(self, path: PathLike, ref: str) -> None:
        self._run(["reset", "--hard", ref], cwd=path, check=True)

    def pull(self, path: PathLike) -> None:
        self._run(["pull"], cwd=path, check=True)

    def sparse_checkout_set(self, path: PathLike, paths: Sequence[str]) -> None:
        self._run(["sparse-checkout", "set", *paths], cwd=path, check=True)

    # --- Introspection (degrades to None) ---

    def head_commit(self, path: PathLike) -> Optional[str]:
        """Get the full hash of HEAD, or None if it cannot be resolved."""
        output, code = self._run(["rev-parse", "HEAD"], cwd=path)
        if code == 0 and output:
            return output.strip()
        return None

    def exact_tag(self, path: PathLike) -> Optional[str]:
        """Get the tag HEAD points at exactly, or None.

        This is not the nearest tag: a commit one past a tag yields None.
        """
        output, code = self._run(["describe", "--tags", "--exact-match", "HEAD"], cwd=path)
        if code == 0 and output:
            return output.strip()
        return None

    def sparse_checkout_list(self, path: PathLike) -> List[str]:
        """List sparse-checkout paths; empty when sparse checkout is off."""
        output, code = self._run(["sparse-checkout", "list"], cwd=path)
        if code != 0 or not output:
            return []
        return [line.strip() for line in output.split('\n') if line.strip()]
