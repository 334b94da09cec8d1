"""
Line matchers used by the search service.

Two implementations share one interface:
- RipgrepMatcher: runs the external `rg` binary
- ScanMatcher: pure-Python walk and regex scan, used when rg is
  missing or fails

Both return RawMatch objects with absolute paths in scan order; the
normalizer turns them into SearchResults.
"""

import fnmatch
import logging
import os
import re
import shutil
import subprocess
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Iterator, List, Sequence, Union

from ..normalizer import RawMatch, parse_matcher_output

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

DEFAULT_IGNORE_DIRECTORIES = (".git", "node_modules")

# rg exits 1 when nothing matched
RG_NO_MATCHES = 1

_BRACES = re.compile(r'\{([^{}]*)\}')


class MatcherUnavailable(Exception):
    """The matcher cannot serve this query; callers should fall back."""


class LineMatcher(ABC):
    """Finds lines matching a query under a root directory."""

    name = "matcher"

    def available(self) -> bool:
        return True

    @abstractmethod
    def match(
        self,
        query: str,
        root: PathLike,
        file_pattern: str,
        max_results: int,
        case_sensitive: bool = False,
    ) -> List[RawMatch]:
        """Return matches under root for files matching file_pattern."""


def escape_shell(text: str) -> str:
    """
    Escape a string for use inside double quotes in a POSIX shell.

    Regex syntax (|, *, +, etc.) is preserved. Commands are never run
    through a shell; this is used to log a copy-pasteable command line.
    """
    return re.sub(r'(["$`\\!])', r'\\\1', text)


class RipgrepMatcher(LineMatcher):
    """
    Matcher backed by ripgrep.

    Requests `2 * max_results` lines per file so later truncation still
    has enough to work with.
    """

    name = "ripgrep"

    def __init__(
        self,
        executable: str = "rg",
        timeout: int = 30,
        max_output_bytes: int = 10 * 1024 * 1024,
    ):
        self.executable = executable
        self.timeout = timeout
        self.max_output_bytes = max_output_bytes

    def available(self) -> bool:
        return shutil.which(self.executable) is not None

    def build_command(
        self,
        query: str,
        root: PathLike,
        file_pattern: str,
        max_results: int,
        case_sensitive: bool = False,
    ) -> List[str]:
        """Build the rg argv. The query is a single argument after `--`."""
        cmd = [self.executable]
        if not case_sensitive:
            cmd.append("-i")
        cmd.extend([
            "-n",
            "--no-heading",
            "--with-filename",
            "--color", "never",
            "-g", file_pattern,
            "-m", str(max_results * 2),
            "--",
            query,
            str(root),
        ])
        return cmd

    def match(
        self,
        query: str,
        root: PathLike,
        file_pattern: str,
        max_results: int,
        case_sensitive: bool = False,
    ) -> List[RawMatch]:
        cmd = self.build_command(query, root, file_pattern, max_results, case_sensitive)
        logger.debug('Running: ' + ' '.join(f'"{escape_shell(part)}"' for part in cmd))

        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                encoding='utf-8',
                errors='replace',
                timeout=self.timeout
            )
        except subprocess.TimeoutExpired:
            raise MatcherUnavailable(f"{self.executable} timed out after {self.timeout}s")
        except OSError as e:
            raise MatcherUnavailable(f"{self.executable} could not be started: {e}")

        if result.returncode == RG_NO_MATCHES:
            return []
        if result.returncode != 0:
            raise MatcherUnavailable(
                f"{self.executable} exited {result.returncode}: {result.stderr.strip()}"
            )
        if len(result.stdout) > self.max_output_bytes:
            raise MatcherUnavailable(f"{self.executable} output exceeded {self.max_output_bytes} bytes")

        return parse_matcher_output(result.stdout)


def expand_braces(pattern: str) -> List[str]:
    """
    Expand `{a,b}` alternatives in a glob.

    >>> expand_braces("*.{md,mdx}")
    ['*.md', '*.mdx']
    """
    found = _BRACES.search(pattern)
    if not found:
        return [pattern]
    head, tail = pattern[:found.start()], pattern[found.end():]
    expanded = []
    for option in found.group(1).split(','):
        expanded.extend(expand_braces(head + option + tail))
    return expanded


def compile_query(query: str, case_sensitive: bool = False) -> 're.Pattern[str]':
    """
    Compile a query as a regex, or as a literal if it is not valid regex.

    A query such as "[unterminated" never raises.
    """
    flags = 0 if case_sensitive else re.IGNORECASE
    try:
        return re.compile(query, flags)
    except re.error:
        return re.compile(re.escape(query), flags)


class ScanMatcher(LineMatcher):
    """
    In-process matcher used when ripgrep is unavailable.

    Walks the tree in sorted order, skipping ignored directories, and stops
    as soon as max_results lines have been collected. Unreadable files are
    skipped.
    """

    name = "scan"

    def __init__(self, ignore_directories: Sequence[str] = DEFAULT_IGNORE_DIRECTORIES):
        self.ignore_directories = set(ignore_directories)

    def iter_files(self, root: PathLike, file_pattern: str) -> Iterator[Path]:
        """Yield files under root matching file_pattern at any depth."""
        patterns = expand_braces(file_pattern)
        root = Path(root)

        for dirpath, dirnames, filenames in os.walk(root):
            dirnames[:] = sorted(d for d in dirnames if d not in self.ignore_directories)
            for filename in sorted(filenames):
                path = Path(dirpath) / filename
                relative = path.relative_to(root).as_posix()
                if any(self._matches(relative, filename, p) for p in patterns):
                    yield path

    @staticmethod
    def _matches(relative: str, filename: str, pattern: str) -> bool:
        # "*.nr" is searched recursively, the same as "**/*.nr"
        if '/' not in pattern:
            return fnmatch.fnmatchcase(filename, pattern)
        if pattern.startswith('**/'):
            pattern = pattern[3:]
            return fnmatch.fnmatchcase(relative, pattern) or fnmatch.fnmatchcase(filename, pattern)
        return fnmatch.fnmatchcase(relative, pattern)

    def match(
        self,
        query: str,
        root: PathLike,
        file_pattern: str,
        max_results: int,
        case_sensitive: bool = False,
    ) -> List[RawMatch]:
        regex = compile_query(query, case_sensitive)
        matches: List[RawMatch] = []

        for path in self.iter_files(root, file_pattern):
            if len(matches) >= max_results:
                break

            try:
                text = path.read_text(encoding='utf-8')
            except (OSError, UnicodeDecodeError):
                continue

            for index, line in enumerate(text.split('\n')):
                if len(matches) >= max_results:
                    break
                if regex.search(line):
                    matches.append(RawMatch(path=str(path), line=index + 1, content=line))

        return matches

