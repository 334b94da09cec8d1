"""
Normalization of raw line matches into mirror-relative SearchResults.

Both line matchers feed through here, so ripgrep output and the
in-process scan always produce the same result shape.
"""

import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional, Union

from .domain.search import SearchResult

# Non-greedy path so content may itself contain "N:" sequences
MATCH_LINE = re.compile(r'^(.+?):(\d+):(.*)$')


@dataclass(frozen=True)
class RawMatch:
    """A matched line as reported by a matcher, before normalization."""
    path: str
    line: Optional[int]
    content: str


def parse_match_line(line: str) -> Optional[RawMatch]:
    """Parse a `path:line:content` line; None for anything else."""
    match = MATCH_LINE.match(line)
    if not match:
        return None
    path, line_num, content = match.groups()
    return RawMatch(path=path, line=int(line_num), content=content)


def relative_to_root(path: str, root: Union[str, Path]) -> str:
    """
    Mirror-relative POSIX path for a matcher-reported path.

    Paths under the root (absolute, or relative to the working directory)
    are made relative to it; any other relative path is taken as already
    mirror-relative.
    """
    root = os.path.abspath(str(root))
    if not os.path.isabs(path):
        candidate = os.path.abspath(path)
        if os.path.commonpath([candidate, root]) != root:
            return Path(path).as_posix()
        path = candidate
    return Path(os.path.relpath(path, root)).as_posix()


def to_result(
    path: str,
    root: Union[str, Path],
    line: Optional[int] = None,
    content: str = "",
) -> SearchResult:
    relative = relative_to_root(path, root)
    return SearchResult(
        file=relative,
        line=line,
        content=content.strip(),
        repo=relative.split('/')[0],
    )


def normalize(
    matches: Iterable[RawMatch],
    root: Union[str, Path],
    max_results: int,
) -> List[SearchResult]:
    """Convert raw matches to SearchResults, keeping scan order, capped at max_results."""
    results = []
    for raw in matches:
        if len(results) >= max_results:
            break
        results.append(to_result(raw.path, root, raw.line, raw.content))
    return results


def parse_matcher_output(output: str) -> List[RawMatch]:
    """
    Parse line-oriented `path:line:content` matcher output.

    Blank and malformed lines are dropped silently.
    """
    raw = (parse_match_line(line) for line in output.split('\n') if line)
    return [m for m in raw if m is not None]
