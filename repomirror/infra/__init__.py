"""
Infrastructure layer for repomirror.

Contains abstractions for external processes:
- GitClient: Git command execution
- RipgrepMatcher / ScanMatcher: Line matchers used by search

These provide clean interfaces that can be mocked for testing.
"""

from .git_client import GitClient, GitError
from .matcher import (
    LineMatcher,
    MatcherUnavailable,
    RipgrepMatcher,
    ScanMatcher,
    RawMatch,
)

__all__ = [
    'GitClient',
    'GitError',
    'LineMatcher',
    'MatcherUnavailable',
    'RipgrepMatcher',
    'ScanMatcher',
    'RawMatch',
]
