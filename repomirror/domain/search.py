"""
Search domain objects for repomirror.

All paths are mirror-relative and use forward slashes; `repo` is always
the first segment of `file`.
"""

from dataclasses import dataclass
from typing import Optional, Dict, Any


@dataclass(frozen=True)
class SearchResult:
    """A single matched line."""
    file: str
    content: str
    repo: str
    line: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        result = {
            'file': self.file,
            'content': self.content,
            'repo': self.repo,
        }
        if self.line is not None:
            result['line'] = self.line
        return result


@dataclass(frozen=True)
class FileInfo:
    """An example circuit or other notable file in the mirror."""
    path: str
    name: str
    repo: str
    type: str = "other"

    def to_dict(self) -> Dict[str, Any]:
        return {
            'path': self.path,
            'name': self.name,
            'repo': self.repo,
            'type': self.type,
        }


@dataclass(frozen=True)
class LibraryEntry:
    """Read-only view of a pin plus its live clone state."""
    name: str
    description: str
    category: str
    url: str
    cloned: bool

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'description': self.description,
            'category': self.category,
            'url': self.url,
            'cloned': self.cloned,
        }
