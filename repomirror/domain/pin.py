"""
Repository pin domain objects for repomirror.

A RepositoryPin declares which remote repository to mirror and which
version of it to check out. Pins are immutable for the duration of a
sync run; version overrides produce new pins via with_tag().
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Optional, Tuple, Dict, Any


class Category(Enum):
    """Grouping used to select repositories for a sync run."""
    CORE = "core"
    LIBRARIES = "libraries"
    REFERENCE = "reference"

    @classmethod
    def parse(cls, value: str) -> 'Category':
        """Parse a category name, raising ValueError for unknown names."""
        try:
            return cls(value.strip().lower())
        except ValueError:
            valid = ", ".join(c.value for c in cls)
            raise ValueError(f"Unknown category '{value}' (expected one of: {valid})")


class RefKind(Enum):
    """Kind of ref a pin resolves to, strongest first."""
    COMMIT = "commit"
    TAG = "tag"
    BRANCH = "branch"


@dataclass(frozen=True)
class RefSpec:
    """
    The single authoritative ref of a pin.

    A BRANCH ref with value None means the remote's default branch.
    """
    kind: RefKind
    value: Optional[str] = None

    @property
    def label(self) -> str:
        return self.value or "HEAD"

    def __str__(self) -> str:
        return f"{self.label} ({self.kind.value})"


@dataclass(frozen=True)
class RepositoryPin:
    """
    Declared target for one mirrored repository.

    Priority among the version fields is commit > tag > branch.
    """
    name: str
    url: str
    category: Category = Category.LIBRARIES
    description: str = ""
    branch: Optional[str] = None
    tag: Optional[str] = None
    commit: Optional[str] = None
    sparse: Tuple[str, ...] = field(default_factory=tuple)

    @property
    def ref_spec(self) -> RefSpec:
        if self.commit:
            return RefSpec(RefKind.COMMIT, self.commit)
        if self.tag:
            return RefSpec(RefKind.TAG, self.tag)
        return RefSpec(RefKind.BRANCH, self.branch)

    @property
    def is_sparse(self) -> bool:
        return bool(self.sparse)

    def with_tag(self, tag: Optional[str]) -> 'RepositoryPin':
        """Return a copy of this pin targeting the given tag."""
        return replace(self, tag=tag)

    def to_dict(self) -> Dict[str, Any]:
        result = {
            'name': self.name,
            'url': self.url,
            'category': self.category.value,
            'description': self.description,
        }
        if self.branch:
            result['branch'] = self.branch
        if self.tag:
            result['tag'] = self.tag
        if self.commit:
            result['commit'] = self.commit
        if self.sparse:
            result['sparse'] = list(self.sparse)
        return result
