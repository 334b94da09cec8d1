"""
Sync result domain objects for repomirror.

Each repository reconciled during a sync run produces one SyncOutcome.
The human-readable status string is the primary signal; a status that
contains "error" (case-insensitive) marks a failed repository. The typed
`ok` flag is derived from that same rule so both views always agree.
"""

from dataclasses import dataclass, field
from typing import Dict, Any, List, Optional

FAILURE_MARKER = "error"


def is_failure_status(status: str) -> bool:
    """True if a status string reports a failure."""
    return FAILURE_MARKER in status.lower()


@dataclass
class SyncOutcome:
    """Result of reconciling one repository."""
    name: str
    status: str
    commit: Optional[str] = None

    @property
    def ok(self) -> bool:
        return not is_failure_status(self.status)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result = {
            'name': self.name,
            'status': self.status,
            'ok': self.ok,
        }
        if self.commit:
            result['commit'] = self.commit
        return result


@dataclass
class SyncSummary:
    """
    Summary of a sync run across the selected repositories.

    `success` is False when nothing was selected or any outcome failed.
    """
    version: str
    mirror_root: str
    message: str = ""
    outcomes: List[SyncOutcome] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return bool(self.outcomes) and all(o.ok for o in self.outcomes)

    @property
    def failed(self) -> int:
        return sum(1 for o in self.outcomes if not o.ok)

    @property
    def successful(self) -> int:
        return len(self.outcomes) - self.failed

    def add_outcome(self, outcome: SyncOutcome) -> None:
        self.outcomes.append(outcome)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            'type': 'summary',
            'success': self.success,
            'message': self.message,
            'version': self.version,
            'mirror_root': self.mirror_root,
            'total': len(self.outcomes),
            'successful': self.successful,
            'failed': self.failed,
            'repos': [o.to_dict() for o in self.outcomes],
        }
