"""
Sync orchestration for repomirror.

Reconciles a selection of catalog pins one after another. A failure in
one repository is recorded in its outcome and never stops the others.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, Any, List, Optional, Sequence

from ..catalog import DEFAULT_NOIR_VERSION, get_pins, select_pins
from ..domain.operation import SyncOutcome, SyncSummary
from ..domain.pin import Category, RepositoryPin
from .checkout import CheckoutStrategy
from .mirror_store import MirrorStore

logger = logging.getLogger(__name__)

NO_SELECTION_MESSAGE = "No repositories matched the specified names or categories"


@dataclass
class SyncRequest:
    """What to sync; names win over categories, default is core."""
    version: Optional[str] = None
    force: bool = False
    repos: Sequence[str] = field(default_factory=tuple)
    categories: Sequence[Category] = field(default_factory=tuple)


class SyncService:
    """
    Service that keeps the mirror in line with the catalog.

    Example:
        service = SyncService(MirrorStore(get_mirror_root()))
        summary = service.reconcile(SyncRequest(categories=[Category.LIBRARIES]))
        print(summary.success, summary.message)
    """

    def __init__(
        self,
        store: MirrorStore,
        strategy: Optional[CheckoutStrategy] = None,
        pin_source: Callable[[Optional[str]], List[RepositoryPin]] = get_pins,
    ):
        self.store = store
        self.strategy = strategy or CheckoutStrategy(store)
        self.pin_source = pin_source

    def reconcile(self, request: SyncRequest) -> SyncSummary:
        """
        Clone missing repositories and update existing ones.

        Returns:
            SyncSummary; unsuccessful if nothing was selected or any
            repository failed
        """
        pins = self.pin_source(request.version)
        summary = SyncSummary(
            version=request.version or DEFAULT_NOIR_VERSION,
            mirror_root=str(self.store.root),
        )

        selected = select_pins(pins, request.repos, request.categories)
        if not selected:
            summary.message = NO_SELECTION_MESSAGE
            logger.warning(summary.message)
            return summary

        for pin in selected:
            summary.add_outcome(self.reconcile_one(pin, request.force))

        if summary.success:
            summary.message = f"Successfully synced {len(summary.outcomes)} repositories to {self.store.root}"
        else:
            summary.message = "Some repositories failed to sync"
        return summary

    def reconcile_one(self, pin: RepositoryPin, force: bool = False) -> SyncOutcome:
        """Reconcile a single pin, converting any exception into a failed outcome."""
        logger.info(f"Syncing {pin.name} @ {pin.ref_spec}")
        try:
            status = self.strategy.ensure(pin, force)
        except Exception as e:
            logger.exception(f"Unexpected failure syncing {pin.name}")
            status = f"Error: {e}"

        outcome = SyncOutcome(name=pin.name, status=status)
        if outcome.ok:
            outcome.commit = self.store.commit(pin.name)
        else:
            logger.error(f"{pin.name}: {status}")
        return outcome

    def status(self) -> Dict[str, Any]:
        """Clone state of every configured repository."""
        pins = self.pin_source(None)
        states = self.store.statuses(pins)

        repos = []
        for pin in pins:
            state = states[pin.name]
            entry = {
                'name': pin.name,
                'description': pin.description,
                'category': pin.category.value,
                'cloned': state['cloned'],
            }
            if state['commit']:
                entry['commit'] = state['commit']
            repos.append(entry)

        return {
            'repos_dir': str(self.store.root),
            'repos': repos,
        }
