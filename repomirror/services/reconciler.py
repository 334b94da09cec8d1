"""
Decides whether a mirrored repository must be thrown away and recloned.
"""

import logging

from ..domain.pin import RefKind, RepositoryPin
from .mirror_store import MirrorStore

logger = logging.getLogger(__name__)


def needs_reclone(pin: RepositoryPin, store: MirrorStore) -> bool:
    """
    Check whether the mirror of `pin` must be recloned.

    - Missing mirror: always.
    - Commit pin: HEAD's full hash must start with the pinned hash, so
      short pins work.
    - Tag pin: HEAD must sit exactly on the pinned tag. A HEAD that is on
      no tag counts as a mismatch.
    - Branch pin: never; branches are updated in place.
    """
    if not store.exists(pin.name):
        return True

    ref = pin.ref_spec

    if ref.kind == RefKind.COMMIT:
        current = store.commit(pin.name, full=True)
        if current and current.startswith(ref.value):
            return False
        logger.info(f"{pin.name}: HEAD {current or 'unknown'} does not match commit {ref.value}")
        return True

    if ref.kind == RefKind.TAG:
        current = store.tag(pin.name)
        if current == ref.value:
            return False
        logger.info(f"{pin.name}: HEAD tag {current or 'none'} does not match {ref.value}")
        return True

    return False
