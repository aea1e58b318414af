"""Run-scoped cache of the users that exist in the collection."""
from __future__ import annotations

import logging
from typing import Optional, Set

from .rekognition import FaceCollection

logger = logging.getLogger(__name__)


class UserRegistry:
    """Create users on demand, listing existing ones once per run.

    The listing is taken on the first :meth:`ensure_user` call and never
    refreshed; nothing else is expected to modify the collection while a
    run is in progress.
    """

    def __init__(self, collection: FaceCollection) -> None:
        self._collection = collection
        self._existing: Optional[Set[str]] = None

    @property
    def loaded(self) -> bool:
        return self._existing is not None

    def _existing_ids(self) -> Set[str]:
        if self._existing is None:
            self._existing = set(self._collection.list_user_ids())
            logger.debug("Collection already holds %d user(s)", len(self._existing))
        return self._existing

    def ensure_user(self, user_id: str) -> bool:
        """Create ``user_id`` unless it exists. Returns True when created."""
        existing = self._existing_ids()
        if user_id in existing:
            logger.info("User %s already exists", user_id)
            return False
        self._collection.create_user(user_id)
        existing.add(user_id)
        logger.info("User %s created", user_id)
        return True


__all__ = ["UserRegistry"]
