"""
TRACKER Engine

Replays a command log against a roster and collects the results.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional

from .config import TrackerConfig
from .models.user import User
from .services.dispatch import CommandDispatcher
from .services.store import EntityStore

logger = logging.getLogger(__name__)


class Engine:
    """
    One replay run: a fresh store, a dispatcher and the result list.

    Usage:
        engine = Engine.from_roster(users)
        results = engine.replay(commands)
    """

    def __init__(self, store: EntityStore):
        self.store = store
        self.dispatcher = CommandDispatcher(store)

    @classmethod
    def from_roster(
        cls,
        records: Iterable[Dict[str, Any]],
        config: Optional[TrackerConfig] = None
    ) -> "Engine":
        store = EntityStore(config)
        for record in records:
            store.add_user(User.from_record(record))
        logger.debug("Loaded %d users", len(store.users))
        return cls(store)

    def execute(self, record: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Run a single command; None when it produces no result."""
        return self.dispatcher.dispatch(record)

    def replay(self, records: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """
        Run commands in order until exhausted or stopped.

        The stopping command itself is executed; nothing after it is.
        """
        results = []
        for record in records:
            if self.store.stopped:
                break
            result = self.execute(record)
            if result is not None:
                results.append(result)
        logger.info("Replay finished with %d results", len(results))
        return results
