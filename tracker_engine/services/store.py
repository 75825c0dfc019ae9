"""
TRACKER Entity Store

Authoritative in-memory state of one replay run:
users, tickets, milestones, the ticket -> milestone index,
per-user notification queues and the once-only notification latches.

Single writer. Commands run one at a time, so nothing here is locked.
"""

import logging
from datetime import date
from typing import Dict, List, Optional

from ..config import TrackerConfig
from ..models.ticket import Milestone, Ticket
from ..models.user import Role, User
from .calendar import days_between, parse_date

logger = logging.getLogger(__name__)


class EntityStore:
    """
    State object created once per run and passed to every service.

    Nothing is rolled back: a command that fails half-way keeps
    whatever it already changed.
    """

    def __init__(self, config: Optional[TrackerConfig] = None):
        self.config = config or TrackerConfig()

        self.users: Dict[str, User] = {}
        self._tickets: Dict[int, Ticket] = {}
        self.milestones: Dict[str, Milestone] = {}
        self._ticket_milestone: Dict[int, str] = {}

        self._next_ticket_id = 0
        self.stopped = False
        self.testing_started_on: Optional[date] = None

        self._notifications: Dict[str, List[str]] = {}
        self._latches: Dict[str, str] = {}

    # =========================================================================
    # Users
    # =========================================================================

    def add_user(self, user: User) -> None:
        self.users[user.username] = user

    def get_user(self, username: str) -> Optional[User]:
        return self.users.get(username)

    def developers(self) -> List[User]:
        return [u for u in self.users.values() if u.role == Role.DEVELOPER]

    # =========================================================================
    # Tickets
    # =========================================================================

    def allocate_ticket_id(self) -> int:
        ticket_id = self._next_ticket_id
        self._next_ticket_id += 1
        return ticket_id

    def add_ticket(self, ticket: Ticket) -> None:
        self._tickets[ticket.id] = ticket

    def find_ticket(self, ticket_id: int) -> Optional[Ticket]:
        return self._tickets.get(ticket_id)

    @property
    def tickets(self) -> List[Ticket]:
        """All tickets in creation order."""
        return list(self._tickets.values())

    # =========================================================================
    # Milestones
    # =========================================================================

    def add_milestone(self, milestone: Milestone) -> None:
        self.milestones[milestone.name] = milestone

    def get_milestone(self, name: str) -> Optional[Milestone]:
        return self.milestones.get(name)

    def link_ticket(self, ticket_id: int, milestone_name: str) -> None:
        self._ticket_milestone[ticket_id] = milestone_name

    def milestone_name_for(self, ticket_id: int) -> Optional[str]:
        return self._ticket_milestone.get(ticket_id)

    def milestone_for(self, ticket_id: int) -> Optional[Milestone]:
        name = self._ticket_milestone.get(ticket_id)
        if name is None:
            return None
        return self.milestones.get(name)

    # =========================================================================
    # Phase & run control
    # =========================================================================

    def start_testing_phase(self, timestamp: str) -> None:
        self.testing_started_on = parse_date(timestamp)
        logger.info("Testing phase started on %s", self.testing_started_on)

    def is_testing_phase(self, timestamp: str) -> bool:
        """
        True while `timestamp` lies inside the testing window.

        The first check of a run opens the window if no
        startTestingPhase has been seen yet.
        """
        current = parse_date(timestamp)
        if self.testing_started_on is None:
            self.testing_started_on = current
        elapsed = days_between(self.testing_started_on, current)
        return elapsed < self.config.testing_phase_days

    def stop(self) -> None:
        self.stopped = True
        logger.info("Replay stopped")

    # =========================================================================
    # Notifications
    # =========================================================================

    def push_notification(self, username: str, message: str) -> None:
        self._notifications.setdefault(username, []).append(message)

    def consume_notifications(self, username: str) -> List[str]:
        """Drain and return the user's pending messages."""
        return self._notifications.pop(username, [])

    def mark_once(self, key: str, timestamp: str) -> bool:
        """
        Set the latch `key`.

        Returns True only the first time a key is marked.
        """
        if key in self._latches:
            return False
        self._latches[key] = timestamp
        logger.info("Notification latch %s set on %s", key, timestamp)
        return True
