"""
TRACKER Notification Service

Milestone alerts, evaluated lazily whenever a user reads notifications.

2 conditions × once per milestone per run:
- DUE_TOMORROW: the day after the due date has arrived
- UNBLOCK_AFTER_DUE: past due, no longer blocked, but was blocked before

Either one escalates every non-CLOSED member ticket to CRITICAL
and notifies the milestone's developers.
"""

import logging
from typing import List

from ..models.ticket import Milestone, Priority, TicketStatus
from .calendar import parse_date
from .milestone import MilestoneService
from .store import EntityStore

logger = logging.getLogger(__name__)


class NotificationService:
    """Generates milestone alerts and drains per-user queues."""

    DUE_TOMORROW = "DUE_TOMORROW"
    UNBLOCK_AFTER_DUE = "UNBLOCK_AFTER_DUE"

    def __init__(self, store: EntityStore, milestones: MilestoneService):
        self.store = store
        self.milestones = milestones

    def view_notifications(self, username: str, timestamp: str) -> List[str]:
        """Run pending milestone checks, then hand over the user's queue."""
        self.generate(timestamp)
        return self.store.consume_notifications(username)

    def generate(self, timestamp: str) -> None:
        """Check every milestone, in creation order, for alert conditions."""
        now = parse_date(timestamp)

        for milestone in list(self.store.milestones.values()):
            self.milestones.update_blocked_history(milestone)
            due = parse_date(milestone.due_date)

            if (now - due).days == 1:
                self._fire(
                    milestone,
                    self.DUE_TOMORROW,
                    timestamp,
                    f"Milestone {milestone.name} is due tomorrow. "
                    "All unresolved tickets are now CRITICAL."
                )

            past_due = now > due
            if past_due and milestone.was_ever_blocked and not self.milestones.is_blocked(milestone):
                self._fire(
                    milestone,
                    self.UNBLOCK_AFTER_DUE,
                    timestamp,
                    f"Milestone {milestone.name} was unblocked after due date. "
                    "All active tickets are now CRITICAL."
                )

    # =========================================================================
    # Private methods
    # =========================================================================

    def _fire(self, milestone: Milestone, condition: str, timestamp: str, message: str) -> None:
        """Escalate and notify, unless this condition already fired."""
        key = f"{condition}:{milestone.name}"
        if not self.store.mark_once(key, timestamp):
            return

        for ticket_id in milestone.tickets:
            ticket = self.store.find_ticket(ticket_id)
            if ticket is not None and ticket.status != TicketStatus.CLOSED:
                ticket.business_priority = Priority.CRITICAL

        for dev in milestone.assigned_devs:
            self.store.push_notification(dev, message)
