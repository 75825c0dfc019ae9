"""
TRACKER Priority Service

Due-date driven priority escalation, applied on read.

Formula: days = inclusive days until the milestone's due date (0 if overdue)

This ensures a LOW ticket in a milestone due in two days
is worked before a HIGH ticket with plenty of time.
"""

import logging
from typing import Optional

from ..models.ticket import Priority, Severity, Ticket, TicketType
from .calendar import days_until_due
from .milestone import MilestoneService
from .store import EntityStore

logger = logging.getLogger(__name__)


class PriorityService:
    """
    Escalates tickets that belong to ACTIVE milestones.

    Windows:
    - <= 2 days left: CRITICAL
    - 3 days left: SEVERE bugs CRITICAL, everything else at least HIGH
    - otherwise: unchanged

    Escalation never lowers a priority and is idempotent
    for an unchanged ticket and date.
    """

    CRITICAL_WINDOW_DAYS = 2
    HIGH_WINDOW_DAYS = 3

    def __init__(self, store: EntityStore, milestones: MilestoneService):
        self.store = store
        self.milestones = milestones

    def escalated_priority(self, ticket: Ticket, days_left: int) -> Priority:
        """Priority `ticket` should have with `days_left` until due."""
        current = ticket.business_priority
        if days_left <= self.CRITICAL_WINDOW_DAYS:
            return Priority.CRITICAL
        if days_left <= self.HIGH_WINDOW_DAYS:
            if ticket.type == TicketType.BUG and ticket.severity == Severity.SEVERE:
                return Priority.CRITICAL
            return current.at_least(Priority.HIGH)
        return current

    def escalate_ticket(self, ticket: Ticket, timestamp: str) -> Optional[Priority]:
        """
        Escalate one ticket as of `timestamp`.

        Returns the new priority when it changed, else None.
        """
        milestone = self.store.milestone_for(ticket.id)
        if milestone is None or not self.milestones.is_active(milestone):
            return None

        days_left = days_until_due(timestamp, milestone.due_date)
        target = self.escalated_priority(ticket, days_left)
        if target == ticket.business_priority:
            return None

        logger.debug(
            "Ticket %d escalated %s -> %s (%d days to %s)",
            ticket.id, ticket.business_priority.value, target.value,
            days_left, milestone.name
        )
        ticket.business_priority = target
        return target

    def escalate_all(self, timestamp: str) -> int:
        """Escalate every ticket; returns how many changed."""
        changed = 0
        for ticket in self.store.tickets:
            if self.escalate_ticket(ticket, timestamp) is not None:
                changed += 1
        return changed
