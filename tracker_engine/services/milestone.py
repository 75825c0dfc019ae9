"""
TRACKER Milestone Service

Milestones group tickets under a due date and may block each other.

Owner (manager) creates milestone -> developers work its tickets
-> milestone completes when every member ticket is CLOSED.

Derived state is recomputed on every read:
- active: some member ticket is not CLOSED
- blocked: another ACTIVE milestone lists this one in blockingFor
"""

import logging
from typing import Any, Dict, List

from ..errors import (
    AlreadyLinkedError,
    InvalidPhaseError,
    NotFoundError,
    UnknownUserError,
    WrongRoleError,
)
from ..models.ticket import Milestone, TicketAction, TicketStatus
from ..models.user import Role
from .calendar import days_until_due, overdue_by
from .reports import round_half_up
from .store import EntityStore

logger = logging.getLogger(__name__)


class MilestoneService:
    """
    Creates milestones and computes their derived state.

    Rules:
    1. Milestones are created only outside the testing phase
    2. Every assigned developer must exist and be a DEVELOPER
    3. A ticket belongs to at most one milestone
    4. Membership (tickets, developers) never changes afterwards
    """

    def __init__(self, store: EntityStore):
        self.store = store

    def create_milestone(
        self,
        name: str,
        due_date: str,
        created_by: str,
        timestamp: str,
        tickets: List[int],
        assigned_devs: List[str],
        blocking_for: List[str]
    ) -> Milestone:
        """
        Create a milestone and link its tickets.

        Checks run in order and the first failure wins:
        phase, developers, ticket existence, ticket uniqueness.
        """
        if self.store.is_testing_phase(timestamp):
            raise InvalidPhaseError(
                "Milestones can only be created during development phases."
            )

        for dev in assigned_devs:
            user = self.store.get_user(dev)
            if user is None:
                raise UnknownUserError(dev)
            if user.role != Role.DEVELOPER:
                raise WrongRoleError(dev)

        for ticket_id in tickets:
            if self.store.find_ticket(ticket_id) is None:
                raise NotFoundError(ticket_id)

        for ticket_id in tickets:
            existing = self.store.milestone_name_for(ticket_id)
            if existing is not None:
                raise AlreadyLinkedError(ticket_id, existing)

        milestone = Milestone(
            name=name,
            due_date=due_date,
            created_at=timestamp,
            created_by=created_by,
            tickets=list(tickets),
            assigned_devs=list(assigned_devs),
            blocking_for=list(blocking_for),
        )
        self.store.add_milestone(milestone)

        for ticket_id in tickets:
            self.store.link_ticket(ticket_id, name)
            ticket = self.store.find_ticket(ticket_id)
            ticket.add_action(TicketAction.added_to_milestone(name, created_by, timestamp))

        message = f"New milestone {name} has been created with due date {due_date}."
        for dev in assigned_devs:
            self.store.push_notification(dev, message)

        logger.info(
            "Milestone %s created by %s with %d tickets",
            name, created_by, len(tickets)
        )
        return milestone

    # =========================================================================
    # Derived state
    # =========================================================================

    def _member_ids(self, milestone: Milestone, closed: bool) -> List[int]:
        out = []
        for ticket_id in milestone.tickets:
            ticket = self.store.find_ticket(ticket_id)
            if ticket is None:
                continue
            if (ticket.status == TicketStatus.CLOSED) == closed:
                out.append(ticket_id)
        return sorted(out)

    def open_tickets(self, milestone: Milestone) -> List[int]:
        return self._member_ids(milestone, closed=False)

    def closed_tickets(self, milestone: Milestone) -> List[int]:
        return self._member_ids(milestone, closed=True)

    def is_active(self, milestone: Milestone) -> bool:
        return bool(self.open_tickets(milestone))

    def is_blocked(self, milestone: Milestone) -> bool:
        for other in self.store.milestones.values():
            if other is milestone:
                continue
            if other.blocks(milestone.name) and self.is_active(other):
                return True
        return False

    def update_blocked_history(self, milestone: Milestone) -> None:
        """Latch was_ever_blocked once the milestone is seen blocked."""
        if not milestone.was_ever_blocked and self.is_blocked(milestone):
            milestone.was_ever_blocked = True

    def completion_percentage(self, milestone: Milestone) -> float:
        if not milestone.tickets:
            return 0.0
        fraction = len(self.closed_tickets(milestone)) / len(milestone.tickets)
        return round_half_up(fraction)

    def record_ticket_closed(self, ticket_id: int, timestamp: str) -> None:
        """Capture the completion date when the last member ticket closes."""
        milestone = self.store.milestone_for(ticket_id)
        if milestone is None or milestone.completed_at:
            return
        if not self.is_active(milestone):
            milestone.completed_at = timestamp
            logger.info("Milestone %s completed on %s", milestone.name, timestamp)

    def record_ticket_reopened(self, ticket_id: int) -> None:
        """Forget the completion date once a member ticket leaves CLOSED."""
        milestone = self.store.milestone_for(ticket_id)
        if milestone is not None and milestone.completed_at and self.is_active(milestone):
            milestone.completed_at = ""

    def repartition(self, milestone: Milestone) -> List[Dict[str, Any]]:
        """
        Member tickets currently assigned to each milestone developer.

        Rows ordered by ticket count ascending, then developer name.
        """
        rows = []
        for dev in milestone.assigned_devs:
            assigned = []
            for ticket_id in milestone.tickets:
                ticket = self.store.find_ticket(ticket_id)
                if ticket is not None and ticket.assigned_to == dev:
                    assigned.append(ticket_id)
            assigned.sort()
            rows.append({"developer": dev, "assignedTickets": assigned})
        rows.sort(key=lambda row: (len(row["assignedTickets"]), row["developer"]))
        return rows

    # =========================================================================
    # Views
    # =========================================================================

    def visible_to(self, username: str, role: Role) -> List[Milestone]:
        """
        Milestones a user may view, by due date then name.

        Managers see what they created, developers what they belong to.
        """
        if role == Role.MANAGER:
            visible = [m for m in self.store.milestones.values() if m.created_by == username]
        elif role == Role.DEVELOPER:
            visible = [m for m in self.store.milestones.values() if m.has_developer(username)]
        else:
            visible = []
        visible.sort(key=lambda m: (m.due_date, m.name))
        return visible

    def to_output(self, milestone: Milestone, timestamp: str) -> Dict[str, Any]:
        """
        Snapshot of a milestone as seen at `timestamp`.

        Day counters are taken from the view date while active
        and from the completion date once completed.
        """
        active = self.is_active(milestone)
        reference = timestamp
        if not active:
            if not milestone.completed_at:
                milestone.completed_at = timestamp
            reference = milestone.completed_at

        return {
            "name": milestone.name,
            "blockingFor": list(milestone.blocking_for),
            "dueDate": milestone.due_date,
            "createdAt": milestone.created_at,
            "tickets": list(milestone.tickets),
            "assignedDevs": list(milestone.assigned_devs),
            "createdBy": milestone.created_by,
            "status": "ACTIVE" if active else "COMPLETED",
            "isBlocked": self.is_blocked(milestone),
            "daysUntilDue": days_until_due(reference, milestone.due_date),
            "overdueBy": overdue_by(reference, milestone.due_date),
            "openTickets": self.open_tickets(milestone),
            "closedTickets": self.closed_tickets(milestone),
            "completionPercentage": self.completion_percentage(milestone),
            "repartition": self.repartition(milestone),
        }

    def view_milestones(self, username: str, role: Role, timestamp: str) -> List[Dict[str, Any]]:
        return [self.to_output(m, timestamp) for m in self.visible_to(username, role)]
