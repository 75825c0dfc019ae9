"""
TRACKER Ticket Lifecycle Service

OPEN -> IN_PROGRESS -> RESOLVED -> CLOSED

Assignment moves OPEN -> IN_PROGRESS (see AssignmentService).
changeStatus moves one step forward, undoChangeStatus one step back.
Each transition is written to the ticket's action log.
"""

import logging
from typing import List, Optional

from ..errors import AnonymousReportError, InvalidPhaseError, NotAssigneeError
from ..models.command import TicketParams
from ..models.ticket import Priority, Ticket, TicketAction, TicketStatus, TicketType
from ..models.user import Role, User
from .milestone import MilestoneService
from .store import EntityStore

logger = logging.getLogger(__name__)


class TicketLifecycleService:
    """
    Creates tickets and drives their status.

    Rules:
    1. Tickets are reported only during the testing phase
    2. Anonymous reports must be BUGs and are forced to LOW
    3. Only the assignee changes status
    4. OPEN and CLOSED tickets do not move on changeStatus
    """

    def __init__(self, store: EntityStore, milestones: MilestoneService):
        self.store = store
        self.milestones = milestones

    def report_ticket(self, params: TicketParams, timestamp: str) -> Ticket:
        """
        Create a ticket from reportTicket params.

        The id is allocated before the anonymous check, so a rejected
        anonymous report still uses up an id.
        """
        if not self.store.is_testing_phase(timestamp):
            raise InvalidPhaseError("Tickets can only be reported during testing phases.")

        ticket_id = self.store.allocate_ticket_id()

        priority = params.business_priority
        if not params.reported_by:
            if params.type != TicketType.BUG:
                raise AnonymousReportError()
            priority = Priority.LOW

        ticket = Ticket(
            id=ticket_id,
            type=params.type,
            title=params.title,
            description=params.description,
            business_priority=priority,
            status=TicketStatus.OPEN,
            expertise_area=params.expertise_area,
            reported_by=params.reported_by,
            created_at=timestamp,
            severity=params.severity,
            frequency=params.frequency,
            business_value=params.business_value,
            customer_demand=params.customer_demand,
            usability_score=params.usability_score,
        )
        self.store.add_ticket(ticket)

        logger.debug("Ticket %d reported by %s", ticket_id, params.reported_by or "<anonymous>")
        return ticket

    def change_status(self, ticket_id: int, user: User, timestamp: str) -> Optional[Ticket]:
        """
        Move an assigned ticket one step forward.

        Returns None when nothing moved (missing ticket, OPEN or CLOSED).
        """
        ticket = self.store.find_ticket(ticket_id)
        if ticket is None:
            return None

        self._require_assignee(ticket, user)

        current = ticket.status
        target = current.next
        if target is None:
            return None

        ticket.push_status(current)
        ticket.status = target
        ticket.add_action(TicketAction.status_changed(current, target, user.username, timestamp))

        if target == TicketStatus.RESOLVED:
            ticket.solved_at = timestamp
        elif target == TicketStatus.CLOSED:
            self.milestones.record_ticket_closed(ticket.id, timestamp)

        return ticket

    def undo_change_status(self, ticket_id: int, user: User, timestamp: str) -> Optional[Ticket]:
        """Revert the most recent status change, if any."""
        ticket = self.store.find_ticket(ticket_id)
        if ticket is None:
            return None

        self._require_assignee(ticket, user)

        previous = ticket.pop_status()
        if previous is None:
            return None

        current = ticket.status
        ticket.status = previous
        ticket.add_action(TicketAction.status_changed(current, previous, user.username, timestamp))

        if current == TicketStatus.CLOSED:
            self.milestones.record_ticket_reopened(ticket.id)

        return ticket

    # =========================================================================
    # Listings
    # =========================================================================

    def visible_tickets(self, user: User) -> List[Ticket]:
        """
        Tickets a user may list, by creation date then id.

        Manager: all. Reporter: own reports.
        Developer: OPEN tickets of milestones they belong to.
        """
        if user.role == Role.MANAGER:
            visible = self.store.tickets
        elif user.role == Role.REPORTER:
            visible = [
                t for t in self.store.tickets
                if not t.is_anonymous and t.reported_by == user.username
            ]
        else:
            visible = []
            for ticket in self.store.tickets:
                if ticket.status != TicketStatus.OPEN:
                    continue
                milestone = self.store.milestone_for(ticket.id)
                if milestone is not None and milestone.has_developer(user.username):
                    visible.append(ticket)

        return sorted(visible, key=lambda t: (t.created_at, t.id))

    def assigned_tickets(self, username: str) -> List[Ticket]:
        """Tickets assigned to a developer, highest priority first."""
        assigned = [t for t in self.store.tickets if t.assigned_to == username]
        assigned.sort(key=lambda t: (-t.business_priority.ordinal, t.created_at, t.id))
        return assigned

    def ticket_history(self, username: str) -> List[Ticket]:
        """Tickets the user has acted on, by id."""
        return sorted(
            (t for t in self.store.tickets if t.involves(username)),
            key=lambda t: t.id
        )

    # =========================================================================
    # Private methods
    # =========================================================================

    def _require_assignee(self, ticket: Ticket, user: User) -> None:
        if ticket.assigned_to != user.username:
            raise NotAssigneeError(
                f"Ticket {ticket.id} is not assigned to developer {user.username}."
            )
