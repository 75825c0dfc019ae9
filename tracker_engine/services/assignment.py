"""
TRACKER Assignment Service

Developers self-assign OPEN tickets and may hand them back.

Only the assignee works a ticket: status changes, comments
and de-assignment all require being the current assignee.
"""

import logging

from ..errors import (
    ExpertiseMismatchError,
    MilestoneBlockedError,
    NotAssigneeError,
    NotFoundError,
    NotInProgressError,
    NotMilestoneMemberError,
    NotOpenError,
    SeniorityMismatchError,
    TrackerError,
)
from ..models.ticket import ExpertiseArea, Priority, Ticket, TicketAction, TicketStatus
from ..models.user import SeniorityLevel, User
from .milestone import MilestoneService
from .store import EntityStore

logger = logging.getLogger(__name__)


# Developer areas allowed to take a ticket of the given area, in message order
REQUIRED_EXPERTISE = {
    ExpertiseArea.FRONTEND: (ExpertiseArea.FRONTEND, ExpertiseArea.FULLSTACK, ExpertiseArea.DESIGN),
    ExpertiseArea.BACKEND: (ExpertiseArea.BACKEND, ExpertiseArea.FULLSTACK),
    ExpertiseArea.DEVOPS: (ExpertiseArea.DEVOPS, ExpertiseArea.FULLSTACK),
    ExpertiseArea.DESIGN: (ExpertiseArea.DESIGN, ExpertiseArea.FRONTEND, ExpertiseArea.FULLSTACK),
    ExpertiseArea.DB: (ExpertiseArea.BACKEND, ExpertiseArea.DB, ExpertiseArea.FULLSTACK),
    ExpertiseArea.FULLSTACK: (ExpertiseArea.FULLSTACK,),
}

SENIOR_ONLY_PRIORITIES = {Priority.HIGH, Priority.CRITICAL}


def can_access(developer_area: ExpertiseArea, ticket_area: ExpertiseArea) -> bool:
    """Expertise compatibility matrix lookup."""
    return developer_area in REQUIRED_EXPERTISE[ticket_area]


class AssignmentGuard:
    """
    Eligibility checks shared by assignTicket and search.

    Check order (first failure wins):
    1. Ticket is OPEN
    2. Developer belongs to the ticket's milestone
    3. Milestone is not blocked
    4. Developer expertise covers the ticket area
    5. HIGH/CRITICAL tickets need MID or SENIOR
    """

    def __init__(self, store: EntityStore, milestones: MilestoneService):
        self.store = store
        self.milestones = milestones

    def require_assignable(self, ticket: Ticket, user: User) -> None:
        """Raise the first rule the developer fails for this ticket."""
        if ticket.status != TicketStatus.OPEN:
            raise NotOpenError()

        developer = user.developer
        milestone = self.store.milestone_for(ticket.id)

        if milestone is not None:
            if not milestone.has_developer(user.username):
                raise NotMilestoneMemberError(user.username, milestone.name)

            if self.milestones.is_blocked(milestone):
                raise MilestoneBlockedError(ticket.id, milestone.name)

        if developer is not None and ticket.expertise_area is not None:
            if not can_access(developer.expertise_area, ticket.expertise_area):
                raise ExpertiseMismatchError(
                    user.username,
                    ticket.id,
                    [area.value for area in REQUIRED_EXPERTISE[ticket.expertise_area]],
                    developer.expertise_area.value
                )

        if developer is not None and ticket.business_priority in SENIOR_ONLY_PRIORITIES:
            if developer.seniority == SeniorityLevel.JUNIOR:
                raise SeniorityMismatchError(user.username, ticket.id, developer.seniority.value)

    def can_assign(self, ticket: Ticket, user: User) -> bool:
        try:
            self.require_assignable(ticket, user)
        except TrackerError:
            return False
        return True


class AssignmentService:
    """
    Self-assignment and de-assignment.

    Assign: OPEN -> IN_PROGRESS, logs ASSIGNED + STATUS_CHANGED.
    De-assign: IN_PROGRESS only, back to OPEN, logs DE-ASSIGNED.
    """

    def __init__(self, store: EntityStore, guard: AssignmentGuard):
        self.store = store
        self.guard = guard

    def assign_ticket(self, ticket_id: int, user: User, timestamp: str) -> Ticket:
        ticket = self.store.find_ticket(ticket_id)
        if ticket is None:
            raise NotFoundError(ticket_id)

        self.guard.require_assignable(ticket, user)

        ticket.assigned_to = user.username
        ticket.assigned_at = timestamp
        ticket.status = TicketStatus.IN_PROGRESS
        ticket.add_action(TicketAction.assigned(user.username, timestamp))
        ticket.add_action(TicketAction.status_changed(
            TicketStatus.OPEN, TicketStatus.IN_PROGRESS, user.username, timestamp
        ))

        logger.debug("Ticket %d assigned to %s", ticket_id, user.username)
        return ticket

    def undo_assign_ticket(self, ticket_id: int, user: User, timestamp: str) -> Ticket:
        ticket = self.store.find_ticket(ticket_id)
        if ticket is None:
            raise NotFoundError(ticket_id)

        if ticket.assigned_to != user.username:
            raise NotAssigneeError(
                f"The ticket {ticket_id} is not assigned to {user.username}."
            )

        if ticket.status != TicketStatus.IN_PROGRESS:
            raise NotInProgressError()

        ticket.assigned_to = ""
        ticket.assigned_at = ""
        ticket.status = TicketStatus.OPEN
        ticket.add_action(TicketAction.de_assigned(user.username, timestamp))

        logger.debug("Ticket %d released by %s", ticket_id, user.username)
        return ticket
