"""
TRACKER Search Service

Two search modes selected by `filters.searchType`:
- TICKET: OPEN tickets visible to the requester, narrowed by filters
- DEVELOPER: roster developers by expertise area and seniority
"""

import re
from typing import Any, Dict, List, Optional

from ..models.command import SearchFilters
from ..models.ticket import Ticket, TicketStatus
from ..models.user import Role, User
from .assignment import AssignmentGuard
from .store import EntityStore


def keyword_matches(title: str, keywords: List[str]) -> List[str]:
    """Keywords found as whole words in `title`, ignoring case."""
    lowered = title.lower()
    return [
        kw for kw in keywords
        if re.search(r"\b" + re.escape(kw.lower()) + r"\b", lowered)
    ]


class SearchService:
    """
    Ticket and developer search.

    Ticket visibility follows viewTickets, except that developers
    see OPEN tickets of their milestones whether assigned or not
    and everyone is limited to OPEN tickets.
    """

    TICKET = "TICKET"
    DEVELOPER = "DEVELOPER"

    def __init__(self, store: EntityStore, guard: AssignmentGuard):
        self.store = store
        self.guard = guard

    def search(self, user: User, filters: SearchFilters) -> List[Dict[str, Any]]:
        """Run the search `filters.search_type` names; unknown types find nothing."""
        if filters.search_type == self.TICKET:
            return self.search_tickets(user, filters)
        if filters.search_type == self.DEVELOPER:
            return self.search_developers(filters)
        return []

    def search_tickets(self, user: User, filters: SearchFilters) -> List[Dict[str, Any]]:
        rows = []
        for ticket in sorted(self.store.tickets, key=lambda t: t.id):
            if not self._visible(ticket, user):
                continue
            if ticket.status != TicketStatus.OPEN:
                continue
            if filters.available_for_assignment and not self._available(ticket, user):
                continue

            if filters.type is not None and ticket.type.value != filters.type:
                continue
            if (filters.business_priority is not None
                    and ticket.business_priority.value != filters.business_priority):
                continue
            if filters.created_after is not None and ticket.created_at <= filters.created_after:
                continue

            matching: Optional[List[str]] = None
            if filters.keywords:
                matching = keyword_matches(ticket.title, filters.keywords)
                if not matching:
                    continue

            rows.append(self._ticket_row(ticket, matching))
        return rows

    def search_developers(self, filters: SearchFilters) -> List[Dict[str, Any]]:
        rows = []
        for user in sorted(self.store.developers(), key=lambda u: u.username):
            profile = user.developer
            if profile is None:
                continue
            if filters.expertise_area is not None and profile.expertise_area.value != filters.expertise_area:
                continue
            if filters.seniority is not None and profile.seniority.value != filters.seniority:
                continue
            rows.append({
                "username": user.username,
                "expertiseArea": profile.expertise_area.value,
                "seniority": profile.seniority.value,
                "performanceScore": 0.0,
                "hireDate": profile.hire_date,
            })
        return rows

    # =========================================================================
    # Private methods
    # =========================================================================

    def _visible(self, ticket: Ticket, user: User) -> bool:
        if user.role == Role.MANAGER:
            return True
        if user.role == Role.DEVELOPER:
            milestone = self.store.milestone_for(ticket.id)
            return milestone is not None and milestone.has_developer(user.username)
        return ticket.reported_by == user.username

    def _available(self, ticket: Ticket, user: User) -> bool:
        """Unassigned milestone ticket the developer could take right now."""
        if user.role != Role.DEVELOPER or ticket.assigned_to:
            return False
        if self.store.milestone_for(ticket.id) is None:
            return False
        return self.guard.can_assign(ticket, user)

    def _ticket_row(self, ticket: Ticket, matching: Optional[List[str]]) -> Dict[str, Any]:
        row: Dict[str, Any] = {
            "id": ticket.id,
            "type": ticket.type.value,
            "title": ticket.title,
            "businessPriority": ticket.business_priority.value,
            "status": ticket.status.value,
            "createdAt": ticket.created_at,
            "solvedAt": "",
            "reportedBy": ticket.reported_by,
        }
        if matching is not None:
            row["matchingWords"] = matching
        return row
