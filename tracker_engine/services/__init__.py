"""
TRACKER Engine Services

Business rules over the in-memory entity store.
"""

from .store import EntityStore
from .milestone import MilestoneService
from .priority import PriorityService
from .assignment import AssignmentGuard, AssignmentService, can_access
from .lifecycle import TicketLifecycleService
from .comments import CommentService
from .search import SearchService
from .notifications import NotificationService
from .reports import ReportService, round_half_up
from .dispatch import CommandDispatcher, CommandRoute

__all__ = [
    # State
    "EntityStore",

    # Milestones and due-date escalation
    "MilestoneService", "PriorityService", "NotificationService",

    # Ticket work
    "AssignmentGuard", "AssignmentService", "can_access",
    "TicketLifecycleService", "CommentService", "SearchService",

    # Analytics
    "ReportService", "round_half_up",

    # Routing
    "CommandDispatcher", "CommandRoute",
]
