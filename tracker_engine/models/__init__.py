"""
TRACKER Engine Models

Tickets, milestones, users and typed commands.
"""

from .ticket import (
    # Enums
    TicketType,
    TicketStatus,
    Priority,
    ExpertiseArea,
    Severity,
    Frequency,
    BusinessValue,
    CustomerDemand,
    ActionType,

    # Core models
    Comment,
    TicketAction,
    Ticket,
    Milestone,
)
from .user import (
    Role,
    SeniorityLevel,
    DeveloperProfile,
    ManagerProfile,
    User,
)
from .command import (
    CommandEnvelope,
    Command,
    TicketParams,
    SearchFilters,
    command_adapter,
)

__all__ = [
    "TicketType", "TicketStatus", "Priority", "ExpertiseArea", "Severity",
    "Frequency", "BusinessValue", "CustomerDemand", "ActionType",
    "Comment", "TicketAction", "Ticket", "Milestone",
    "Role", "SeniorityLevel", "DeveloperProfile", "ManagerProfile", "User",
    "CommandEnvelope", "Command", "TicketParams", "SearchFilters", "command_adapter",
]
