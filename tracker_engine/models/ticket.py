"""
TRACKER Ticket Model

Tickets, their comments and action log, and milestones.

Core principles:
1. Ticket ids are allocated by the store, sequentially from 0
2. Status moves forward only; undo walks back one step at a time
3. Comments and actions are append-only (undo-comment is the one removal)
4. Milestone membership is fixed at creation
"""

from enum import Enum
from typing import Any, Dict, Iterable, List, Optional

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# ENUMS
# =============================================================================

class TicketType(str, Enum):
    BUG = "BUG"
    FEATURE_REQUEST = "FEATURE_REQUEST"
    UI_FEEDBACK = "UI_FEEDBACK"


class TicketStatus(str, Enum):
    OPEN = "OPEN"
    IN_PROGRESS = "IN_PROGRESS"
    RESOLVED = "RESOLVED"
    CLOSED = "CLOSED"

    @property
    def next(self) -> Optional["TicketStatus"]:
        """Forward transition driven by changeStatus, or None."""
        return _FORWARD.get(self)


_FORWARD = {
    TicketStatus.IN_PROGRESS: TicketStatus.RESOLVED,
    TicketStatus.RESOLVED: TicketStatus.CLOSED,
}


class Priority(str, Enum):
    LOW = "LOW"              # Risk weight: 1
    MEDIUM = "MEDIUM"        # Risk weight: 2
    HIGH = "HIGH"            # Risk weight: 3
    CRITICAL = "CRITICAL"    # Risk weight: 4

    @property
    def ordinal(self) -> int:
        return _PRIORITY_ORDER.index(self)

    def at_least(self, other: "Priority") -> "Priority":
        """Return the higher of the two priorities."""
        return self if self.ordinal >= other.ordinal else other


_PRIORITY_ORDER = [Priority.LOW, Priority.MEDIUM, Priority.HIGH, Priority.CRITICAL]


class ExpertiseArea(str, Enum):
    FRONTEND = "FRONTEND"
    BACKEND = "BACKEND"
    DEVOPS = "DEVOPS"
    DESIGN = "DESIGN"
    DB = "DB"
    FULLSTACK = "FULLSTACK"


class Severity(str, Enum):
    MINOR = "MINOR"
    MODERATE = "MODERATE"
    SEVERE = "SEVERE"


class Frequency(str, Enum):
    RARE = "RARE"
    OCCASIONAL = "OCCASIONAL"
    FREQUENT = "FREQUENT"
    ALWAYS = "ALWAYS"


class BusinessValue(str, Enum):
    S = "S"
    M = "M"
    L = "L"
    XL = "XL"


class CustomerDemand(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    VERY_HIGH = "VERY_HIGH"


class ActionType(str, Enum):
    ADDED_TO_MILESTONE = "ADDED_TO_MILESTONE"
    ASSIGNED = "ASSIGNED"
    DE_ASSIGNED = "DE-ASSIGNED"
    STATUS_CHANGED = "STATUS_CHANGED"


# =============================================================================
# CORE MODELS
# =============================================================================

class Comment(BaseModel):
    """A comment left on a ticket."""
    model_config = ConfigDict(populate_by_name=True)

    author: str
    content: str
    created_at: str = Field(..., alias="createdAt")

    def to_output(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)


class TicketAction(BaseModel):
    """
    One entry of a ticket's action log.

    Kind-specific payload:
    - ADDED_TO_MILESTONE: milestone
    - STATUS_CHANGED: from_status / to_status
    """
    model_config = ConfigDict(populate_by_name=True)

    action: ActionType
    by: str
    timestamp: str

    milestone: Optional[str] = None
    from_status: Optional[TicketStatus] = Field(None, alias="from")
    to_status: Optional[TicketStatus] = Field(None, alias="to")

    @classmethod
    def added_to_milestone(cls, milestone: str, by: str, timestamp: str) -> "TicketAction":
        return cls(action=ActionType.ADDED_TO_MILESTONE, milestone=milestone, by=by, timestamp=timestamp)

    @classmethod
    def assigned(cls, by: str, timestamp: str) -> "TicketAction":
        return cls(action=ActionType.ASSIGNED, by=by, timestamp=timestamp)

    @classmethod
    def de_assigned(cls, by: str, timestamp: str) -> "TicketAction":
        return cls(action=ActionType.DE_ASSIGNED, by=by, timestamp=timestamp)

    @classmethod
    def status_changed(
        cls,
        from_status: TicketStatus,
        to_status: TicketStatus,
        by: str,
        timestamp: str
    ) -> "TicketAction":
        return cls(
            action=ActionType.STATUS_CHANGED,
            from_status=from_status,
            to_status=to_status,
            by=by,
            timestamp=timestamp
        )

    def to_output(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {}
        if self.milestone is not None:
            out["milestone"] = self.milestone
        if self.from_status is not None:
            out["from"] = self.from_status.value
        if self.to_status is not None:
            out["to"] = self.to_status.value
        out["by"] = self.by
        out["timestamp"] = self.timestamp
        out["action"] = self.action.value
        return out


class Ticket(BaseModel):
    """
    The core ticket entity.

    reported_by == "" marks an anonymous ticket.
    status_history is the undo stack for changeStatus.
    """
    model_config = ConfigDict(populate_by_name=True)

    id: int
    type: TicketType
    title: str
    description: Optional[str] = None
    business_priority: Priority = Field(Priority.LOW, alias="businessPriority")
    status: TicketStatus = TicketStatus.OPEN
    expertise_area: Optional[ExpertiseArea] = Field(None, alias="expertiseArea")

    # People
    reported_by: str = Field("", alias="reportedBy")
    assigned_to: str = Field("", alias="assignedTo")

    # Timestamps (ISO dates, "" when unset)
    created_at: str = Field("", alias="createdAt")
    assigned_at: str = Field("", alias="assignedAt")
    solved_at: str = Field("", alias="solvedAt")

    # BUG
    severity: Optional[Severity] = None
    frequency: Optional[Frequency] = None

    # FEATURE_REQUEST / UI_FEEDBACK
    business_value: Optional[BusinessValue] = Field(None, alias="businessValue")
    customer_demand: Optional[CustomerDemand] = Field(None, alias="customerDemand")
    usability_score: Optional[int] = Field(None, alias="usabilityScore")

    comments: List[Comment] = Field(default_factory=list)
    actions: List[TicketAction] = Field(default_factory=list)
    status_history: List[TicketStatus] = Field(default_factory=list)

    @property
    def is_anonymous(self) -> bool:
        return not self.reported_by

    def add_action(self, action: TicketAction) -> None:
        self.actions.append(action)

    def add_comment(self, comment: Comment) -> None:
        self.comments.append(comment)

    def undo_last_comment_by(self, author: str) -> bool:
        """
        Remove the most recent comment written by `author`.

        Comments by other authors after it are left alone.
        Returns False when the author has no comment on this ticket.
        """
        for index in range(len(self.comments) - 1, -1, -1):
            if self.comments[index].author == author:
                del self.comments[index]
                return True
        return False

    def push_status(self, status: TicketStatus) -> None:
        self.status_history.append(status)

    def pop_status(self) -> Optional[TicketStatus]:
        if not self.status_history:
            return None
        return self.status_history.pop()

    def first_transition_to(self, statuses: Iterable[TicketStatus]) -> Optional[str]:
        """Timestamp of the first STATUS_CHANGED entry into any of `statuses`."""
        targets = set(statuses)
        for action in self.actions:
            if action.action != ActionType.STATUS_CHANGED:
                continue
            if action.to_status in targets:
                return action.timestamp
        return None

    def involves(self, username: str) -> bool:
        """True if `username` authored any action on this ticket."""
        return any(action.by == username for action in self.actions)

    def to_output(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type.value,
            "title": self.title,
            "businessPriority": self.business_priority.value,
            "status": self.status.value,
            "createdAt": self.created_at,
            "assignedAt": self.assigned_at,
            "solvedAt": self.solved_at,
            "assignedTo": self.assigned_to,
            "reportedBy": self.reported_by,
            "comments": [c.to_output() for c in self.comments],
        }

    def to_history(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "status": self.status.value,
            "actions": [a.to_output() for a in self.actions],
            "comments": [c.to_output() for c in self.comments],
        }


class Milestone(BaseModel):
    """
    A named group of tickets with a due date.

    Tickets and assigned developers are fixed at creation.
    Active/blocked state is derived by the MilestoneService;
    only the two latches below are stored.
    """
    model_config = ConfigDict(populate_by_name=True)

    name: str
    due_date: str = Field(..., alias="dueDate")
    created_at: str = Field(..., alias="createdAt")
    created_by: str = Field(..., alias="createdBy")

    tickets: List[int] = Field(default_factory=list)
    assigned_devs: List[str] = Field(default_factory=list, alias="assignedDevs")
    blocking_for: List[str] = Field(default_factory=list, alias="blockingFor")

    # Date the last member ticket was closed ("" while active)
    completed_at: str = Field("", alias="completedAt")

    # One-way latch: set the first time the milestone is seen blocked
    was_ever_blocked: bool = False

    def has_developer(self, username: str) -> bool:
        return username in self.assigned_devs

    def blocks(self, name: str) -> bool:
        return name in self.blocking_for
