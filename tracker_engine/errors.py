"""
TRACKER Errors

Every rule violation is raised as a TrackerError subclass and turned into
an `error` result by the dispatcher. The message is what the user sees.
"""

from typing import Iterable


class TrackerError(Exception):
    """Base class for rule violations surfaced as result errors."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class UnknownUserError(TrackerError):
    """Raised when a username is not in the roster."""

    def __init__(self, username: str):
        super().__init__(f"The user {username} does not exist.")
        self.username = username


class ForbiddenError(TrackerError):
    """Raised when the acting user's role may not run the command."""

    def __init__(self, required: Iterable[str], actual: str):
        required = list(required)
        super().__init__(
            "The user does not have permission to execute this command: "
            f"required role {', '.join(required)}; user role {actual}."
        )
        self.required = required
        self.actual = actual


class NotFoundError(TrackerError):
    """Raised when a referenced ticket does not exist."""

    def __init__(self, ticket_id: int):
        super().__init__(f"The ticket {ticket_id} does not exist.")
        self.ticket_id = ticket_id


class InvalidPhaseError(TrackerError):
    """Raised when a command runs in the wrong testing/development phase."""
    pass


class WrongRoleError(TrackerError):
    """Raised when a milestone member exists but is not a developer."""

    def __init__(self, username: str):
        super().__init__(f"The user {username} is not a developer.")
        self.username = username


class AlreadyLinkedError(TrackerError):
    """Raised when a ticket already belongs to another milestone."""

    def __init__(self, ticket_id: int, milestone: str):
        super().__init__(
            f"Tickets {ticket_id} already assigned to milestone {milestone}."
        )
        self.ticket_id = ticket_id
        self.milestone = milestone


class NotOpenError(TrackerError):
    """Raised when assigning a ticket that is not OPEN."""

    def __init__(self):
        super().__init__("Only OPEN tickets can be assigned.")


class NotMilestoneMemberError(TrackerError):
    """Raised when a developer is not assigned to the ticket's milestone."""

    def __init__(self, username: str, milestone: str):
        super().__init__(
            f"Developer {username} is not assigned to milestone {milestone}."
        )


class MilestoneBlockedError(TrackerError):
    """Raised when the ticket's milestone is blocked by an active one."""

    def __init__(self, ticket_id: int, milestone: str):
        super().__init__(
            f"Cannot assign ticket {ticket_id} from blocked milestone {milestone}."
        )


class ExpertiseMismatchError(TrackerError):
    """Raised when the developer's expertise cannot handle the ticket area."""

    def __init__(self, username: str, ticket_id: int, required: Iterable[str], current: str):
        super().__init__(
            f"Developer {username} cannot assign ticket {ticket_id} due to "
            f"expertise area. Required: {', '.join(required)}; Current: {current}."
        )


class SeniorityMismatchError(TrackerError):
    """Raised when a JUNIOR developer takes a HIGH/CRITICAL ticket."""

    def __init__(self, username: str, ticket_id: int, current: str):
        super().__init__(
            f"Developer {username} cannot assign ticket {ticket_id} due to "
            f"seniority level. Required: MID, SENIOR; Current: {current}."
        )


class NotAssigneeError(TrackerError):
    """Raised when someone other than the assignee acts on a ticket."""
    pass


class AnonymousTicketError(TrackerError):
    """Raised on comment operations against anonymous tickets."""

    def __init__(self):
        super().__init__("Comments are not allowed on anonymous tickets.")


class TooShortError(TrackerError):
    """Raised when a comment is below the minimum length."""

    def __init__(self, minimum: int):
        super().__init__(f"Comment must be at least {minimum} characters long.")


class ClosedTicketError(TrackerError):
    """Raised when a reporter comments on a CLOSED ticket."""

    def __init__(self):
        super().__init__("Reporters cannot comment on CLOSED tickets.")


class NotAuthorizedToCommentError(TrackerError):
    """Raised when a developer/reporter comments on someone else's ticket."""
    pass


class InvalidCommandError(TrackerError):
    """Raised when a registered command carries an unusable payload."""

    def __init__(self, command: str):
        super().__init__(f"Invalid parameters for command {command}.")
        self.command = command


class AnonymousReportError(TrackerError):
    """Raised when an anonymous report is not a BUG."""

    def __init__(self):
        super().__init__("Anonymous reports are only allowed for tickets of type BUG.")


class NotInProgressError(TrackerError):
    """Raised when releasing a ticket that is no longer IN_PROGRESS."""

    def __init__(self):
        super().__init__("Only IN_PROGRESS tickets can be de-assigned.")
