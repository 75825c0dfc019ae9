"""
TRACKER Comment Service

Comments on tickets, with single-comment undo.

Who may comment:
- Manager: any non-anonymous ticket
- Developer: tickets assigned to them
- Reporter: tickets they reported, unless CLOSED
"""

import logging
from typing import Optional

from ..errors import (
    AnonymousTicketError,
    ClosedTicketError,
    NotAuthorizedToCommentError,
    TooShortError,
)
from ..models.ticket import Comment, Ticket, TicketStatus
from ..models.user import Role, User
from .store import EntityStore

logger = logging.getLogger(__name__)


class CommentService:
    """
    Adds and removes ticket comments.

    Missing tickets are ignored silently by both operations.
    """

    def __init__(self, store: EntityStore):
        self.store = store

    def add_comment(
        self,
        ticket_id: int,
        user: User,
        content: str,
        timestamp: str
    ) -> Optional[Comment]:
        """
        Append a comment.

        Checks, first failure wins: reporter on CLOSED, anonymous,
        length, developer assignee, reporter ownership.
        """
        ticket = self.store.find_ticket(ticket_id)
        if ticket is None:
            return None

        if user.role == Role.REPORTER and ticket.status == TicketStatus.CLOSED:
            raise ClosedTicketError()

        if ticket.is_anonymous:
            raise AnonymousTicketError()

        minimum = self.store.config.min_comment_length
        if content is None or len(content) < minimum:
            raise TooShortError(minimum)

        self._require_commenter(ticket, user)

        comment = Comment(author=user.username, content=content, created_at=timestamp)
        ticket.add_comment(comment)
        return comment

    def undo_add_comment(self, ticket_id: int, user: User) -> bool:
        """
        Remove the user's most recent comment on the ticket.

        Returns False (and does nothing) when there is none.
        """
        ticket = self.store.find_ticket(ticket_id)
        if ticket is None:
            return False

        if ticket.is_anonymous:
            raise AnonymousTicketError()

        self._require_commenter(ticket, user)

        removed = ticket.undo_last_comment_by(user.username)
        if removed:
            logger.debug("Comment by %s removed from ticket %d", user.username, ticket_id)
        return removed

    def _require_commenter(self, ticket: Ticket, user: User) -> None:
        if user.role == Role.DEVELOPER and ticket.assigned_to != user.username:
            raise NotAuthorizedToCommentError(
                f"Ticket {ticket.id} is not assigned to the developer {user.username}."
            )
        if user.role == Role.REPORTER and ticket.reported_by != user.username:
            raise NotAuthorizedToCommentError(
                f"Reporter {user.username} cannot comment on ticket {ticket.id}."
            )
