"""
TRACKER Command Dispatcher

One entry point for every command record:

    record -> envelope -> user lookup -> route -> role gate
           -> typed payload -> handler -> result (or nothing)

Handlers return a payload dict to emit a result, or None to emit nothing.
A TrackerError raised anywhere below becomes an `error` result here.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Tuple

from pydantic import ValidationError

from ..errors import ForbiddenError, InvalidCommandError, TrackerError, UnknownUserError
from ..models import command as cmd
from ..models.command import CommandEnvelope, command_adapter
from ..models.user import Role, User
from .assignment import AssignmentGuard, AssignmentService
from .comments import CommentService
from .lifecycle import TicketLifecycleService
from .milestone import MilestoneService
from .notifications import NotificationService
from .priority import PriorityService
from .reports import ReportService
from .search import SearchService
from .store import EntityStore

logger = logging.getLogger(__name__)

Payload = Optional[Dict[str, Any]]

REPORTER = Role.REPORTER
DEVELOPER = Role.DEVELOPER
MANAGER = Role.MANAGER


@dataclass(frozen=True)
class CommandRoute:
    """Roles allowed to run a command, in the order error messages list them."""
    roles: Tuple[Role, ...]
    handler: Callable[[Any, User], Payload]


class CommandDispatcher:
    """
    Routes command records to the services.

    Check order (first failure wins):
    1. Acting user exists
    2. Command is registered (unregistered commands produce nothing)
    3. User role is allowed
    4. Payload parses
    """

    def __init__(self, store: EntityStore):
        self.store = store

        self.milestones = MilestoneService(store)
        self.priority = PriorityService(store, self.milestones)
        self.guard = AssignmentGuard(store, self.milestones)
        self.assignment = AssignmentService(store, self.guard)
        self.lifecycle = TicketLifecycleService(store, self.milestones)
        self.comments = CommentService(store)
        self.search = SearchService(store, self.guard)
        self.notifications = NotificationService(store, self.milestones)
        self.reports = ReportService(store)

        everyone = (REPORTER, DEVELOPER, MANAGER)
        self.routes: Dict[str, CommandRoute] = {
            "reportTicket": CommandRoute((REPORTER,), self._report_ticket),
            "viewTickets": CommandRoute(everyone, self._view_tickets),
            "startTestingPhase": CommandRoute((MANAGER,), self._start_testing_phase),
            "lostInvestors": CommandRoute((MANAGER,), self._lost_investors),
            "createMilestone": CommandRoute((MANAGER,), self._create_milestone),
            "viewMilestones": CommandRoute((MANAGER, DEVELOPER), self._view_milestones),
            "assignTicket": CommandRoute((DEVELOPER,), self._assign_ticket),
            "undoAssignTicket": CommandRoute((DEVELOPER,), self._undo_assign_ticket),
            "viewAssignedTickets": CommandRoute((DEVELOPER,), self._view_assigned_tickets),
            "addComment": CommandRoute(everyone, self._add_comment),
            "undoAddComment": CommandRoute(everyone, self._undo_add_comment),
            "changeStatus": CommandRoute((DEVELOPER,), self._change_status),
            "undoChangeStatus": CommandRoute((DEVELOPER,), self._undo_change_status),
            "viewTicketHistory": CommandRoute((DEVELOPER,), self._view_ticket_history),
            "search": CommandRoute((MANAGER, DEVELOPER, REPORTER), self._search),
            "viewNotifications": CommandRoute((DEVELOPER, MANAGER, REPORTER), self._view_notifications),
            "generateCustomerImpactReport": CommandRoute((MANAGER,), self._customer_impact),
            "generateTicketRiskReport": CommandRoute((MANAGER,), self._ticket_risk),
            "generateResolutionEfficiencyReport": CommandRoute((MANAGER,), self._resolution_efficiency),
            "appStabilityReport": CommandRoute((MANAGER,), self._app_stability),
            "generatePerformanceReport": CommandRoute((MANAGER,), self._performance),
        }

    def dispatch(self, record: Dict[str, Any]) -> Payload:
        """
        Execute one command record.

        Returns the result object, or None when the command emits nothing.
        """
        try:
            envelope = CommandEnvelope.model_validate(record)
        except ValidationError:
            logger.warning("Skipping record without command/username/timestamp: %r", record)
            return None

        logger.debug("Dispatching %s by %s at %s", envelope.command, envelope.username, envelope.timestamp)

        try:
            payload = self._run(envelope, record)
        except TrackerError as e:
            logger.debug("%s rejected: %s", envelope.command, e.message)
            return self._result(envelope, {"error": e.message})

        if payload is None:
            return None
        return self._result(envelope, payload)

    # =========================================================================
    # Private methods
    # =========================================================================

    def _run(self, envelope: CommandEnvelope, record: Dict[str, Any]) -> Payload:
        user = self.store.get_user(envelope.username)
        if user is None:
            raise UnknownUserError(envelope.username)

        route = self.routes.get(envelope.command)
        if route is None:
            logger.debug("Ignoring unregistered command %s", envelope.command)
            return None

        if user.role not in route.roles:
            raise ForbiddenError([r.value for r in route.roles], user.role.value)

        try:
            parsed = command_adapter.validate_python(record)
        except ValidationError as e:
            logger.warning("Invalid %s payload: %s", envelope.command, e)
            raise InvalidCommandError(envelope.command)

        return route.handler(parsed, user)

    def _result(self, envelope: CommandEnvelope, payload: Dict[str, Any]) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            "command": envelope.command,
            "username": envelope.username,
            "timestamp": envelope.timestamp,
        }
        result.update(payload)
        return result

    # =========================================================================
    # Handlers
    # =========================================================================

    def _report_ticket(self, command: cmd.ReportTicket, user: User) -> Payload:
        self.lifecycle.report_ticket(command.params, command.timestamp)
        return None

    def _view_tickets(self, command: cmd.ViewTickets, user: User) -> Payload:
        self.priority.escalate_all(command.timestamp)
        tickets = self.lifecycle.visible_tickets(user)
        return {"tickets": [t.to_output() for t in tickets]}

    def _start_testing_phase(self, command: cmd.StartTestingPhase, user: User) -> Payload:
        self.store.start_testing_phase(command.timestamp)
        return None

    def _lost_investors(self, command: cmd.LostInvestors, user: User) -> Payload:
        self.store.stop()
        return None

    def _create_milestone(self, command: cmd.CreateMilestone, user: User) -> Payload:
        self.milestones.create_milestone(
            name=command.name,
            due_date=command.due_date,
            created_by=user.username,
            timestamp=command.timestamp,
            tickets=command.tickets,
            assigned_devs=command.assigned_devs,
            blocking_for=command.blocking_for,
        )
        return None

    def _view_milestones(self, command: cmd.ViewMilestones, user: User) -> Payload:
        return {"milestones": self.milestones.view_milestones(user.username, user.role, command.timestamp)}

    def _assign_ticket(self, command: cmd.AssignTicket, user: User) -> Payload:
        self.assignment.assign_ticket(command.ticket_id, user, command.timestamp)
        return None

    def _undo_assign_ticket(self, command: cmd.UndoAssignTicket, user: User) -> Payload:
        self.assignment.undo_assign_ticket(command.ticket_id, user, command.timestamp)
        return None

    def _view_assigned_tickets(self, command: cmd.ViewAssignedTickets, user: User) -> Payload:
        tickets = self.lifecycle.assigned_tickets(user.username)
        return {"assignedTickets": [t.to_output() for t in tickets]}

    def _add_comment(self, command: cmd.AddComment, user: User) -> Payload:
        self.comments.add_comment(command.ticket_id, user, command.comment, command.timestamp)
        return None

    def _undo_add_comment(self, command: cmd.UndoAddComment, user: User) -> Payload:
        self.comments.undo_add_comment(command.ticket_id, user)
        return None

    def _change_status(self, command: cmd.ChangeStatus, user: User) -> Payload:
        self.lifecycle.change_status(command.ticket_id, user, command.timestamp)
        return None

    def _undo_change_status(self, command: cmd.UndoChangeStatus, user: User) -> Payload:
        self.lifecycle.undo_change_status(command.ticket_id, user, command.timestamp)
        return None

    def _view_ticket_history(self, command: cmd.ViewTicketHistory, user: User) -> Payload:
        tickets = self.lifecycle.ticket_history(user.username)
        return {"ticketHistory": [t.to_history() for t in tickets]}

    def _search(self, command: cmd.Search, user: User) -> Payload:
        return {
            "searchType": command.filters.search_type,
            "results": self.search.search(user, command.filters),
        }

    def _view_notifications(self, command: cmd.ViewNotifications, user: User) -> Payload:
        return {"notifications": self.notifications.view_notifications(user.username, command.timestamp)}

    def _customer_impact(self, command: cmd.GenerateCustomerImpactReport, user: User) -> Payload:
        return {"report": self.reports.customer_impact()}

    def _ticket_risk(self, command: cmd.GenerateTicketRiskReport, user: User) -> Payload:
        return {"report": self.reports.ticket_risk()}

    def _resolution_efficiency(self, command: cmd.GenerateResolutionEfficiencyReport, user: User) -> Payload:
        return {"report": self.reports.resolution_efficiency()}

    def _app_stability(self, command: cmd.AppStabilityReport, user: User) -> Payload:
        return {"report": self.reports.app_stability()}

    def _performance(self, command: cmd.GeneratePerformanceReport, user: User) -> Payload:
        return {"report": self.reports.performance(user, command.timestamp)}
