"""Tests for due-date priority escalation."""

import pytest

from tracker_engine.models import Priority, Severity, Ticket, TicketType
from tracker_engine.services import EntityStore, MilestoneService, PriorityService


@pytest.fixture
def priority() -> PriorityService:
    store = EntityStore()
    return PriorityService(store, MilestoneService(store))


def _ticket(priority=Priority.LOW, ticket_type=TicketType.BUG, severity=None) -> Ticket:
    return Ticket(id=0, type=ticket_type, title="t", business_priority=priority, severity=severity)


@pytest.mark.parametrize(
    "ticket, days_left, expected",
    [
        (_ticket(), 2, Priority.CRITICAL),
        (_ticket(), 0, Priority.CRITICAL),
        (_ticket(), 3, Priority.HIGH),
        (_ticket(severity=Severity.SEVERE), 3, Priority.CRITICAL),
        (_ticket(Priority.CRITICAL, TicketType.FEATURE_REQUEST), 3, Priority.CRITICAL),
        (_ticket(Priority.MEDIUM, TicketType.UI_FEEDBACK), 4, Priority.MEDIUM),
    ],
)
def test_escalated_priority(priority, ticket, days_left, expected) -> None:
    assert priority.escalated_priority(ticket, days_left) == expected


def _priorities(result):
    return {t["id"]: t["businessPriority"] for t in result["tickets"]}


def test_view_tickets_escalates_milestone_tickets(run, report, milestone) -> None:
    report("In milestone", priority="LOW")
    report("Outside milestone", priority="LOW")
    milestone("M1", tickets=[0], devs=["dev_ana"], due="2025-01-25")

    assert _priorities(run("viewTickets", "mara", "2025-01-22")) == {0: "LOW", 1: "LOW"}
    assert _priorities(run("viewTickets", "mara", "2025-01-23")) == {0: "HIGH", 1: "LOW"}
    assert _priorities(run("viewTickets", "mara", "2025-01-24")) == {0: "CRITICAL", 1: "LOW"}


def test_escalation_only_happens_on_view_tickets(engine, run, report, milestone) -> None:
    report("In milestone", priority="LOW")
    milestone("M1", tickets=[0], devs=["dev_ana"], due="2025-01-25")

    run("viewMilestones", "mara", "2025-01-24")
    run("search", "mara", "2025-01-24", filters={"searchType": "TICKET"})

    assert engine.store.find_ticket(0).business_priority == Priority.LOW


def test_completed_milestone_not_escalated(engine, run, report, milestone) -> None:
    report("In milestone", priority="LOW")
    milestone("M1", tickets=[0], devs=["dev_ana"], due="2025-01-25")
    run("assignTicket", "dev_ana", "2025-01-21", ticketID=0)
    run("changeStatus", "dev_ana", "2025-01-21", ticketID=0)
    run("changeStatus", "dev_ana", "2025-01-21", ticketID=0)

    run("viewTickets", "mara", "2025-01-24")

    assert engine.store.find_ticket(0).business_priority == Priority.LOW


def test_escalation_is_idempotent(engine, report, milestone) -> None:
    report("In milestone", priority="LOW")
    milestone("M1", tickets=[0], devs=["dev_ana"], due="2025-01-25")
    service = PriorityService(engine.store, MilestoneService(engine.store))

    assert service.escalate_all("2025-01-23") == 1
    assert service.escalate_all("2025-01-23") == 0
    assert engine.store.find_ticket(0).business_priority == Priority.HIGH
