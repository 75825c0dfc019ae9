"""Tests for reporting tickets, status changes and ticket listings."""

from tracker_engine.models import Priority, TicketStatus


def _ticket_ids(result):
    return [t["id"] for t in result["tickets"]]


def test_report_outside_testing_window_rejected(run, report) -> None:
    run("startTestingPhase", "mara", "2025-01-01")

    assert report("Still inside window", timestamp="2025-01-12") is None
    result = report("Past the window", timestamp="2025-01-13")

    assert result["error"] == "Tickets can only be reported during testing phases."


def test_first_report_opens_testing_window(engine, report) -> None:
    report("First ticket", timestamp="2025-03-10")

    assert engine.store.testing_started_on.isoformat() == "2025-03-10"


def test_anonymous_feature_request_rejected_but_consumes_id(engine, run, report) -> None:
    result = report("Dark mode please", by="", ticket_type="FEATURE_REQUEST")
    report("Crash on save")

    assert result["error"] == "Anonymous reports are only allowed for tickets of type BUG."
    assert _ticket_ids(run("viewTickets", "mara", "2025-01-02")) == [1]


def test_anonymous_bug_forced_to_low(engine, report) -> None:
    report("Crash on save", by="", priority="CRITICAL")

    ticket = engine.store.find_ticket(0)
    assert ticket.is_anonymous
    assert ticket.business_priority == Priority.LOW


def test_view_tickets_by_role(run, report, milestone) -> None:
    report("Rita bug one", timestamp="2025-01-02")
    report("Ron bug", by="ron", timestamp="2025-01-01")
    report("Rita bug two", timestamp="2025-01-03")
    report("Anonymous bug", by="")
    milestone("M1", tickets=[0, 1], devs=["dev_bo"])

    assert _ticket_ids(run("viewTickets", "mara", "2025-01-20")) == [1, 3, 0, 2]
    assert _ticket_ids(run("viewTickets", "rita", "2025-01-20")) == [0, 2]
    assert _ticket_ids(run("viewTickets", "dev_bo", "2025-01-20")) == [1, 0]
    assert _ticket_ids(run("viewTickets", "dev_ana", "2025-01-20")) == []


def test_view_tickets_output_shape(run, report) -> None:
    report("Crash on save")

    ticket = run("viewTickets", "mara", "2025-01-02")["tickets"][0]

    assert ticket == {
        "id": 0,
        "type": "BUG",
        "title": "Crash on save",
        "businessPriority": "MEDIUM",
        "status": "OPEN",
        "createdAt": "2025-01-01",
        "assignedAt": "",
        "solvedAt": "",
        "assignedTo": "",
        "reportedBy": "rita",
        "comments": [],
    }


def test_status_walks_forward_then_stops(engine, run, report) -> None:
    report("Crash on save")
    run("assignTicket", "dev_ana", "2025-01-02", ticketID=0)

    assert run("changeStatus", "dev_ana", "2025-01-03", ticketID=0) is None
    ticket = engine.store.find_ticket(0)
    assert ticket.status == TicketStatus.RESOLVED
    assert ticket.solved_at == "2025-01-03"

    run("changeStatus", "dev_ana", "2025-01-04", ticketID=0)
    assert ticket.status == TicketStatus.CLOSED

    run("changeStatus", "dev_ana", "2025-01-05", ticketID=0)
    assert ticket.status == TicketStatus.CLOSED
    assert len(ticket.actions) == 4


def test_undo_change_status_steps_back_once(engine, run, report) -> None:
    report("Crash on save")
    run("assignTicket", "dev_ana", "2025-01-02", ticketID=0)
    run("changeStatus", "dev_ana", "2025-01-03", ticketID=0)
    run("changeStatus", "dev_ana", "2025-01-04", ticketID=0)

    run("undoChangeStatus", "dev_ana", "2025-01-05", ticketID=0)

    ticket = engine.store.find_ticket(0)
    assert ticket.status == TicketStatus.RESOLVED
    assert ticket.actions[-1].to_output() == {
        "from": "CLOSED",
        "to": "RESOLVED",
        "by": "dev_ana",
        "timestamp": "2025-01-05",
        "action": "STATUS_CHANGED",
    }


def test_undo_change_status_with_empty_history_is_noop(engine, run, report) -> None:
    report("Crash on save")
    run("assignTicket", "dev_ana", "2025-01-02", ticketID=0)

    assert run("undoChangeStatus", "dev_ana", "2025-01-03", ticketID=0) is None
    assert engine.store.find_ticket(0).status == TicketStatus.IN_PROGRESS


def test_change_status_requires_assignee(run, report) -> None:
    report("Crash on save")
    run("assignTicket", "dev_ana", "2025-01-02", ticketID=0)

    result = run("changeStatus", "dev_bo", "2025-01-03", ticketID=0)
    undo = run("undoChangeStatus", "dev_bo", "2025-01-03", ticketID=0)

    assert result["error"] == "Ticket 0 is not assigned to developer dev_bo."
    assert undo["error"] == "Ticket 0 is not assigned to developer dev_bo."


def test_change_status_on_open_ticket_reports_non_assignee(run, report) -> None:
    report("Crash on save")

    result = run("changeStatus", "dev_ana", "2025-01-02", ticketID=0)

    assert result["error"] == "Ticket 0 is not assigned to developer dev_ana."


def test_status_commands_ignore_missing_ticket(run) -> None:
    assert run("changeStatus", "dev_ana", "2025-01-02", ticketID=42) is None
    assert run("undoChangeStatus", "dev_ana", "2025-01-02", ticketID=42) is None


def test_view_assigned_tickets_orders_by_priority(run, report) -> None:
    report("Low first", priority="LOW", timestamp="2025-01-01")
    report("High later", priority="HIGH", timestamp="2025-01-02")
    report("Low later", priority="LOW", timestamp="2025-01-03")
    for ticket_id in (2, 0, 1):
        run("assignTicket", "dev_ana", "2025-01-04", ticketID=ticket_id)

    result = run("viewAssignedTickets", "dev_ana", "2025-01-05")

    assert [t["id"] for t in result["assignedTickets"]] == [1, 0, 2]
    assert result["assignedTickets"][0]["status"] == "IN_PROGRESS"
    assert result["assignedTickets"][0]["assignedAt"] == "2025-01-04"


def test_view_ticket_history_lists_touched_tickets(run, report) -> None:
    report("Crash on save")
    report("Crash on load")
    run("assignTicket", "dev_ana", "2025-01-02", ticketID=1)
    run("undoAssignTicket", "dev_ana", "2025-01-03", ticketID=1)

    result = run("viewTicketHistory", "dev_ana", "2025-01-04")

    assert result["ticketHistory"] == [{
        "id": 1,
        "title": "Crash on load",
        "status": "OPEN",
        "actions": [
            {"by": "dev_ana", "timestamp": "2025-01-02", "action": "ASSIGNED"},
            {
                "from": "OPEN",
                "to": "IN_PROGRESS",
                "by": "dev_ana",
                "timestamp": "2025-01-02",
                "action": "STATUS_CHANGED",
            },
            {"by": "dev_ana", "timestamp": "2025-01-03", "action": "DE-ASSIGNED"},
        ],
        "comments": [],
    }]
