"""Tests for milestone alerts raised through viewNotifications."""

from tracker_engine.models import Priority


def test_due_tomorrow_alert_fires_once(engine, run, report, milestone) -> None:
    report("First", priority="LOW")
    report("Second", priority="MEDIUM")
    milestone("M1", tickets=[0, 1], devs=["dev_ana", "dev_bo"], due="2025-01-25")

    first = run("viewNotifications", "dev_ana", "2025-01-26")
    again = run("viewNotifications", "dev_ana", "2025-01-26")
    other = run("viewNotifications", "dev_bo", "2025-01-26")

    alert = "Milestone M1 is due tomorrow. All unresolved tickets are now CRITICAL."
    assert first["notifications"] == [
        "New milestone M1 has been created with due date 2025-01-25.",
        alert,
    ]
    assert again["notifications"] == []
    assert other["notifications"][-1] == alert
    assert other["notifications"].count(alert) == 1
    assert engine.store.find_ticket(0).business_priority == Priority.CRITICAL
    assert engine.store.find_ticket(1).business_priority == Priority.CRITICAL


def test_due_tomorrow_leaves_closed_tickets_alone(engine, run, report, milestone) -> None:
    report("Done already", priority="LOW")
    report("Still open", priority="LOW")
    milestone("M1", tickets=[0, 1], devs=["dev_ana"], due="2025-01-25")
    run("assignTicket", "dev_ana", "2025-01-21", ticketID=0)
    run("changeStatus", "dev_ana", "2025-01-22", ticketID=0)
    run("changeStatus", "dev_ana", "2025-01-23", ticketID=0)

    run("viewNotifications", "mara", "2025-01-26")

    assert engine.store.find_ticket(0).business_priority == Priority.LOW
    assert engine.store.find_ticket(1).business_priority == Priority.CRITICAL


def test_no_alert_before_due(run, report, milestone) -> None:
    report("First")
    milestone("M1", tickets=[0], devs=["dev_ana"], due="2025-01-25")
    run("viewNotifications", "dev_ana", "2025-01-21")

    result = run("viewNotifications", "dev_ana", "2025-01-24")

    assert result["notifications"] == []


def test_unblocked_after_due_alert(engine, run, report, milestone) -> None:
    report("Blocker work", priority="LOW")
    report("Blocked work", priority="LOW")
    milestone("M1", tickets=[0], devs=["dev_ana"], blocking_for=["M2"], due="2025-03-01")
    milestone("M2", tickets=[1], devs=["dev_bo"], due="2025-01-25")

    seen_blocked = run("viewNotifications", "dev_bo", "2025-01-21")
    assert seen_blocked["notifications"] == [
        "New milestone M2 has been created with due date 2025-01-25."
    ]
    assert engine.store.get_milestone("M2").was_ever_blocked

    run("assignTicket", "dev_ana", "2025-01-22", ticketID=0)
    run("changeStatus", "dev_ana", "2025-01-23", ticketID=0)
    run("changeStatus", "dev_ana", "2025-01-24", ticketID=0)

    result = run("viewNotifications", "dev_bo", "2025-01-28")

    assert result["notifications"] == [
        "Milestone M2 was unblocked after due date. All active tickets are now CRITICAL."
    ]
    assert engine.store.find_ticket(1).business_priority == Priority.CRITICAL


def test_never_blocked_milestone_gets_no_unblock_alert(run, report, milestone) -> None:
    report("First")
    milestone("M1", tickets=[0], devs=["dev_ana"], due="2025-01-25")
    run("viewNotifications", "dev_ana", "2025-01-21")

    result = run("viewNotifications", "dev_ana", "2025-01-28")

    assert result["notifications"] == []
