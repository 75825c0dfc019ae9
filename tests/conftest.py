from typing import Any, Callable, Dict, List, Optional

import pytest

from tracker_engine.engine import Engine

ROSTER: List[Dict[str, Any]] = [
    {
        "username": "mara",
        "email": "mara@example.com",
        "role": "MANAGER",
        "subordinates": ["dev_ana", "dev_bo", "dev_jun"],
    },
    {
        "username": "dev_ana",
        "email": "ana@example.com",
        "role": "DEVELOPER",
        "expertiseArea": "BACKEND",
        "seniority": "SENIOR",
        "hireDate": "2021-03-01",
    },
    {
        "username": "dev_bo",
        "email": "bo@example.com",
        "role": "DEVELOPER",
        "expertiseArea": "FRONTEND",
        "seniority": "MID",
        "hireDate": "2022-06-15",
    },
    {
        "username": "dev_jun",
        "email": "jun@example.com",
        "role": "DEVELOPER",
        "expertiseArea": "DB",
        "seniorityLevel": "JUNIOR",
        "hireDate": "2024-09-01",
    },
    {"username": "rita", "email": "rita@example.com", "role": "REPORTER"},
    {"username": "ron", "email": "ron@example.com", "role": "REPORTER"},
]


@pytest.fixture
def roster() -> List[Dict[str, Any]]:
    return [dict(record) for record in ROSTER]


@pytest.fixture
def engine(roster) -> Engine:
    return Engine.from_roster(roster)


@pytest.fixture
def run(engine) -> Callable[..., Optional[Dict[str, Any]]]:
    """Execute one command record built from keyword fields."""

    def _run(command: str, username: str, timestamp: str, **fields: Any) -> Optional[Dict[str, Any]]:
        record = {"command": command, "username": username, "timestamp": timestamp}
        record.update(fields)
        return engine.execute(record)

    return _run


@pytest.fixture
def report(run) -> Callable[..., Optional[Dict[str, Any]]]:
    """Report a ticket as `by` (anonymous when `by` is empty)."""

    def _report(
        title: str,
        timestamp: str = "2025-01-01",
        by: str = "rita",
        ticket_type: str = "BUG",
        priority: str = "MEDIUM",
        **params: Any
    ) -> Optional[Dict[str, Any]]:
        body = {"type": ticket_type, "title": title, "businessPriority": priority, "reportedBy": by}
        body.update(params)
        return run("reportTicket", by or "rita", timestamp, params=body)

    return _report


@pytest.fixture
def milestone(run) -> Callable[..., Optional[Dict[str, Any]]]:
    """Create a milestone as mara, outside the default testing window."""

    def _milestone(
        name: str,
        tickets: List[int],
        devs: List[str],
        due: str = "2025-02-01",
        timestamp: str = "2025-01-20",
        blocking_for: Optional[List[str]] = None
    ) -> Optional[Dict[str, Any]]:
        return run(
            "createMilestone", "mara", timestamp,
            name=name,
            dueDate=due,
            tickets=tickets,
            assignedDevs=devs,
            blockingFor=blocking_for or [],
        )

    return _milestone
