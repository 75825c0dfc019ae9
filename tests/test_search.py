"""Tests for ticket and developer search."""

from tracker_engine.services.search import keyword_matches


def _search(run, username, **filters):
    filters.setdefault("searchType", "TICKET")
    return run("search", username, "2025-01-21", filters=filters)


def _ids(result):
    return [row["id"] for row in result["results"]]


def test_keyword_matches_whole_words_only() -> None:
    assert keyword_matches("Crash on Login page", ["login", "page", "crash"]) == ["login", "page", "crash"]
    assert keyword_matches("Logins fail", ["login"]) == []


def test_manager_ticket_search_with_keywords(run, report) -> None:
    report("Login button broken")
    report("Crash on login page")
    report("Logins fail randomly")

    result = _search(run, "mara", keywords=["Login", "crash"])

    assert result["searchType"] == "TICKET"
    assert _ids(result) == [0, 1]
    assert result["results"][1] == {
        "id": 1,
        "type": "BUG",
        "title": "Crash on login page",
        "businessPriority": "MEDIUM",
        "status": "OPEN",
        "createdAt": "2025-01-01",
        "solvedAt": "",
        "reportedBy": "rita",
        "matchingWords": ["Login", "crash"],
    }


def test_rows_omit_matching_words_without_keywords(run, report) -> None:
    report("Login button broken")

    row = _search(run, "mara")["results"][0]

    assert "matchingWords" not in row


def test_search_filters(run, report) -> None:
    report("Crash on save", timestamp="2025-01-01", priority="HIGH")
    report("Export button", timestamp="2025-01-02", ticket_type="FEATURE_REQUEST")
    report("Crash on load", timestamp="2025-01-03", priority="HIGH")

    assert _ids(_search(run, "mara", type="BUG")) == [0, 2]
    assert _ids(_search(run, "mara", businessPriority="HIGH", createdAfter="2025-01-01")) == [2]
    assert _ids(_search(run, "mara", createdAfter="2025-01-03")) == []


def test_search_returns_open_tickets_only(run, report) -> None:
    report("Crash on save")
    report("Crash on load")
    run("assignTicket", "dev_ana", "2025-01-02", ticketID=0)

    assert _ids(_search(run, "mara")) == [1]


def test_reporter_sees_own_tickets(run, report) -> None:
    report("Crash on save")
    report("Crash on load", by="ron")
    report("Anonymous crash", by="")

    assert _ids(_search(run, "ron")) == [1]


def test_developer_sees_own_milestone_tickets(run, report, milestone) -> None:
    report("Crash on save")
    report("Crash on load")
    report("Loose ticket")
    milestone("M1", tickets=[0], devs=["dev_ana"])
    milestone("M2", tickets=[1], devs=["dev_bo"])

    assert _ids(_search(run, "dev_ana")) == [0]


def test_available_for_assignment_uses_eligibility(run, report, milestone) -> None:
    report("Urgent crash", priority="HIGH")
    report("Minor crash", priority="LOW")
    report("Backend crash", priority="LOW", expertiseArea="BACKEND")
    milestone("M1", tickets=[0, 1, 2], devs=["dev_jun"])

    result = _search(run, "dev_jun", availableForAssignment=True)

    assert _ids(result) == [1]


def test_available_for_assignment_excludes_blocked_milestones(run, report, milestone) -> None:
    report("Blocker")
    report("Blocked")
    milestone("M1", tickets=[0], devs=["dev_ana"], blocking_for=["M2"])
    milestone("M2", tickets=[1], devs=["dev_ana"])

    assert _ids(_search(run, "dev_ana", availableForAssignment=True)) == [0]


def test_available_for_assignment_ignored_for_managers(run, report, milestone) -> None:
    report("Crash on save")
    milestone("M1", tickets=[0], devs=["dev_ana"])

    assert _ids(_search(run, "mara", availableForAssignment=True)) == []


def test_developer_search(run) -> None:
    result = run("search", "mara", "2025-01-21", filters={"searchType": "DEVELOPER"})

    assert result["searchType"] == "DEVELOPER"
    assert [row["username"] for row in result["results"]] == ["dev_ana", "dev_bo", "dev_jun"]
    assert result["results"][0] == {
        "username": "dev_ana",
        "expertiseArea": "BACKEND",
        "seniority": "SENIOR",
        "performanceScore": 0.0,
        "hireDate": "2021-03-01",
    }


def test_developer_search_filters(run) -> None:
    by_area = run("search", "mara", "2025-01-21", filters={"searchType": "DEVELOPER", "expertiseArea": "DB"})
    by_level = run("search", "mara", "2025-01-21", filters={"searchType": "DEVELOPER", "seniority": "MID"})

    assert [row["username"] for row in by_area["results"]] == ["dev_jun"]
    assert [row["username"] for row in by_level["results"]] == ["dev_bo"]


def test_unknown_search_type_has_no_results(run) -> None:
    result = run("search", "rita", "2025-01-21", filters={"searchType": "PROJECT"})

    assert result["searchType"] == "PROJECT"
    assert result["results"] == []
