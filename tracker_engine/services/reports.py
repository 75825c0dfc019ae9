"""
TRACKER Report Service

Five stateless aggregations over the current ticket set:
customer impact, ticket risk, resolution efficiency,
app stability and developer performance.

Scoring constants are calibrated tables, kept as-is.
All rounding is half-up to 2 decimals.
"""

import math
from typing import Any, Callable, Dict, List

from ..models.ticket import (
    BusinessValue,
    CustomerDemand,
    Frequency,
    Priority,
    Severity,
    Ticket,
    TicketStatus,
    TicketType,
)
from ..models.user import SeniorityLevel, User
from .calendar import days_between, previous_month_prefix
from .store import EntityStore


def round_half_up(value: float) -> float:
    """Round to 2 decimals, halves away from zero for positive values."""
    return math.floor(value * 100.0 + 0.5) / 100.0


class ReportService:
    """
    Manager analytics.

    BUG impact:       base(priority) × frequency × severity / √3
    FEATURE impact:   value × demand
    UI impact:        value × (11 − usability) / 10 × (2.5 + 1.25 × priority ordinal)
    UI stability:     (8 + 7 × value rank) × usability / 10 × risk weight

    Example:
    CRITICAL (30) × ALWAYS (1.5) × SEVERE (2.0) / √3 = 51.96
    """

    PRIORITY_BASE = {
        Priority.CRITICAL: 30.0,
        Priority.HIGH: 20.0,
        Priority.MEDIUM: 10.0,
        Priority.LOW: 5.0,
    }

    FREQUENCY_MULTIPLIER = {
        Frequency.ALWAYS: 1.5,
        Frequency.FREQUENT: 1.2,
        Frequency.RARE: 0.8,
    }

    SEVERITY_MULTIPLIER = {
        Severity.SEVERE: 2.0,
        Severity.MODERATE: 1.299,
        Severity.MINOR: 1.0,
    }

    FEATURE_VALUE = {
        BusinessValue.XL: 20.0,
        BusinessValue.L: 15.0,
        BusinessValue.M: 10.0,
        BusinessValue.S: 5.0,
    }

    CUSTOMER_DEMAND = {
        CustomerDemand.HIGH: 1.0,
        CustomerDemand.MEDIUM: 0.75,
    }

    UI_VALUE = {
        BusinessValue.XL: 20.0,
        BusinessValue.L: 16.0,
        BusinessValue.M: 14.0,
        BusinessValue.S: 10.0,
    }

    VALUE_RANK = {
        BusinessValue.S: 0,
        BusinessValue.M: 1,
        BusinessValue.L: 2,
        BusinessValue.XL: 3,
    }

    RISK_WEIGHT = {
        Priority.LOW: 1.0,
        Priority.MEDIUM: 2.0,
        Priority.HIGH: 3.0,
        Priority.CRITICAL: 4.0,
    }

    # Expected resolution days = SLA base / priority divisor
    SLA_BASE_DAYS = {
        TicketType.BUG: 29.142857142857142,
        TicketType.FEATURE_REQUEST: 19.636363636363637,
        TicketType.UI_FEEDBACK: 18.75,
    }

    SLA_PRIORITY_DIVISOR = {
        Priority.CRITICAL: 4.0,
        Priority.HIGH: 3.0,
        Priority.MEDIUM: 2.5,
        Priority.LOW: 1.5,
    }

    SENIORITY_WEIGHT = {
        SeniorityLevel.JUNIOR: 3.16,
        SeniorityLevel.MID: 7.75,
        SeniorityLevel.SENIOR: 11.75,
    }

    DEFAULT_USABILITY = 5

    def __init__(self, store: EntityStore):
        self.store = store

    # =========================================================================
    # Reports
    # =========================================================================

    def customer_impact(self) -> Dict[str, Any]:
        """All tickets except LOW-priority UI feedback."""
        considered = [
            t for t in self.store.tickets
            if not (t.type == TicketType.UI_FEEDBACK and t.business_priority == Priority.LOW)
        ]
        report = self._counts(considered)
        report["customerImpactByType"] = self._impact_by_type(
            considered, self.ui_feedback_impact
        )
        return report

    def ticket_risk(self) -> Dict[str, Any]:
        """OPEN tickets, labelled MAJOR / MODERATE / MINOR per type."""
        considered = self._open_tickets()
        report = self._counts(considered)
        report["riskByType"] = {
            ticket_type.value: self._risk_label(considered, ticket_type, major=3.0, label="MAJOR")
            for ticket_type in TicketType
        }
        return report

    def resolution_efficiency(self) -> Dict[str, Any]:
        """Milestone tickets, expected vs actual resolution days per type."""
        considered = [
            t for t in self.store.tickets
            if self.store.milestone_name_for(t.id) is not None
        ]
        report = self._counts(considered)
        report["efficiencyByType"] = {
            ticket_type.value: self._efficiency(considered, ticket_type)
            for ticket_type in TicketType
        }
        return report

    def app_stability(self) -> Dict[str, Any]:
        """
        OPEN tickets, labelled SIGNIFICANT / MODERATE / MINOR per type.

        UNSTABLE when BUG risk is SIGNIFICANT or BUG impact reaches 50.
        """
        considered = self._open_tickets()
        counts = self._counts(considered)

        risk = {
            ticket_type.value: self._risk_label(considered, ticket_type, major=3.5, label="SIGNIFICANT")
            for ticket_type in TicketType
        }
        impact = self._impact_by_type(considered, self.ui_feedback_stability_impact)

        if risk[TicketType.BUG.value] == "SIGNIFICANT" or impact[TicketType.BUG.value] >= 50.0:
            stability = "UNSTABLE"
        else:
            stability = "STABLE"

        return {
            "totalOpenTickets": counts["totalTickets"],
            "openTicketsByType": counts["ticketsByType"],
            "openTicketsByPriority": counts["ticketsByPriority"],
            "riskByType": risk,
            "impactByType": impact,
            "appStability": stability,
        }

    def performance(self, manager: User, timestamp: str) -> List[Dict[str, Any]]:
        """
        Per direct-report developer, tickets closed last calendar month.

        score = closed × seniority weight / rounded mean resolution days
        """
        prefix = previous_month_prefix(timestamp)

        profile = manager.manager
        if profile is None:
            return []

        developers = sorted(
            (u for u in self.store.developers() if profile.manages(u.username)),
            key=lambda u: u.username
        )

        rows = []
        for dev in developers:
            closed = 0
            total_days = 0
            for ticket in self.store.tickets:
                if ticket.assigned_to != dev.username:
                    continue
                closed_at = ticket.first_transition_to([TicketStatus.CLOSED])
                if not closed_at or not closed_at.startswith(prefix):
                    continue
                closed += 1
                total_days += days_between(ticket.assigned_at, ticket.solved_at) + 1

            average = round_half_up(total_days / closed) if closed else 0.0
            seniority = dev.developer.seniority
            if closed and average > 0:
                score = round_half_up(closed * self.SENIORITY_WEIGHT[seniority] / average)
            else:
                score = 0.0

            rows.append({
                "username": dev.username,
                "closedTickets": closed,
                "averageResolutionTime": average,
                "performanceScore": score,
                "seniority": seniority.value,
            })
        return rows

    # =========================================================================
    # Per-ticket scores
    # =========================================================================

    def bug_impact(self, ticket: Ticket) -> float:
        base = self.PRIORITY_BASE[ticket.business_priority]
        frequency = self.FREQUENCY_MULTIPLIER.get(ticket.frequency, 1.0)
        severity = self.SEVERITY_MULTIPLIER.get(ticket.severity, 1.0)
        return round_half_up(base * frequency * severity / math.sqrt(3.0))

    def feature_impact(self, ticket: Ticket) -> float:
        value = self.FEATURE_VALUE.get(ticket.business_value, 5.0)
        demand = self.CUSTOMER_DEMAND.get(ticket.customer_demand, 0.5)
        return value * demand

    def ui_feedback_impact(self, ticket: Ticket) -> float:
        value = self.UI_VALUE.get(ticket.business_value, 10.0)
        usability = self._usability(ticket)
        priority_multiplier = 2.5 + 1.25 * ticket.business_priority.ordinal
        return round_half_up(value * ((11.0 - usability) / 10.0) * priority_multiplier)

    def ui_feedback_stability_impact(self, ticket: Ticket) -> float:
        value_weight = 8.0 + 7.0 * self.VALUE_RANK.get(ticket.business_value, 0)
        usability = self._usability(ticket)
        weight = self.RISK_WEIGHT[ticket.business_priority]
        return round_half_up(value_weight * (usability / 10.0) * weight)

    def expected_days(self, ticket: Ticket) -> float:
        return self.SLA_BASE_DAYS[ticket.type] / self.SLA_PRIORITY_DIVISOR[ticket.business_priority]

    def actual_days(self, ticket: Ticket) -> int:
        """Days from creation to first RESOLVED/CLOSED, at least 1."""
        resolved_at = ticket.first_transition_to([TicketStatus.RESOLVED, TicketStatus.CLOSED])
        if resolved_at is None:
            return 1
        return max(1, days_between(ticket.created_at, resolved_at))

    # =========================================================================
    # Helpers
    # =========================================================================

    def _open_tickets(self) -> List[Ticket]:
        return [t for t in self.store.tickets if t.status == TicketStatus.OPEN]

    def _usability(self, ticket: Ticket) -> int:
        if ticket.usability_score is None:
            return self.DEFAULT_USABILITY
        return ticket.usability_score

    def _counts(self, tickets: List[Ticket]) -> Dict[str, Any]:
        by_type = {ticket_type.value: 0 for ticket_type in TicketType}
        by_priority = {priority.value: 0 for priority in Priority}
        for ticket in tickets:
            by_type[ticket.type.value] += 1
            by_priority[ticket.business_priority.value] += 1
        return {
            "totalTickets": len(tickets),
            "ticketsByType": by_type,
            "ticketsByPriority": by_priority,
        }

    def _impact_by_type(
        self,
        tickets: List[Ticket],
        ui_score: Callable[[Ticket], float]
    ) -> Dict[str, float]:
        scorers = {
            TicketType.BUG: self.bug_impact,
            TicketType.FEATURE_REQUEST: self.feature_impact,
            TicketType.UI_FEEDBACK: ui_score,
        }
        totals = {ticket_type: 0.0 for ticket_type in TicketType}
        for ticket in tickets:
            totals[ticket.type] += scorers[ticket.type](ticket)
        return {ticket_type.value: round_half_up(total) for ticket_type, total in totals.items()}

    def _risk_label(
        self,
        tickets: List[Ticket],
        ticket_type: TicketType,
        major: float,
        label: str
    ) -> str:
        weights = [
            self.RISK_WEIGHT[t.business_priority]
            for t in tickets if t.type == ticket_type
        ]
        if not weights:
            return "LOW"
        average = sum(weights) / len(weights)
        if average >= major:
            return label
        if average >= 1.5:
            return "MODERATE"
        return "MINOR"

    def _efficiency(self, tickets: List[Ticket], ticket_type: TicketType) -> float:
        expected = 0.0
        actual = 0
        for ticket in tickets:
            if ticket.type != ticket_type:
                continue
            expected += self.expected_days(ticket)
            actual += self.actual_days(ticket)
        if actual == 0:
            return 0.0
        return round_half_up(100.0 * expected / actual)
