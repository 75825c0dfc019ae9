"""
TRACKER Command Models

Every command record is first read as a CommandEnvelope (name, actor, time),
then, once the actor is authorized, parsed into its typed payload through the
`Command` tagged union keyed on the `command` field.
"""

from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from .ticket import (
    BusinessValue,
    CustomerDemand,
    ExpertiseArea,
    Frequency,
    Priority,
    Severity,
    TicketType,
)


# =============================================================================
# ENVELOPE
# =============================================================================

class CommandEnvelope(BaseModel):
    """Fields every command record carries."""
    command: str
    username: str
    timestamp: str


class BaseCommand(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    username: str
    timestamp: str


class TicketCommand(BaseCommand):
    """Commands addressing a single ticket by id."""
    ticket_id: int = Field(..., alias="ticketID")


# =============================================================================
# PAYLOADS
# =============================================================================

class TicketParams(BaseModel):
    """`params` of reportTicket."""
    model_config = ConfigDict(populate_by_name=True)

    type: TicketType
    title: str
    business_priority: Priority = Field(..., alias="businessPriority")
    reported_by: str = Field("", alias="reportedBy")
    description: Optional[str] = None
    expertise_area: Optional[ExpertiseArea] = Field(None, alias="expertiseArea")

    severity: Optional[Severity] = None
    frequency: Optional[Frequency] = None
    business_value: Optional[BusinessValue] = Field(None, alias="businessValue")
    customer_demand: Optional[CustomerDemand] = Field(None, alias="customerDemand")
    usability_score: Optional[int] = Field(None, alias="usabilityScore")


class SearchFilters(BaseModel):
    """`filters` of search. Unknown filter values simply match nothing."""
    model_config = ConfigDict(populate_by_name=True)

    search_type: str = Field("TICKET", alias="searchType")

    # TICKET search
    type: Optional[str] = None
    business_priority: Optional[str] = Field(None, alias="businessPriority")
    created_after: Optional[str] = Field(None, alias="createdAfter")
    keywords: List[str] = Field(default_factory=list)
    available_for_assignment: bool = Field(False, alias="availableForAssignment")

    # DEVELOPER search
    expertise_area: Optional[str] = Field(None, alias="expertiseArea")
    seniority: Optional[str] = None


# =============================================================================
# COMMANDS
# =============================================================================

class ReportTicket(BaseCommand):
    command: Literal["reportTicket"]
    params: TicketParams


class ViewTickets(BaseCommand):
    command: Literal["viewTickets"]


class StartTestingPhase(BaseCommand):
    command: Literal["startTestingPhase"]


class LostInvestors(BaseCommand):
    command: Literal["lostInvestors"]


class CreateMilestone(BaseCommand):
    command: Literal["createMilestone"]
    name: str
    due_date: str = Field(..., alias="dueDate")
    blocking_for: List[str] = Field(default_factory=list, alias="blockingFor")
    tickets: List[int] = Field(default_factory=list)
    assigned_devs: List[str] = Field(default_factory=list, alias="assignedDevs")


class ViewMilestones(BaseCommand):
    command: Literal["viewMilestones"]


class AssignTicket(TicketCommand):
    command: Literal["assignTicket"]


class UndoAssignTicket(TicketCommand):
    command: Literal["undoAssignTicket"]


class ViewAssignedTickets(BaseCommand):
    command: Literal["viewAssignedTickets"]


class AddComment(TicketCommand):
    command: Literal["addComment"]
    comment: str = ""


class UndoAddComment(TicketCommand):
    command: Literal["undoAddComment"]


class ChangeStatus(TicketCommand):
    command: Literal["changeStatus"]


class UndoChangeStatus(TicketCommand):
    command: Literal["undoChangeStatus"]


class ViewTicketHistory(BaseCommand):
    command: Literal["viewTicketHistory"]


class Search(BaseCommand):
    command: Literal["search"]
    filters: SearchFilters = Field(default_factory=SearchFilters)


class ViewNotifications(BaseCommand):
    command: Literal["viewNotifications"]


class GenerateCustomerImpactReport(BaseCommand):
    command: Literal["generateCustomerImpactReport"]


class GenerateTicketRiskReport(BaseCommand):
    command: Literal["generateTicketRiskReport"]


class GenerateResolutionEfficiencyReport(BaseCommand):
    command: Literal["generateResolutionEfficiencyReport"]


class AppStabilityReport(BaseCommand):
    command: Literal["appStabilityReport"]


class GeneratePerformanceReport(BaseCommand):
    command: Literal["generatePerformanceReport"]


Command = Annotated[
    Union[
        ReportTicket,
        ViewTickets,
        StartTestingPhase,
        LostInvestors,
        CreateMilestone,
        ViewMilestones,
        AssignTicket,
        UndoAssignTicket,
        ViewAssignedTickets,
        AddComment,
        UndoAddComment,
        ChangeStatus,
        UndoChangeStatus,
        ViewTicketHistory,
        Search,
        ViewNotifications,
        GenerateCustomerImpactReport,
        GenerateTicketRiskReport,
        GenerateResolutionEfficiencyReport,
        AppStabilityReport,
        GeneratePerformanceReport,
    ],
    Field(discriminator="command"),
]

command_adapter = TypeAdapter(Command)
