"""
TRACKER User Model

One User record per roster entry: a role tag plus a role-specific profile.
Users are loaded once and never change during a run.
"""

from enum import Enum
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from .ticket import ExpertiseArea


class Role(str, Enum):
    REPORTER = "REPORTER"
    DEVELOPER = "DEVELOPER"
    MANAGER = "MANAGER"


class SeniorityLevel(str, Enum):
    JUNIOR = "JUNIOR"
    MID = "MID"
    SENIOR = "SENIOR"


class DeveloperProfile(BaseModel):
    """Developer attributes."""
    model_config = ConfigDict(populate_by_name=True)

    expertise_area: ExpertiseArea = Field(..., alias="expertiseArea")
    seniority: SeniorityLevel
    hire_date: str = Field("", alias="hireDate")
    manager_username: str = Field("", alias="managerUsername")


class ManagerProfile(BaseModel):
    """Manager attributes."""
    subordinates: List[str] = Field(default_factory=list)

    def manages(self, username: str) -> bool:
        return username in self.subordinates


class User(BaseModel):
    """A roster entry."""

    username: str
    email: str = ""
    role: Role
    profile: Optional[Union[DeveloperProfile, ManagerProfile]] = None

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "User":
        """
        Build a user from a roster record.

        Developers accept either `seniority` or `seniorityLevel`.
        """
        role = Role(record["role"])
        profile: Optional[Union[DeveloperProfile, ManagerProfile]] = None

        if role == Role.DEVELOPER:
            profile = DeveloperProfile(
                expertise_area=record.get("expertiseArea"),
                seniority=record.get("seniority") or record.get("seniorityLevel"),
                hire_date=record.get("hireDate") or "",
                manager_username=record.get("managerUsername") or "",
            )
        elif role == Role.MANAGER:
            profile = ManagerProfile(subordinates=record.get("subordinates") or [])

        return cls(
            username=record["username"],
            email=record.get("email") or "",
            role=role,
            profile=profile,
        )

    @property
    def developer(self) -> Optional[DeveloperProfile]:
        if self.role == Role.DEVELOPER and isinstance(self.profile, DeveloperProfile):
            return self.profile
        return None

    @property
    def manager(self) -> Optional[ManagerProfile]:
        if self.role == Role.MANAGER and isinstance(self.profile, ManagerProfile):
            return self.profile
        return None
