"""
TRACKER Configuration

Run-wide settings. Built once and handed to the store and the CLI.
"""

from pydantic import BaseModel, Field


class TrackerConfig(BaseModel):
    """Settings for a single replay run."""

    # Length of the testing window, counted from its start date
    testing_phase_days: int = Field(12, ge=1)

    # Shorter comments are rejected
    min_comment_length: int = Field(10, ge=0)

    # Roster location used when the CLI gets no --users option
    users_path: str = "input/database/users.json"

    # Pretty-printing of the result file
    indent: int = 2
