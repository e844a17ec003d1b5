"""
Validation Result Models

Validators never fix input silently. They report issues, and the flows
turn the first blocking issue into the message shown to the user.
"""

from typing import Optional

from pydantic import BaseModel, Field


class ValidationIssue(BaseModel):
    """A single validation problem."""

    field: str = Field(..., description="Field with the issue")
    issue_type: str = Field(..., description="Type of issue")
    message: str = Field(..., description="Human-readable message")
    severity: str = Field(
        default="error",
        description="error (blocks the action) or warning (shown only)"
    )


class ValidationResult(BaseModel):
    """Outcome of validating one form submission."""

    issues: list[ValidationIssue] = Field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        return any(issue.severity == "error" for issue in self.issues)

    @property
    def error_count(self) -> int:
        return sum(1 for issue in self.issues if issue.severity == "error")

    @property
    def is_valid(self) -> bool:
        return not self.has_errors

    @property
    def first_error(self) -> Optional[str]:
        """Message of the first blocking issue, if any."""
        for issue in self.issues:
            if issue.severity == "error":
                return issue.message
        return None
