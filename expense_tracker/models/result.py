"""Result model returned by the flows to the presentation layer."""

from typing import Optional

from pydantic import BaseModel, Field


class OperationResult(BaseModel):
    """
    Success/failure of one user action, with a message ready to display.

    The presentation layer shows `message` as-is and, on success,
    clears its input fields and reloads.
    """

    success: bool
    message: str = Field(
        default="",
        description="Human-readable outcome or reason for failure"
    )
    entity_id: Optional[int] = Field(
        default=None,
        description="Id of the created or deleted entity, if any"
    )
