"""Progress event models handed to caller callbacks."""

from pydantic import BaseModel, ConfigDict, Field


class ProgressEvent(BaseModel):
    """Progress of a long-running git operation."""

    model_config = ConfigDict(frozen=True)

    kind: str = Field(..., description="Operation type, e.g. 'checkout'")
    title: str = Field(..., description="Static description of the operation")
    description: str | None = Field(default=None, description="Latest progress line reported by git")
    value: float = Field(..., ge=0.0, le=1.0, description="Completion between 0 and 1")


class CheckoutProgress(ProgressEvent):
    """Progress of a branch checkout."""

    kind: str = "checkout"
    target_branch: str
