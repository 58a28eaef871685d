"""Submission outcome commands."""
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class CompleteSubmissionCommand:
    """Command to mark a submitting property as complete."""
    property_id: int
    sce_case_id: Optional[str] = None


@dataclass(frozen=True)
class MarkFailedCommand:
    """Command to fail a claimed in-progress property."""
    property_id: int
    reason: str


@dataclass(frozen=True)
class RequeueSubmitCommand:
    """Command to return an aborted submission to the submit queue."""
    property_id: int
    reason: Optional[str] = None
