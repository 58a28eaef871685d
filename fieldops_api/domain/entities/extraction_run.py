"""Extraction run entities - batch extraction against one shared portal session."""
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional


class ExtractionRunStatus(str, Enum):
    """Extraction run state enumeration."""
    PENDING = "PENDING"
    RUNNING = "RUNNING"
    COMPLETED = "COMPLETED"
    COMPLETED_WITH_ERRORS = "COMPLETED_WITH_ERRORS"
    FAILED = "FAILED"


class ExtractionRunItemStatus(str, Enum):
    """Per-item state inside an extraction run."""
    QUEUED = "QUEUED"
    PROCESSING = "PROCESSING"
    SUCCEEDED = "SUCCEEDED"
    FAILED = "FAILED"


@dataclass(frozen=True)
class ExtractionSession:
    """Encrypted automation session for the external portal."""
    id: int
    label: str
    encrypted_state: str
    expires_at: datetime
    is_active: bool = True
    created_at: datetime = field(default_factory=datetime.utcnow)
    updated_at: datetime = field(default_factory=datetime.utcnow)

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        return self.expires_at <= (now or datetime.utcnow())

    def to_public_dict(self) -> Dict[str, Any]:
        """Session metadata without the encrypted blob."""
        return {
            "id": self.id,
            "label": self.label,
            "expires_at": self.expires_at.isoformat(),
            "is_active": self.is_active,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }


@dataclass(frozen=True)
class ExtractionRunItem:
    """One property queued inside an extraction run."""
    id: int
    run_id: int
    property_id: int
    status: ExtractionRunItemStatus = ExtractionRunItemStatus.QUEUED
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "run_id": self.run_id,
            "property_id": self.property_id,
            "status": self.status.value,
            "error": self.error,
        }


@dataclass(frozen=True)
class ExtractionRun:
    """Extraction run aggregate."""
    id: int
    session_id: int
    status: ExtractionRunStatus = ExtractionRunStatus.PENDING
    total_count: int = 0
    processed_count: int = 0
    success_count: int = 0
    failure_count: int = 0
    error_summary: Optional[str] = None
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None
    items: List[ExtractionRunItem] = field(default_factory=list)
    created_at: datetime = field(default_factory=datetime.utcnow)

    def queued_items(self) -> List[ExtractionRunItem]:
        """Items still waiting to be processed, in ascending id order."""
        return sorted(
            (item for item in self.items if item.status == ExtractionRunItemStatus.QUEUED),
            key=lambda item: item.id,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert run to dictionary."""
        return {
            "id": self.id,
            "session_id": self.session_id,
            "status": self.status.value,
            "total_count": self.total_count,
            "processed_count": self.processed_count,
            "success_count": self.success_count,
            "failure_count": self.failure_count,
            "error_summary": self.error_summary,
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "finished_at": self.finished_at.isoformat() if self.finished_at else None,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "items": [item.to_dict() for item in sorted(self.items, key=lambda i: i.id)],
        }


def final_run_status(success_count: int, failure_count: int) -> ExtractionRunStatus:
    """Derive the terminal run status from its counters."""
    if failure_count == 0:
        return ExtractionRunStatus.COMPLETED
    if success_count > 0:
        return ExtractionRunStatus.COMPLETED_WITH_ERRORS
    return ExtractionRunStatus.FAILED
