"""Property entity - Domain model for a work item moving through the field pipeline."""
import math
from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Dict, FrozenSet, Optional

from ..errors import ConflictError


class PropertyStatus(str, Enum):
    """Property lifecycle state enumeration."""
    PENDING_SCRAPE = "PENDING_SCRAPE"
    SCRAPING_IN_PROGRESS = "SCRAPING_IN_PROGRESS"
    READY_FOR_FIELD = "READY_FOR_FIELD"
    VISITED = "VISITED"
    SUBMITTING_IN_PROGRESS = "SUBMITTING_IN_PROGRESS"
    READY_FOR_SUBMISSION = "READY_FOR_SUBMISSION"
    COMPLETE = "COMPLETE"
    FAILED = "FAILED"


IN_PROGRESS_STATUSES: FrozenSet[PropertyStatus] = frozenset({
    PropertyStatus.SCRAPING_IN_PROGRESS,
    PropertyStatus.SUBMITTING_IN_PROGRESS,
})

# Single source of truth for legal status changes.
ALLOWED_TRANSITIONS: Dict[PropertyStatus, FrozenSet[PropertyStatus]] = {
    PropertyStatus.PENDING_SCRAPE: frozenset({
        PropertyStatus.SCRAPING_IN_PROGRESS,
        PropertyStatus.READY_FOR_FIELD,
    }),
    PropertyStatus.SCRAPING_IN_PROGRESS: frozenset({
        PropertyStatus.READY_FOR_FIELD,
        PropertyStatus.FAILED,
    }),
    PropertyStatus.READY_FOR_FIELD: frozenset({
        PropertyStatus.VISITED,
    }),
    PropertyStatus.VISITED: frozenset({
        PropertyStatus.SUBMITTING_IN_PROGRESS,
    }),
    PropertyStatus.SUBMITTING_IN_PROGRESS: frozenset({
        PropertyStatus.READY_FOR_SUBMISSION,
        PropertyStatus.COMPLETE,
        PropertyStatus.FAILED,
        PropertyStatus.VISITED,
    }),
    PropertyStatus.READY_FOR_SUBMISSION: frozenset(),
    PropertyStatus.COMPLETE: frozenset(),
    PropertyStatus.FAILED: frozenset(),
}


def can_transition(current: PropertyStatus, target: PropertyStatus) -> bool:
    """Check whether the transition table allows current -> target."""
    return target in ALLOWED_TRANSITIONS.get(current, frozenset())


def ensure_transition(current: PropertyStatus, target: PropertyStatus) -> None:
    """
    Validate a status transition against the transition table.

    Raises:
        ConflictError: If the transition is not allowed
    """
    if not can_transition(current, target):
        raise ConflictError(
            f"Transition from {current.value} to {target.value} is not allowed"
        )


def _is_finite(value: Optional[float]) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


@dataclass(frozen=True)
class Property:
    """Property entity - immutable domain model."""
    id: int
    address_full: str
    street_number: Optional[str] = None
    street_name: Optional[str] = None
    zip_code: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    status: PropertyStatus = PropertyStatus.PENDING_SCRAPE
    customer_name: Optional[str] = None
    customer_phone: Optional[str] = None
    customer_email: Optional[str] = None
    data_extracted: bool = False
    extracted_at: Optional[datetime] = None
    sce_case_id: Optional[str] = None
    failure_reason: Optional[str] = None
    created_at: datetime = field(default_factory=datetime.utcnow)
    updated_at: datetime = field(default_factory=datetime.utcnow)

    def __post_init__(self):
        for name in ("latitude", "longitude"):
            value = getattr(self, name)
            if value is not None and not _is_finite(value):
                raise ValueError(f"{name} must be a finite number, got {value!r}")

    @property
    def has_coordinates(self) -> bool:
        return _is_finite(self.latitude) and _is_finite(self.longitude)

    def transition_to(self, new_status: PropertyStatus, **changes) -> "Property":
        """Create new Property instance with new status (immutable)."""
        ensure_transition(self.status, new_status)
        return replace(self, status=new_status, updated_at=datetime.utcnow(), **changes)

    def to_dict(self) -> Dict[str, object]:
        """Convert property to dictionary."""
        return {
            "id": self.id,
            "address_full": self.address_full,
            "street_number": self.street_number,
            "street_name": self.street_name,
            "zip_code": self.zip_code,
            "city": self.city,
            "state": self.state,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "status": self.status.value,
            "customer_name": self.customer_name,
            "customer_phone": self.customer_phone,
            "customer_email": self.customer_email,
            "data_extracted": self.data_extracted,
            "extracted_at": self.extracted_at.isoformat() if self.extracted_at else None,
            "sce_case_id": self.sce_case_id,
            "failure_reason": self.failure_reason,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
