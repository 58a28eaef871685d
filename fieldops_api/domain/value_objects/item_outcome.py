"""Per-item result of an extraction attempt."""
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .customer_data import CustomerData


class FailureKind(str, Enum):
    """Why a run item failed."""
    ITEM_NOT_FOUND = "ITEM_NOT_FOUND"
    NO_DATA = "NO_DATA"
    ITEM_ERROR = "ITEM_ERROR"
    SHARED_SESSION = "SHARED_SESSION"


@dataclass(frozen=True)
class ItemOutcome:
    """Success payload or typed failure for one run item."""
    run_item_id: int
    property_id: int
    data: Optional[CustomerData] = None
    failure_kind: Optional[FailureKind] = None
    error: Optional[str] = None

    @classmethod
    def success(cls, run_item_id: int, property_id: int, data: CustomerData) -> "ItemOutcome":
        return cls(run_item_id=run_item_id, property_id=property_id, data=data)

    @classmethod
    def failure(cls, run_item_id: int, property_id: int, kind: FailureKind, error: str) -> "ItemOutcome":
        return cls(run_item_id=run_item_id, property_id=property_id, failure_kind=kind, error=error)

    @property
    def succeeded(self) -> bool:
        return self.failure_kind is None

    @property
    def is_shared_session_failure(self) -> bool:
        return self.failure_kind == FailureKind.SHARED_SESSION
