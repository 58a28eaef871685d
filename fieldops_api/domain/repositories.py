"""Store interfaces consumed by the use cases."""
from datetime import datetime
from typing import Any, ContextManager, Dict, List, Optional, Protocol, Sequence

from .entities.document import Document, DocumentType
from .entities.extraction_run import (
    ExtractionRun,
    ExtractionRunItemStatus,
    ExtractionSession,
)
from .entities.property import Property, PropertyStatus


class ItemStore(Protocol):
    """Persisted properties with conditional-update support."""

    def transaction(self) -> ContextManager["ItemStore"]:
        """Open a storage transaction; the yielded store runs inside it."""
        ...

    def find_by_id(self, property_id: int) -> Optional[Property]:
        ...

    def find_by_address(self, address_full: str) -> Optional[Property]:
        ...

    def find_many(self, property_ids: Sequence[int]) -> List[Property]:
        ...

    def find_all(self, status: Optional[PropertyStatus], limit: int, offset: int) -> List[Property]:
        """Page of properties, oldest first; status None lists every status."""
        ...

    def find_first_by_status(self, status: PropertyStatus, order_by: str) -> Optional[Property]:
        """Oldest property in status, ordered by 'created_at' or 'updated_at'."""
        ...

    def conditional_update(
        self,
        property_id: int,
        expected_status: PropertyStatus,
        fields: Dict[str, Any],
    ) -> Optional[Property]:
        """Update only when the stored status still equals expected_status."""
        ...

    def create_many(self, properties: Sequence[Property]) -> int:
        ...

    def count(self, status: Optional[PropertyStatus] = None) -> int:
        ...


class DocumentStore(Protocol):
    """Documents recorded against properties."""

    def add(self, document: Document) -> Document:
        ...

    def list_for_property(self, property_id: int) -> List[Document]:
        ...

    def list_types(self, property_id: int) -> List[DocumentType]:
        ...


class ExtractionRunStore(Protocol):
    """Extraction sessions, runs and run items."""

    def create_session(self, label: str, encrypted_state: str, expires_at: datetime) -> ExtractionSession:
        ...

    def get_session(self, session_id: int) -> Optional[ExtractionSession]:
        ...

    def list_sessions(self) -> List[ExtractionSession]:
        ...

    def create_run(self, session_id: int, property_ids: Sequence[int]) -> ExtractionRun:
        ...

    def get_run(self, run_id: int) -> Optional[ExtractionRun]:
        """Run with all of its items ordered by id."""
        ...

    def update_run(self, run_id: int, fields: Dict[str, Any]) -> None:
        ...

    def claim_run(self, run_id: int) -> bool:
        """Atomically move a PENDING run to RUNNING."""
        ...

    def update_run_item(
        self,
        item_id: int,
        status: ExtractionRunItemStatus,
        error: Optional[str] = None,
    ) -> None:
        ...

    def fail_queued_items(self, run_id: int, item_ids: Sequence[int], error: str) -> int:
        """Fail the given items that are still QUEUED; returns how many changed."""
        ...
