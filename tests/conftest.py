"""Pytest configuration and shared fixtures."""
import threading
from contextlib import contextmanager
from dataclasses import replace
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, Iterator, List, Optional, Sequence

import pytest

from fieldops_api.domain.automation import AddressInput
from fieldops_api.domain.entities.document import Document, DocumentType
from fieldops_api.domain.entities.extraction_run import (
    ExtractionRun,
    ExtractionRunItem,
    ExtractionRunItemStatus,
    ExtractionRunStatus,
    ExtractionSession,
)
from fieldops_api.domain.entities.property import Property, PropertyStatus

TEST_ENCRYPTION_KEY = "test-session-key"


class InMemoryItemStore:
    """Item store double; transaction() holds a lock so claims serialize like row locks."""

    def __init__(self, properties: Sequence[Property] = ()):
        self._lock = threading.RLock()
        self._rows: Dict[int, Property] = {prop.id: prop for prop in properties}
        self._next_id = max(self._rows, default=0) + 1

    @contextmanager
    def transaction(self) -> Iterator["InMemoryItemStore"]:
        with self._lock:
            yield self

    def find_by_id(self, property_id: int) -> Optional[Property]:
        return self._rows.get(property_id)

    def find_by_address(self, address_full: str) -> Optional[Property]:
        return next((p for p in self._rows.values() if p.address_full == address_full), None)

    def find_many(self, property_ids: Sequence[int]) -> List[Property]:
        return [self._rows[pid] for pid in sorted(set(property_ids)) if pid in self._rows]

    def find_all(self, status: Optional[PropertyStatus], limit: int, offset: int) -> List[Property]:
        rows = [p for p in self._rows.values() if status is None or p.status == status]
        rows.sort(key=lambda p: (p.created_at, p.id))
        return rows[offset:offset + limit]

    def find_first_by_status(self, status: PropertyStatus, order_by: str) -> Optional[Property]:
        candidates = [p for p in self._rows.values() if p.status == status]
        if not candidates:
            return None
        return min(candidates, key=lambda p: (getattr(p, order_by), p.id))

    def conditional_update(
        self,
        property_id: int,
        expected_status: PropertyStatus,
        fields: Dict[str, Any],
    ) -> Optional[Property]:
        with self._lock:
            current = self._rows.get(property_id)
            if current is None or current.status != expected_status:
                return None
            updated = replace(current, updated_at=datetime.utcnow(), **fields)
            self._rows[property_id] = updated
            return updated

    def create_many(self, properties: Sequence[Property]) -> int:
        created = 0
        with self._lock:
            for prop in properties:
                if self.find_by_address(prop.address_full) is not None:
                    continue
                self._rows[self._next_id] = replace(prop, id=self._next_id)
                self._next_id += 1
                created += 1
        return created

    def count(self, status: Optional[PropertyStatus] = None) -> int:
        return sum(1 for p in self._rows.values() if status is None or p.status == status)


class InMemoryDocumentStore:
    """Document store double."""

    def __init__(self):
        self.documents: List[Document] = []

    def add(self, document: Document) -> Document:
        stored = replace(document, id=len(self.documents) + 1)
        self.documents.append(stored)
        return stored

    def list_for_property(self, property_id: int) -> List[Document]:
        return [d for d in self.documents if d.property_id == property_id]

    def list_types(self, property_id: int) -> List[DocumentType]:
        return sorted({d.doc_type for d in self.documents if d.property_id == property_id}, key=lambda t: t.value)


class InMemoryExtractionRunStore:
    """Extraction run store double keeping runs and items in dicts."""

    def __init__(self):
        self.sessions: Dict[int, ExtractionSession] = {}
        self.runs: Dict[int, ExtractionRun] = {}
        self.items: Dict[int, ExtractionRunItem] = {}
        self.fail_queued_calls: List[Dict[str, Any]] = []

    def create_session(self, label: str, encrypted_state: str, expires_at: datetime) -> ExtractionSession:
        session = ExtractionSession(
            id=len(self.sessions) + 1,
            label=label,
            encrypted_state=encrypted_state,
            expires_at=expires_at,
        )
        self.sessions[session.id] = session
        return session

    def get_session(self, session_id: int) -> Optional[ExtractionSession]:
        return self.sessions.get(session_id)

    def list_sessions(self) -> List[ExtractionSession]:
        return sorted(self.sessions.values(), key=lambda s: (s.created_at, s.id), reverse=True)

    def create_run(self, session_id: int, property_ids: Sequence[int]) -> ExtractionRun:
        run_id = len(self.runs) + 1
        self.runs[run_id] = ExtractionRun(id=run_id, session_id=session_id, total_count=len(property_ids))
        for property_id in property_ids:
            item_id = len(self.items) + 1
            self.items[item_id] = ExtractionRunItem(id=item_id, run_id=run_id, property_id=property_id)
        return self.get_run(run_id)

    def get_run(self, run_id: int) -> Optional[ExtractionRun]:
        run = self.runs.get(run_id)
        if run is None:
            return None
        items = sorted((i for i in self.items.values() if i.run_id == run_id), key=lambda i: i.id)
        return replace(run, items=items)

    def update_run(self, run_id: int, fields: Dict[str, Any]) -> None:
        self.runs[run_id] = replace(self.runs[run_id], **fields)

    def claim_run(self, run_id: int) -> bool:
        run = self.runs.get(run_id)
        if run is None or run.status != ExtractionRunStatus.PENDING:
            return False
        self.runs[run_id] = replace(
            run,
            status=ExtractionRunStatus.RUNNING,
            started_at=run.started_at or datetime.utcnow(),
        )
        return True

    def update_run_item(
        self,
        item_id: int,
        status: ExtractionRunItemStatus,
        error: Optional[str] = None,
    ) -> None:
        self.items[item_id] = replace(self.items[item_id], status=status, error=error)

    def fail_queued_items(self, run_id: int, item_ids: Sequence[int], error: str) -> int:
        self.fail_queued_calls.append({"run_id": run_id, "item_ids": list(item_ids), "error": error})
        changed = 0
        for item_id in item_ids:
            item = self.items.get(item_id)
            if item and item.run_id == run_id and item.status == ExtractionRunItemStatus.QUEUED:
                self.items[item_id] = replace(item, status=ExtractionRunItemStatus.FAILED, error=error)
                changed += 1
        return changed


class FakeAutomationClient:
    """Automation client double; responses are keyed by street number."""

    def __init__(self, responses: Dict[str, Any]):
        self.responses = responses
        self.calls: List[AddressInput] = []

    def extract_customer_data(
        self,
        address: AddressInput,
        session_state: str,
        timeout: Optional[float] = None,
    ) -> Dict[str, Any]:
        self.calls.append(address)
        response = self.responses[address.street_number]
        if isinstance(response, Exception):
            raise response
        return response


@pytest.fixture
def sample_datetime() -> datetime:
    """Provide a fixed datetime for testing."""
    return datetime(2024, 1, 1, 12, 0, 0)


@pytest.fixture
def make_property(sample_datetime: datetime) -> Callable[..., Property]:
    """Factory for Property entities with sensible defaults."""
    def _make(property_id: int = 1, **overrides) -> Property:
        values = {
            "id": property_id,
            "address_full": f"{property_id} Main St, Irvine, CA 92618",
            "street_number": str(property_id),
            "street_name": "Main St",
            "zip_code": "92618",
            "city": "Irvine",
            "state": "CA",
            "status": PropertyStatus.PENDING_SCRAPE,
            "created_at": sample_datetime + timedelta(minutes=property_id),
            "updated_at": sample_datetime + timedelta(minutes=property_id),
        }
        values.update(overrides)
        return Property(**values)
    return _make


@pytest.fixture
def item_store() -> InMemoryItemStore:
    return InMemoryItemStore()


@pytest.fixture
def document_store() -> InMemoryDocumentStore:
    return InMemoryDocumentStore()


@pytest.fixture
def run_store() -> InMemoryExtractionRunStore:
    return InMemoryExtractionRunStore()


@pytest.fixture
def store_factory() -> Callable[..., InMemoryItemStore]:
    """Build an item store pre-loaded with properties."""
    return InMemoryItemStore


@pytest.fixture
def automation_client_factory() -> Callable[[Dict[str, Any]], FakeAutomationClient]:
    return FakeAutomationClient


@pytest.fixture
def encryption_key() -> str:
    return TEST_ENCRYPTION_KEY
