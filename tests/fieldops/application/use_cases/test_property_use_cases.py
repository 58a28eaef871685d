"""Unit tests for property read and customer data update use cases."""
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest

from fieldops_api.application.commands.add_document_command import AddDocumentCommand
from fieldops_api.application.commands.update_customer_data_command import (
    BatchUpdateCustomerDataCommand,
    UpdateCustomerDataCommand,
)
from fieldops_api.application.queries.list_properties_query import ListPropertiesQuery
from fieldops_api.application.use_cases.field_visit_use_cases import add_document
from fieldops_api.application.use_cases.property_use_cases import (
    batch_update_customer_data,
    get_property,
    list_properties,
    update_customer_data,
)
from fieldops_api.domain.entities.document import DocumentType
from fieldops_api.domain.entities.property import PropertyStatus
from fieldops_api.domain.errors import ConflictError, InfrastructureError, NotFoundError, ValidationError

ADDRESS = "1 Main St, Irvine, CA 92618"


@pytest.mark.unit
class TestListProperties:
    """Tests for list_properties."""

    @pytest.fixture
    def listed_store(self, make_property, store_factory):
        return store_factory([
            make_property(3, status=PropertyStatus.VISITED),
            make_property(1),
            make_property(2, status=PropertyStatus.VISITED),
        ])

    def test_pages_oldest_first(self, listed_store):
        result = list_properties(ListPropertiesQuery(limit=2, offset=1), listed_store)

        assert [p["id"] for p in result["properties"]] == [2, 3]
        assert result["total"] == 3
        assert (result["limit"], result["offset"]) == (2, 1)

    def test_filters_by_status(self, listed_store):
        result = list_properties(ListPropertiesQuery(status=PropertyStatus.VISITED), listed_store)

        assert [p["id"] for p in result["properties"]] == [2, 3]
        assert result["total"] == 2

    @pytest.mark.parametrize("query", [
        ListPropertiesQuery(limit=0),
        ListPropertiesQuery(limit=501),
        ListPropertiesQuery(offset=-1),
    ])
    def test_rejects_bad_paging(self, query, listed_store):
        with pytest.raises(ValidationError):
            list_properties(query, listed_store)


@pytest.mark.unit
class TestGetProperty:
    """Tests for get_property."""

    def test_includes_documents_and_missing_types(self, make_property, store_factory, document_store):
        store = store_factory([make_property(1, status=PropertyStatus.READY_FOR_FIELD)])
        add_document(AddDocumentCommand(property_id=1, doc_type=DocumentType.BILL, file_name="bill.jpg"), store, document_store)

        data = get_property(1, store, document_store)

        assert data["id"] == 1
        assert data["status"] == "READY_FOR_FIELD"
        assert [d["file_name"] for d in data["documents"]] == ["bill.jpg"]
        assert data["missing_documents"] == ["SIGNATURE"]

    def test_unknown_property(self, item_store, document_store):
        with pytest.raises(NotFoundError):
            get_property(42, item_store, document_store)


@pytest.mark.unit
class TestUpdateCustomerData:
    """Tests for update_customer_data."""

    def test_creates_unknown_address_ready_for_field(self, item_store):
        extracted_at = datetime(2024, 3, 1, 9, 30, tzinfo=timezone(timedelta(hours=-8)))

        prop = update_customer_data(
            UpdateCustomerDataCommand(address_full=f"  {ADDRESS} ", customer_name="Ana", extracted_at=extracted_at),
            item_store,
        )

        assert prop.address_full == ADDRESS
        assert prop.status == PropertyStatus.READY_FOR_FIELD
        assert prop.customer_name == "Ana"
        assert prop.customer_phone is None
        assert prop.data_extracted is True
        assert prop.extracted_at == datetime(2024, 3, 1, 17, 30)

    def test_moves_pending_property_and_merges(self, make_property, store_factory):
        store = store_factory([make_property(1, customer_phone="555-0100")])

        prop = update_customer_data(
            UpdateCustomerDataCommand(address_full=ADDRESS, customer_name="Ana", customer_phone=""),
            store,
        )

        assert prop.id == 1
        assert prop.status == PropertyStatus.READY_FOR_FIELD
        assert prop.customer_name == "Ana"
        assert prop.customer_phone == "555-0100"
        assert prop.data_extracted is True
        assert store.count() == 1

    def test_refreshes_ready_property(self, make_property, store_factory):
        store = store_factory([make_property(1, status=PropertyStatus.READY_FOR_FIELD, customer_name="Old")])

        prop = update_customer_data(UpdateCustomerDataCommand(address_full=ADDRESS, customer_name="New"), store)

        assert prop.status == PropertyStatus.READY_FOR_FIELD
        assert prop.customer_name == "New"

    def test_visited_property_is_not_reopened(self, make_property, store_factory):
        store = store_factory([make_property(1, status=PropertyStatus.VISITED)])

        with pytest.raises(ConflictError):
            update_customer_data(UpdateCustomerDataCommand(address_full=ADDRESS, customer_name="Ana"), store)

        assert store.find_by_id(1).status == PropertyStatus.VISITED

    @pytest.mark.parametrize("command", [
        UpdateCustomerDataCommand(address_full="   ", customer_name="Ana"),
        UpdateCustomerDataCommand(address_full=ADDRESS, customer_name=" ", customer_phone=None),
    ])
    def test_rejects_missing_address_or_data(self, command, item_store):
        with pytest.raises(ValidationError):
            update_customer_data(command, item_store)

        assert item_store.count() == 0

    def test_lost_insert_race_updates_existing_row(self, make_property, store_factory, monkeypatch):
        store = store_factory([make_property(1)])
        real_find = store.find_by_address
        calls = []

        def _find_after_first_miss(address):
            calls.append(address)
            return None if len(calls) == 1 else real_find(address)

        monkeypatch.setattr(store, "find_by_address", _find_after_first_miss)

        prop = update_customer_data(UpdateCustomerDataCommand(address_full=ADDRESS, customer_name="Ana"), store)

        assert prop.id == 1
        assert prop.status == PropertyStatus.READY_FOR_FIELD
        assert store.count() == 1


@pytest.mark.unit
class TestBatchUpdateCustomerData:
    """Tests for batch_update_customer_data."""

    def test_reports_each_entry(self, make_property, store_factory):
        store = store_factory([make_property(1, status=PropertyStatus.VISITED)])

        result = batch_update_customer_data(BatchUpdateCustomerDataCommand(updates=[
            UpdateCustomerDataCommand(address_full="9 Oak Ave", customer_phone="555-0199"),
            UpdateCustomerDataCommand(address_full=ADDRESS, customer_name="Ana"),
            UpdateCustomerDataCommand(address_full="10 Oak Ave"),
        ]), store)

        assert (result["total"], result["successful"], result["failed"]) == (3, 1, 2)
        first, second, third = result["results"]
        assert first["success"] is True
        assert first["data"]["status"] == "READY_FOR_FIELD"
        assert second["success"] is False
        assert "VISITED to READY_FOR_FIELD" in second["error"]
        assert third == {"address_full": "10 Oak Ave", "success": False, "data": None, "error": "No customer data provided for 10 Oak Ave"}

    def test_empty_batch(self, item_store):
        result = batch_update_customer_data(BatchUpdateCustomerDataCommand(updates=[]), item_store)

        assert result == {"total": 0, "successful": 0, "failed": 0, "results": []}

    def test_storage_failure_aborts_batch(self):
        store = MagicMock()
        store.find_by_address.side_effect = InfrastructureError("database unavailable")

        with pytest.raises(InfrastructureError):
            batch_update_customer_data(BatchUpdateCustomerDataCommand(updates=[
                UpdateCustomerDataCommand(address_full=ADDRESS, customer_name="Ana"),
            ]), store)
