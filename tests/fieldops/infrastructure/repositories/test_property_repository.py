"""Unit tests for the Postgres item store."""
from contextlib import contextmanager
from datetime import datetime
from unittest.mock import MagicMock

import pytest

from fieldops_api.domain.entities.property import Property, PropertyStatus
from fieldops_api.infrastructure.repositories.property_repository import PostgresItemStore


def _row(**overrides):
    row = {
        "id": 1,
        "address_full": "1 Main St",
        "street_number": "1",
        "street_name": "Main St",
        "zip_code": "92618",
        "city": "Irvine",
        "state": "CA",
        "latitude": 33.6,
        "longitude": -117.8,
        "status": "PENDING_SCRAPE",
        "customer_name": None,
        "customer_phone": None,
        "customer_email": None,
        "data_extracted": False,
        "extracted_at": None,
        "sce_case_id": None,
        "failure_reason": None,
        "created_at": datetime(2024, 1, 1),
        "updated_at": datetime(2024, 1, 1),
    }
    row.update(overrides)
    return row


@pytest.fixture
def tx():
    return MagicMock()


@pytest.fixture
def client(tx):
    client = MagicMock()

    @contextmanager
    def _transaction():
        yield tx

    client.transaction = _transaction
    return client


@pytest.mark.unit
class TestPostgresItemStore:
    """Tests for PostgresItemStore."""

    def test_find_by_id_maps_row(self, client, tx):
        tx.fetch_one.return_value = _row()

        prop = PostgresItemStore(client).find_by_id(1)

        assert isinstance(prop, Property)
        assert prop.status == PropertyStatus.PENDING_SCRAPE
        assert prop.latitude == 33.6

    def test_find_by_id_missing(self, client, tx):
        tx.fetch_one.return_value = None

        assert PostgresItemStore(client).find_by_id(1) is None

    def test_select_locks_only_inside_transaction(self, client, tx):
        tx.fetch_one.return_value = _row()
        store = PostgresItemStore(client)

        store.find_first_by_status(PropertyStatus.PENDING_SCRAPE, "created_at")
        assert "SKIP LOCKED" not in tx.fetch_one.call_args[0][0]

        with store.transaction() as bound:
            bound.find_first_by_status(PropertyStatus.PENDING_SCRAPE, "created_at")
        sql = tx.fetch_one.call_args[0][0]
        assert "FOR UPDATE SKIP LOCKED" in sql
        assert "ORDER BY created_at ASC" in sql

    def test_find_first_rejects_unknown_order(self, client):
        with pytest.raises(ValueError):
            PostgresItemStore(client).find_first_by_status(PropertyStatus.VISITED, "id; DROP TABLE property")

    def test_conditional_update_sql(self, client, tx):
        tx.fetch_one.return_value = _row(status="SCRAPING_IN_PROGRESS")

        updated = PostgresItemStore(client).conditional_update(
            1,
            PropertyStatus.PENDING_SCRAPE,
            {"status": PropertyStatus.SCRAPING_IN_PROGRESS},
        )

        sql, params = tx.fetch_one.call_args[0]
        assert "WHERE id = %s AND status = %s" in sql
        assert "RETURNING" in sql
        assert params == ("SCRAPING_IN_PROGRESS", 1, "PENDING_SCRAPE")
        assert updated.status == PropertyStatus.SCRAPING_IN_PROGRESS

    def test_conditional_update_no_match(self, client, tx):
        tx.fetch_one.return_value = None

        assert PostgresItemStore(client).conditional_update(1, PropertyStatus.VISITED, {"status": PropertyStatus.SUBMITTING_IN_PROGRESS}) is None

    def test_conditional_update_rejects_unknown_column(self, client):
        with pytest.raises(ValueError):
            PostgresItemStore(client).conditional_update(1, PropertyStatus.VISITED, {"address_full": "x"})

    def test_create_many_counts_inserted_rows(self, client, tx):
        tx.execute.side_effect = [1, 0]

        created = PostgresItemStore(client).create_many([
            Property(id=0, address_full="1 Main St"),
            Property(id=0, address_full="2 Main St"),
        ])

        assert created == 1
        assert "ON CONFLICT (address_full) DO NOTHING" in tx.execute.call_args[0][0]

    def test_count(self, client, tx):
        tx.fetch_one.return_value = {"total": 4}

        assert PostgresItemStore(client).count(PropertyStatus.VISITED) == 4

    def test_count_all_statuses(self, client, tx):
        tx.fetch_one.return_value = {"total": 9}

        assert PostgresItemStore(client).count() == 9
        sql, params = tx.fetch_one.call_args[0]
        assert "WHERE" not in sql
        assert params == ()

    def test_find_all_pages_with_status_filter(self, client, tx):
        tx.fetch_all.return_value = [_row(id=2), _row(id=3)]

        props = PostgresItemStore(client).find_all(PropertyStatus.PENDING_SCRAPE, 2, 4)

        sql, params = tx.fetch_all.call_args[0]
        assert "WHERE status = %s" in sql
        assert "ORDER BY created_at ASC, id ASC" in sql
        assert params == ("PENDING_SCRAPE", 2, 4)
        assert [p.id for p in props] == [2, 3]

    def test_find_all_without_status(self, client, tx):
        tx.fetch_all.return_value = []

        assert PostgresItemStore(client).find_all(None, 50, 0) == []
        sql, params = tx.fetch_all.call_args[0]
        assert "WHERE" not in sql
        assert params == (50, 0)

    def test_create_many_stores_customer_fields(self, client, tx):
        tx.execute.return_value = 1
        extracted_at = datetime(2024, 2, 1)

        PostgresItemStore(client).create_many([Property(
            id=0,
            address_full="3 Main St",
            status=PropertyStatus.READY_FOR_FIELD,
            customer_name="Ana",
            data_extracted=True,
            extracted_at=extracted_at,
        )])

        params = tx.execute.call_args[0][1]
        assert params[8:] == ("READY_FOR_FIELD", "Ana", None, None, True, extracted_at)
