"""Property repository - Postgres implementation of the item store."""
import logging
from contextlib import contextmanager
from typing import Any, Callable, Dict, Iterator, List, Optional, Sequence, TypeVar

from ...domain.entities.property import Property, PropertyStatus
from ..adapters.postgres import PostgresClient, PostgresTransaction

logger = logging.getLogger(__name__)

T = TypeVar("T")

PROPERTY_COLUMNS = """
    id, address_full, street_number, street_name, zip_code, city, state,
    latitude, longitude, status, customer_name, customer_phone, customer_email,
    data_extracted, extracted_at, sce_case_id, failure_reason, created_at, updated_at
"""

UPDATABLE_COLUMNS = frozenset({
    "status", "customer_name", "customer_phone", "customer_email",
    "data_extracted", "extracted_at", "sce_case_id", "failure_reason",
})

ORDERABLE_COLUMNS = frozenset({"created_at", "updated_at"})


class PostgresItemStore:
    """Item store over the property table."""

    def __init__(self, client: PostgresClient, tx: Optional[PostgresTransaction] = None):
        self._client = client
        self._tx = tx

    def _run(self, work: Callable[[PostgresTransaction], T]) -> T:
        if self._tx is not None:
            return work(self._tx)
        with self._client.transaction() as tx:
            return work(tx)

    @contextmanager
    def transaction(self) -> Iterator["PostgresItemStore"]:
        """Yield a store whose calls share one transaction."""
        if self._tx is not None:
            yield self
            return
        with self._client.transaction() as tx:
            yield PostgresItemStore(self._client, tx)

    def find_by_id(self, property_id: int) -> Optional[Property]:
        sql = f"SELECT {PROPERTY_COLUMNS} FROM property WHERE id = %s"
        row = self._run(lambda tx: tx.fetch_one(sql, (property_id,)))
        return _row_to_property(row) if row else None

    def find_by_address(self, address_full: str) -> Optional[Property]:
        sql = f"SELECT {PROPERTY_COLUMNS} FROM property WHERE address_full = %s"
        row = self._run(lambda tx: tx.fetch_one(sql, (address_full,)))
        return _row_to_property(row) if row else None

    def find_many(self, property_ids: Sequence[int]) -> List[Property]:
        if not property_ids:
            return []
        sql = f"SELECT {PROPERTY_COLUMNS} FROM property WHERE id = ANY(%s) ORDER BY id"
        rows = self._run(lambda tx: tx.fetch_all(sql, (list(property_ids),)))
        return [_row_to_property(row) for row in rows]

    def find_all(self, status: Optional[PropertyStatus], limit: int, offset: int) -> List[Property]:
        where = "WHERE status = %s" if status is not None else ""
        params: List[Any] = [status.value] if status is not None else []
        sql = f"""
            SELECT {PROPERTY_COLUMNS}
            FROM property
            {where}
            ORDER BY created_at ASC, id ASC
            LIMIT %s OFFSET %s
        """
        params.extend([limit, offset])
        rows = self._run(lambda tx: tx.fetch_all(sql, tuple(params)))
        return [_row_to_property(row) for row in rows]

    def find_first_by_status(self, status: PropertyStatus, order_by: str) -> Optional[Property]:
        """
        Oldest property in the given status.

        Inside a transaction the row is locked with SKIP LOCKED so concurrent
        pollers move on to the next candidate instead of queueing on the lock.
        """
        if order_by not in ORDERABLE_COLUMNS:
            raise ValueError(f"Unsupported order_by column: {order_by}")
        sql = f"""
            SELECT {PROPERTY_COLUMNS}
            FROM property
            WHERE status = %s
            ORDER BY {order_by} ASC, id ASC
            LIMIT 1
        """
        if self._tx is not None:
            sql += " FOR UPDATE SKIP LOCKED"
        row = self._run(lambda tx: tx.fetch_one(sql, (status.value,)))
        return _row_to_property(row) if row else None

    def conditional_update(
        self,
        property_id: int,
        expected_status: PropertyStatus,
        fields: Dict[str, Any],
    ) -> Optional[Property]:
        """
        Update a property only while its status is still expected_status.

        Returns:
            The updated property, or None when no row matched
        """
        unknown = set(fields) - UPDATABLE_COLUMNS
        if unknown:
            raise ValueError(f"Unsupported property fields: {sorted(unknown)}")

        assignments = []
        params: List[Any] = []
        for column, value in fields.items():
            assignments.append(f"{column} = %s")
            params.append(value.value if isinstance(value, PropertyStatus) else value)
        assignments.append("updated_at = NOW()")

        sql = f"""
            UPDATE property
            SET {", ".join(assignments)}
            WHERE id = %s AND status = %s
            RETURNING {PROPERTY_COLUMNS}
        """
        params.extend([property_id, expected_status.value])
        row = self._run(lambda tx: tx.fetch_one(sql, tuple(params)))
        if not row:
            logger.debug(f"Conditional update matched no row (property_id={property_id}, expected={expected_status.value})")
            return None
        return _row_to_property(row)

    def create_many(self, properties: Sequence[Property]) -> int:
        """Insert properties, skipping addresses that already exist."""
        sql = """
            INSERT INTO property
            (address_full, street_number, street_name, zip_code, city, state,
             latitude, longitude, status, customer_name, customer_phone, customer_email,
             data_extracted, extracted_at, created_at, updated_at)
            VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, NOW(), NOW())
            ON CONFLICT (address_full) DO NOTHING
        """

        def _insert_all(tx: PostgresTransaction) -> int:
            created = 0
            for prop in properties:
                created += tx.execute(sql, (
                    prop.address_full,
                    prop.street_number,
                    prop.street_name,
                    prop.zip_code,
                    prop.city,
                    prop.state,
                    prop.latitude,
                    prop.longitude,
                    prop.status.value,
                    prop.customer_name,
                    prop.customer_phone,
                    prop.customer_email,
                    prop.data_extracted,
                    prop.extracted_at,
                ))
            return created

        return self._run(_insert_all)

    def count(self, status: Optional[PropertyStatus] = None) -> int:
        if status is None:
            sql, params = "SELECT COUNT(*) AS total FROM property", ()
        else:
            sql, params = "SELECT COUNT(*) AS total FROM property WHERE status = %s", (status.value,)
        row = self._run(lambda tx: tx.fetch_one(sql, params))
        return int(row["total"]) if row else 0


def _row_to_property(row: dict) -> Property:
    """Convert database row to Property entity."""
    return Property(
        id=row["id"],
        address_full=row["address_full"],
        street_number=row.get("street_number"),
        street_name=row.get("street_name"),
        zip_code=row.get("zip_code"),
        city=row.get("city"),
        state=row.get("state"),
        latitude=row.get("latitude"),
        longitude=row.get("longitude"),
        status=PropertyStatus(row["status"]),
        customer_name=row.get("customer_name"),
        customer_phone=row.get("customer_phone"),
        customer_email=row.get("customer_email"),
        data_extracted=bool(row.get("data_extracted")),
        extracted_at=row.get("extracted_at"),
        sce_case_id=row.get("sce_case_id"),
        failure_reason=row.get("failure_reason"),
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )
