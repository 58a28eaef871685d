"""Document repository - Database implementation."""
import logging
from typing import List

from ...domain.entities.document import Document, DocumentType
from ..adapters.postgres import PostgresClient

logger = logging.getLogger(__name__)

DOCUMENT_COLUMNS = "id, property_id, doc_type, file_name, file_path, created_at"


class PostgresDocumentStore:
    """Document store over the document table."""

    def __init__(self, client: PostgresClient):
        self._client = client

    def add(self, document: Document) -> Document:
        sql = f"""
            INSERT INTO document (property_id, doc_type, file_name, file_path, created_at)
            VALUES (%s, %s, %s, %s, NOW())
            RETURNING {DOCUMENT_COLUMNS}
        """
        row = self._client.execute_insert(sql, (
            document.property_id,
            document.doc_type.value,
            document.file_name,
            document.file_path,
        ))
        return _row_to_document(row)

    def list_for_property(self, property_id: int) -> List[Document]:
        sql = f"SELECT {DOCUMENT_COLUMNS} FROM document WHERE property_id = %s ORDER BY created_at ASC, id ASC"
        rows = self._client.execute_query(sql, (property_id,))
        return [_row_to_document(row) for row in rows]

    def list_types(self, property_id: int) -> List[DocumentType]:
        sql = "SELECT DISTINCT doc_type FROM document WHERE property_id = %s"
        rows = self._client.execute_query(sql, (property_id,))
        return [DocumentType(row["doc_type"]) for row in rows]


def _row_to_document(row: dict) -> Document:
    """Convert database row to Document entity."""
    return Document(
        id=row["id"],
        property_id=row["property_id"],
        doc_type=DocumentType(row["doc_type"]),
        file_name=row["file_name"],
        file_path=row.get("file_path"),
        created_at=row["created_at"],
    )
