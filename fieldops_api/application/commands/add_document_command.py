"""Add document command."""
from dataclasses import dataclass
from typing import Optional

from ...domain.entities.document import DocumentType


@dataclass(frozen=True)
class AddDocumentCommand:
    """Command to record a document against a property."""
    property_id: int
    doc_type: DocumentType
    file_name: str
    file_path: Optional[str] = None
