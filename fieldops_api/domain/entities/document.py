"""Document entity - field evidence attached to a property."""
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, Optional, Tuple


class DocumentType(str, Enum):
    """Document type enumeration."""
    BILL = "BILL"
    SIGNATURE = "SIGNATURE"
    PHOTO = "PHOTO"
    OTHER = "OTHER"


# Required before a field visit can be completed, in reporting order.
REQUIRED_VISIT_DOCUMENTS: Tuple[DocumentType, ...] = (DocumentType.BILL, DocumentType.SIGNATURE)


@dataclass(frozen=True)
class Document:
    """Document entity - immutable domain model."""
    id: int
    property_id: int
    doc_type: DocumentType
    file_name: str
    file_path: Optional[str] = None
    created_at: datetime = field(default_factory=datetime.utcnow)

    def to_dict(self) -> Dict[str, object]:
        """Convert document to dictionary."""
        return {
            "id": self.id,
            "property_id": self.property_id,
            "doc_type": self.doc_type.value,
            "file_name": self.file_name,
            "file_path": self.file_path,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
