"""Field visit use cases - documents, visit completion and route planning."""
import logging
from typing import Any, Dict, List, Optional

from ...domain.entities.document import REQUIRED_VISIT_DOCUMENTS, Document, DocumentType
from ...domain.entities.property import Property, PropertyStatus
from ...domain.errors import ConflictError, NotFoundError, ValidationError
from ...domain.repositories import DocumentStore, ItemStore
from ..commands.add_document_command import AddDocumentCommand
from ..commands.plan_route_command import PlanRouteCommand
from ..services.route_sequencer import Coordinate, coordinates_of, order_by_nearest_neighbor
from .claim_use_cases import apply_transition, load_property

logger = logging.getLogger(__name__)


def add_document(
    command: AddDocumentCommand,
    store: ItemStore,
    documents: DocumentStore,
) -> Document:
    """Record a document for an existing property; the file itself lives elsewhere."""
    if not command.file_name or not command.file_name.strip():
        raise ValidationError("file_name is required")
    load_property(store, command.property_id)

    document = documents.add(Document(
        id=0,
        property_id=command.property_id,
        doc_type=command.doc_type,
        file_name=command.file_name.strip(),
        file_path=command.file_path,
    ))
    logger.info(f"Recorded {document.doc_type.value} document for property {command.property_id}")
    return document


def missing_visit_documents(property_id: int, documents: DocumentStore) -> List[DocumentType]:
    """Required visit documents not yet recorded for the property, in reporting order."""
    available = set(documents.list_types(property_id))
    return [doc_type for doc_type in REQUIRED_VISIT_DOCUMENTS if doc_type not in available]


def list_documents(property_id: int, store: ItemStore, documents: DocumentStore) -> Dict[str, Any]:
    load_property(store, property_id)
    return {
        "documents": [document.to_dict() for document in documents.list_for_property(property_id)],
        "missing_documents": [doc_type.value for doc_type in missing_visit_documents(property_id, documents)],
    }


def complete_visit(
    property_id: int,
    store: ItemStore,
    documents: DocumentStore,
) -> Property:
    """
    Mark a property VISITED once the required field documents exist.

    Raises:
        NotFoundError: Property does not exist
        ConflictError: Property is not READY_FOR_FIELD or documents are missing
    """
    prop = load_property(store, property_id)
    if prop.status != PropertyStatus.READY_FOR_FIELD:
        raise ConflictError(
            f"Visit completion only allowed from READY_FOR_FIELD. Current status: {prop.status.value}"
        )

    missing = missing_visit_documents(property_id, documents)
    if missing:
        required = " and ".join(doc_type.value for doc_type in REQUIRED_VISIT_DOCUMENTS)
        raise ConflictError(
            f"Visit completion requires {required} documents. Missing: {', '.join(doc_type.value for doc_type in missing)}"
        )

    return apply_transition(store, prop, PropertyStatus.VISITED)


def plan_route(command: PlanRouteCommand, store: ItemStore) -> Dict[str, Any]:
    """
    Order properties into a field route.

    The start is the requested coordinate, else the first property with valid
    coordinates. Without any start the input order is kept.
    """
    property_ids = _validate_property_ids(command.property_ids)
    start = _requested_start(command)

    by_id = {prop.id: prop for prop in store.find_many(property_ids)}
    missing = [pid for pid in property_ids if pid not in by_id]
    if missing:
        raise NotFoundError("Property", ", ".join(str(pid) for pid in missing))

    in_input_order = [by_id[pid] for pid in property_ids]
    if start is None:
        start = next((prop for prop in in_input_order if prop.has_coordinates), None)

    if start is None:
        ordered_ids = list(property_ids)
    else:
        ordered_ids = [prop.id for prop in order_by_nearest_neighbor(in_input_order, start)]

    return {
        "ordered_property_ids": ordered_ids,
        "properties": [by_id[pid].to_dict() for pid in ordered_ids],
    }


def _validate_property_ids(property_ids: List[int]) -> List[int]:
    if not property_ids:
        raise ValidationError("propertyIds must be a non-empty array")
    if any(isinstance(pid, bool) or not isinstance(pid, int) or pid <= 0 for pid in property_ids):
        raise ValidationError("propertyIds must contain only positive integers")
    if len(set(property_ids)) != len(property_ids):
        raise ValidationError("propertyIds must not contain duplicate values")
    return list(property_ids)


def _requested_start(command: PlanRouteCommand) -> Optional[Coordinate]:
    if command.start_latitude is None and command.start_longitude is None:
        return None
    start = Coordinate(latitude=command.start_latitude, longitude=command.start_longitude)
    if coordinates_of(start) is None:
        raise ValidationError("startLat and startLon must both be finite numbers")
    if not -90 <= start.latitude <= 90 or not -180 <= start.longitude <= 180:
        raise ValidationError("startLat/startLon out of range")
    return start
