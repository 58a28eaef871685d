"""Property use cases - reads and customer data updates keyed by address."""
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from ...domain.entities.property import Property, PropertyStatus
from ...domain.errors import FieldOpsError, InfrastructureError, ValidationError
from ...domain.repositories import DocumentStore, ItemStore
from ...domain.value_objects.customer_data import CustomerData, merge_customer_fields
from ..commands.update_customer_data_command import (
    BatchUpdateCustomerDataCommand,
    UpdateCustomerDataCommand,
)
from ..queries.list_properties_query import ListPropertiesQuery
from .claim_use_cases import load_property, store_customer_data
from .field_visit_use_cases import missing_visit_documents

logger = logging.getLogger(__name__)

MAX_PAGE_SIZE = 500


def list_properties(query: ListPropertiesQuery, store: ItemStore) -> Dict[str, Any]:
    """Page through properties oldest first, with the total for the same filter."""
    if query.limit < 1 or query.limit > MAX_PAGE_SIZE:
        raise ValidationError(f"limit must be between 1 and {MAX_PAGE_SIZE}")
    if query.offset < 0:
        raise ValidationError("offset must be zero or greater")

    properties = store.find_all(query.status, query.limit, query.offset)
    return {
        "properties": [prop.to_dict() for prop in properties],
        "total": store.count(query.status),
        "limit": query.limit,
        "offset": query.offset,
    }


def get_property(property_id: int, store: ItemStore, documents: DocumentStore) -> Dict[str, Any]:
    """Property with its documents and the visit documents it still lacks."""
    prop = load_property(store, property_id)
    data = prop.to_dict()
    data["documents"] = [document.to_dict() for document in documents.list_for_property(property_id)]
    data["missing_documents"] = [doc_type.value for doc_type in missing_visit_documents(property_id, documents)]
    return data


def update_customer_data(command: UpdateCustomerDataCommand, store: ItemStore) -> Property:
    """
    Store extracted customer data for an address, creating the property if needed.

    An existing property follows the same rules as a scrape result: the merge
    keeps stored values where the extracted ones are blank, and the move to
    READY_FOR_FIELD must be allowed by the transition table. An unknown
    address is inserted directly in READY_FOR_FIELD.

    Raises:
        ValidationError: Blank address or no customer field present
        ConflictError: Current status cannot move to READY_FOR_FIELD
    """
    address = command.address_full.strip() if command.address_full else ""
    if not address:
        raise ValidationError("addressFull is required")

    extracted = CustomerData(
        customer_name=command.customer_name,
        customer_phone=command.customer_phone,
        customer_email=command.customer_email,
    )
    if not extracted.has_usable_data():
        raise ValidationError(f"No customer data provided for {address}")
    extracted_at = _to_naive_utc(command.extracted_at) or datetime.utcnow()

    prop = store.find_by_address(address)
    if prop is None:
        created = store.create_many([Property(
            id=0,
            address_full=address,
            status=PropertyStatus.READY_FOR_FIELD,
            data_extracted=True,
            extracted_at=extracted_at,
            **merge_customer_fields(extracted, {}),
        )])
        prop = store.find_by_address(address)
        if prop is None:
            raise InfrastructureError(f"Property for {address} could not be stored")
        if created:
            logger.info(f"Created property {prop.id} from extracted customer data")
            return prop
        # Another request inserted the address first; update that row instead.

    updated = store_customer_data(store, prop, extracted, extracted_at)
    logger.info(f"Stored customer data for property {updated.id}")
    return updated


def batch_update_customer_data(command: BatchUpdateCustomerDataCommand, store: ItemStore) -> Dict[str, Any]:
    """
    Apply address updates one by one and report each outcome.

    A failing entry does not stop the batch. Storage failures still abort it.
    """
    results: List[Dict[str, Any]] = []
    for update in command.updates:
        try:
            prop = update_customer_data(update, store)
        except InfrastructureError:
            raise
        except FieldOpsError as e:
            results.append({"address_full": update.address_full, "success": False, "data": None, "error": e.message})
            continue
        results.append({"address_full": update.address_full, "success": True, "data": prop.to_dict(), "error": None})

    successful = sum(1 for result in results if result["success"])
    logger.info(f"Batch customer data update: {successful}/{len(results)} succeeded")
    return {
        "total": len(results),
        "successful": successful,
        "failed": len(results) - successful,
        "results": results,
    }


def _to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)
