"""Property controller - reads, customer data updates, documents, visits and route plans."""
from typing import Any, Dict, Optional

from ...application.commands.add_document_command import AddDocumentCommand
from ...application.commands.plan_route_command import PlanRouteCommand
from ...application.commands.update_customer_data_command import (
    BatchUpdateCustomerDataCommand,
    UpdateCustomerDataCommand,
)
from ...application.queries.list_properties_query import ListPropertiesQuery
from ...application.use_cases.field_visit_use_cases import add_document, complete_visit, list_documents, plan_route
from ...application.use_cases.property_use_cases import (
    batch_update_customer_data,
    get_property,
    list_properties,
    update_customer_data,
)
from ...domain.entities.property import PropertyStatus
from ...domain.repositories import DocumentStore, ItemStore
from ..dtos.property_models import (
    AddDocumentRequest,
    BatchUpdateRequest,
    RoutePlanRequest,
    UpdateByAddressRequest,
)


def _to_update_command(payload: UpdateByAddressRequest) -> UpdateCustomerDataCommand:
    return UpdateCustomerDataCommand(
        address_full=payload.address_full,
        customer_name=payload.customer_name,
        customer_phone=payload.customer_phone,
        customer_email=payload.customer_email,
        extracted_at=payload.extracted_at,
    )


def handle_list_properties(
    status: Optional[PropertyStatus],
    limit: int,
    offset: int,
    store: ItemStore,
) -> Dict[str, Any]:
    page = list_properties(ListPropertiesQuery(status=status, limit=limit, offset=offset), store)
    return {
        "success": True,
        "data": page["properties"],
        "meta": {"total": page["total"], "limit": page["limit"], "offset": page["offset"]},
    }


def handle_get_property(property_id: int, store: ItemStore, documents: DocumentStore) -> Dict[str, Any]:
    return {"success": True, "data": get_property(property_id, store, documents)}


def handle_update_by_address(payload: UpdateByAddressRequest, store: ItemStore) -> Dict[str, Any]:
    return {"success": True, "data": update_customer_data(_to_update_command(payload), store).to_dict()}


def handle_batch_update(payload: BatchUpdateRequest, store: ItemStore) -> Dict[str, Any]:
    command = BatchUpdateCustomerDataCommand(updates=[_to_update_command(update) for update in payload.updates])
    return {"success": True, "data": batch_update_customer_data(command, store)}


def handle_add_document(
    property_id: int,
    payload: AddDocumentRequest,
    store: ItemStore,
    documents: DocumentStore,
) -> Dict[str, Any]:
    command = AddDocumentCommand(
        property_id=property_id,
        doc_type=payload.doc_type,
        file_name=payload.file_name,
        file_path=payload.file_path,
    )
    return {"success": True, "data": add_document(command, store, documents).to_dict()}


def handle_list_documents(property_id: int, store: ItemStore, documents: DocumentStore) -> Dict[str, Any]:
    return {"success": True, "data": list_documents(property_id, store, documents)}


def handle_complete_visit(property_id: int, store: ItemStore, documents: DocumentStore) -> Dict[str, Any]:
    return {"success": True, "data": complete_visit(property_id, store, documents).to_dict()}


def handle_route_plan(payload: RoutePlanRequest, store: ItemStore) -> Dict[str, Any]:
    command = PlanRouteCommand(
        property_ids=payload.property_ids,
        start_latitude=payload.start_lat,
        start_longitude=payload.start_lon,
    )
    return {"success": True, "data": plan_route(command, store)}
