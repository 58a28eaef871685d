"""Property router - Endpoints for field crews and the browser extension."""
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query

from ...domain.entities.property import PropertyStatus
from ...domain.repositories import DocumentStore, ItemStore
from ..controllers.property_controller import (
    handle_add_document,
    handle_batch_update,
    handle_complete_visit,
    handle_get_property,
    handle_list_documents,
    handle_list_properties,
    handle_route_plan,
    handle_update_by_address,
)
from ..dependencies import get_document_store, get_item_store
from ..dtos.property_models import (
    AddDocumentRequest,
    BatchUpdateRequest,
    RoutePlanRequest,
    UpdateByAddressRequest,
)

router = APIRouter(prefix="/api/properties", tags=["Properties"])


@router.get("", status_code=200)
def list_properties(
    status: Optional[PropertyStatus] = Query(None, description="Filter by lifecycle status"),
    limit: int = Query(50, ge=1, le=500, description="Maximum number of properties to return"),
    offset: int = Query(0, ge=0, description="Number of properties to skip"),
    store: ItemStore = Depends(get_item_store),
) -> Dict[str, Any]:
    """List properties oldest first, with paging metadata."""
    return handle_list_properties(status, limit, offset, store)


@router.post("/update-by-address", status_code=200)
def update_by_address(payload: UpdateByAddressRequest, store: ItemStore = Depends(get_item_store)) -> Dict[str, Any]:
    """Store customer data extracted for an address and move it to READY_FOR_FIELD."""
    return handle_update_by_address(payload, store)


@router.post("/batch-update", status_code=200)
def batch_update(payload: BatchUpdateRequest, store: ItemStore = Depends(get_item_store)) -> Dict[str, Any]:
    """Apply several address updates; each entry reports its own outcome."""
    return handle_batch_update(payload, store)


@router.post("/route-plan", status_code=200)
def route_plan(payload: RoutePlanRequest, store: ItemStore = Depends(get_item_store)) -> Dict[str, Any]:
    """Order properties by greedy nearest neighbor from the start point."""
    return handle_route_plan(payload, store)


@router.get("/{property_id}", status_code=200)
def get_property(
    property_id: int,
    store: ItemStore = Depends(get_item_store),
    documents: DocumentStore = Depends(get_document_store),
) -> Dict[str, Any]:
    return handle_get_property(property_id, store, documents)


@router.get("/{property_id}/documents", status_code=200)
def list_documents(
    property_id: int,
    store: ItemStore = Depends(get_item_store),
    documents: DocumentStore = Depends(get_document_store),
) -> Dict[str, Any]:
    """Documents for a property and the visit documents still missing."""
    return handle_list_documents(property_id, store, documents)


@router.post("/{property_id}/documents", status_code=201)
def add_document(
    property_id: int,
    payload: AddDocumentRequest,
    store: ItemStore = Depends(get_item_store),
    documents: DocumentStore = Depends(get_document_store),
) -> Dict[str, Any]:
    return handle_add_document(property_id, payload, store, documents)


@router.post("/{property_id}/complete-visit", status_code=200)
def complete_visit(
    property_id: int,
    store: ItemStore = Depends(get_item_store),
    documents: DocumentStore = Depends(get_document_store),
) -> Dict[str, Any]:
    """Mark a property VISITED; requires BILL and SIGNATURE documents."""
    return handle_complete_visit(property_id, store, documents)
