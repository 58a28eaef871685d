"""Queue router - Endpoints for pipeline workers."""
import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends

from ...application.use_cases.claim_use_cases import QueueKind
from ...domain.repositories import ItemStore
from ..controllers.queue_controller import (
    handle_claim,
    handle_complete_submission,
    handle_mark_failed,
    handle_mark_ready,
    handle_queue_addresses,
    handle_queue_status,
    handle_record_scrape_result,
    handle_requeue_submit,
)
from ..dependencies import get_item_store
from ..dtos.queue_models import (
    CompleteSubmissionRequest,
    FailRequest,
    QueueAddressesRequest,
    RequeueSubmitRequest,
    ScrapeResultRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/queue", tags=["Queue"])


@router.post("/addresses", status_code=201)
def queue_addresses(payload: QueueAddressesRequest, store: ItemStore = Depends(get_item_store)) -> Dict[str, Any]:
    """Queue addresses for discovery; existing addresses are skipped."""
    return handle_queue_addresses(payload, store)


@router.post("/scrape/claim", status_code=200)
def claim_scrape(store: ItemStore = Depends(get_item_store)) -> Dict[str, Any]:
    """
    Claim the next PENDING_SCRAPE property.

    Used by scrape workers polling for work.
    """
    return handle_claim(QueueKind.SCRAPE, store)


@router.post("/submit/claim", status_code=200)
def claim_submit(store: ItemStore = Depends(get_item_store)) -> Dict[str, Any]:
    """Claim the next VISITED property for submission."""
    return handle_claim(QueueKind.SUBMIT, store)


@router.post("/{property_id}/scraped", status_code=200)
def record_scraped(
    property_id: int,
    payload: ScrapeResultRequest,
    store: ItemStore = Depends(get_item_store),
) -> Dict[str, Any]:
    return handle_record_scrape_result(property_id, payload, store)


@router.post("/{property_id}/complete", status_code=200)
def complete(
    property_id: int,
    payload: CompleteSubmissionRequest,
    store: ItemStore = Depends(get_item_store),
) -> Dict[str, Any]:
    return handle_complete_submission(property_id, payload, store)


@router.post("/{property_id}/ready", status_code=200)
def ready_for_submission(property_id: int, store: ItemStore = Depends(get_item_store)) -> Dict[str, Any]:
    """Park a submission for manual final review."""
    return handle_mark_ready(property_id, store)


@router.post("/{property_id}/fail", status_code=200)
def fail(property_id: int, payload: FailRequest, store: ItemStore = Depends(get_item_store)) -> Dict[str, Any]:
    return handle_mark_failed(property_id, payload, store)


@router.post("/{property_id}/requeue-submit", status_code=200)
def requeue_submission(
    property_id: int,
    payload: RequeueSubmitRequest,
    store: ItemStore = Depends(get_item_store),
) -> Dict[str, Any]:
    return handle_requeue_submit(property_id, payload, store)


@router.get("/status", status_code=200)
def queue_status(store: ItemStore = Depends(get_item_store)) -> Dict[str, Any]:
    """Property counts per status."""
    return handle_queue_status(store)
