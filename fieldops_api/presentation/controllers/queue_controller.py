"""Queue controller - claims, scrape results and submission outcomes."""
import logging
from typing import Any, Dict

from ...application.commands.queue_addresses_command import AddressEntry, QueueAddressesCommand
from ...application.commands.record_scrape_result_command import RecordScrapeResultCommand
from ...application.commands.submission_outcome_command import (
    CompleteSubmissionCommand,
    MarkFailedCommand,
    RequeueSubmitCommand,
)
from ...application.use_cases.claim_use_cases import (
    QueueKind,
    claim_next,
    complete_submission,
    get_queue_status,
    mark_failed,
    mark_ready_for_submission,
    queue_addresses,
    record_scrape_result,
    requeue_submit,
)
from ...domain.repositories import ItemStore
from ..dtos.queue_models import (
    CompleteSubmissionRequest,
    FailRequest,
    QueueAddressesRequest,
    RequeueSubmitRequest,
    ScrapeResultRequest,
)

logger = logging.getLogger(__name__)


def handle_queue_addresses(payload: QueueAddressesRequest, store: ItemStore) -> Dict[str, Any]:
    command = QueueAddressesCommand(addresses=[
        AddressEntry(
            address_full=address.address_full,
            street_number=address.street_number,
            street_name=address.street_name,
            zip_code=address.zip_code,
            city=address.city,
            state=address.state,
            latitude=address.latitude,
            longitude=address.longitude,
        )
        for address in payload.addresses
    ])
    result = queue_addresses(command, store)
    return {"success": True, "data": result}


def handle_claim(queue_kind: QueueKind, store: ItemStore) -> Dict[str, Any]:
    """Claim the next item; data is null when the queue is empty."""
    claimed = claim_next(queue_kind, store)
    return {"success": True, "data": claimed.to_dict() if claimed else None}


def handle_record_scrape_result(property_id: int, payload: ScrapeResultRequest, store: ItemStore) -> Dict[str, Any]:
    command = RecordScrapeResultCommand(
        property_id=property_id,
        customer_name=payload.customer_name,
        customer_phone=payload.customer_phone,
        customer_email=payload.customer_email,
    )
    return {"success": True, "data": record_scrape_result(command, store).to_dict()}


def handle_complete_submission(
    property_id: int,
    payload: CompleteSubmissionRequest,
    store: ItemStore,
) -> Dict[str, Any]:
    command = CompleteSubmissionCommand(property_id=property_id, sce_case_id=payload.sce_case_id)
    return {"success": True, "data": complete_submission(command, store).to_dict()}


def handle_mark_ready(property_id: int, store: ItemStore) -> Dict[str, Any]:
    return {"success": True, "data": mark_ready_for_submission(property_id, store).to_dict()}


def handle_mark_failed(property_id: int, payload: FailRequest, store: ItemStore) -> Dict[str, Any]:
    command = MarkFailedCommand(property_id=property_id, reason=payload.reason)
    return {"success": True, "data": mark_failed(command, store).to_dict()}


def handle_requeue_submit(property_id: int, payload: RequeueSubmitRequest, store: ItemStore) -> Dict[str, Any]:
    command = RequeueSubmitCommand(property_id=property_id, reason=payload.reason)
    return {"success": True, "data": requeue_submit(command, store).to_dict()}


def handle_queue_status(store: ItemStore) -> Dict[str, Any]:
    return {"success": True, "data": get_queue_status(store)}
