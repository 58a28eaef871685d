"""Queue use cases - atomic claims and state-machine-gated transitions."""
import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional

from ...domain.entities.property import (
    IN_PROGRESS_STATUSES,
    Property,
    PropertyStatus,
    ensure_transition,
)
from ...domain.errors import ConflictError, NotFoundError, ValidationError
from ...domain.repositories import ItemStore
from ...domain.value_objects.customer_data import CustomerData, merge_customer_fields
from ..commands.queue_addresses_command import QueueAddressesCommand
from ..commands.record_scrape_result_command import RecordScrapeResultCommand
from ..commands.submission_outcome_command import (
    CompleteSubmissionCommand,
    MarkFailedCommand,
    RequeueSubmitCommand,
)

logger = logging.getLogger(__name__)


class QueueKind(str, Enum):
    """Work queues pollers can claim from."""
    SCRAPE = "scrape"
    SUBMIT = "submit"


@dataclass(frozen=True)
class ClaimRule:
    from_status: PropertyStatus
    to_status: PropertyStatus
    order_by: str


CLAIM_RULES: Dict[QueueKind, ClaimRule] = {
    QueueKind.SCRAPE: ClaimRule(
        from_status=PropertyStatus.PENDING_SCRAPE,
        to_status=PropertyStatus.SCRAPING_IN_PROGRESS,
        order_by="created_at",
    ),
    QueueKind.SUBMIT: ClaimRule(
        from_status=PropertyStatus.VISITED,
        to_status=PropertyStatus.SUBMITTING_IN_PROGRESS,
        order_by="updated_at",
    ),
}


def claim_next(queue_kind: QueueKind, store: ItemStore) -> Optional[Property]:
    """
    Claim the next property from a queue - atomic conditional update.

    Selection and the status flip run in one storage transaction. A lost race
    (zero rows updated) is reported exactly like an empty queue.

    Args:
        queue_kind: Which queue to claim from
        store: Item store

    Returns:
        The claimed property, or None when no work is available
    """
    rule = CLAIM_RULES[queue_kind]
    ensure_transition(rule.from_status, rule.to_status)

    with store.transaction() as tx:
        candidate = tx.find_first_by_status(rule.from_status, rule.order_by)
        if candidate is None:
            return None

        claimed = tx.conditional_update(
            candidate.id,
            rule.from_status,
            {"status": rule.to_status},
        )

    if claimed is None:
        logger.info(f"Claim on property {candidate.id} lost to another worker (queue={queue_kind.value})")
        return None

    logger.info(f"Claimed property {claimed.id} from {queue_kind.value} queue")
    return claimed


def load_property(store: ItemStore, property_id: int) -> Property:
    prop = store.find_by_id(property_id)
    if prop is None:
        raise NotFoundError("Property", property_id)
    return prop


def apply_transition(
    store: ItemStore,
    prop: Property,
    target: PropertyStatus,
    fields: Optional[Dict[str, Any]] = None,
) -> Property:
    """Validate against the transition table and write conditionally on the status just read."""
    ensure_transition(prop.status, target)
    changes = dict(fields or {})
    changes["status"] = target
    updated = store.conditional_update(prop.id, prop.status, changes)
    if updated is None:
        raise ConflictError(
            f"Property {prop.id} changed status concurrently; expected {prop.status.value}"
        )
    return updated


def store_customer_data(
    store: ItemStore,
    prop: Property,
    extracted: CustomerData,
    extracted_at: Optional[datetime] = None,
) -> Property:
    """
    Merge extracted customer data into a property and move it to READY_FOR_FIELD.

    A property already READY_FOR_FIELD is refreshed in place. The write is
    conditional on the status read by the caller.

    Raises:
        ConflictError: No usable customer data, the transition is not allowed,
            or the status changed concurrently
    """
    if not extracted.has_usable_data():
        raise ConflictError(
            f"No customer data extracted for property {prop.id}; keeping status as {prop.status.value}"
        )
    if prop.status != PropertyStatus.READY_FOR_FIELD:
        ensure_transition(prop.status, PropertyStatus.READY_FOR_FIELD)

    fields: Dict[str, Any] = merge_customer_fields(extracted, {
        "customer_name": prop.customer_name,
        "customer_phone": prop.customer_phone,
        "customer_email": prop.customer_email,
    })
    fields.update(
        data_extracted=True,
        extracted_at=extracted_at or datetime.utcnow(),
        status=PropertyStatus.READY_FOR_FIELD,
    )
    updated = store.conditional_update(prop.id, prop.status, fields)
    if updated is None:
        raise ConflictError(
            f"Property {prop.id} changed status concurrently; expected {prop.status.value}"
        )
    return updated


def record_scrape_result(command: RecordScrapeResultCommand, store: ItemStore) -> Property:
    """
    Store customer data for a claimed scrape item and move it to READY_FOR_FIELD.

    A result without usable customer data writes nothing; the worker either
    retries or fails the claim.
    """
    prop = load_property(store, command.property_id)
    if prop.status != PropertyStatus.SCRAPING_IN_PROGRESS:
        raise ConflictError(
            f"Scrape results only accepted in SCRAPING_IN_PROGRESS. Current status: {prop.status.value}"
        )

    extracted = CustomerData(
        customer_name=command.customer_name,
        customer_phone=command.customer_phone,
        customer_email=command.customer_email,
    )
    return store_customer_data(store, prop, extracted)


def complete_submission(command: CompleteSubmissionCommand, store: ItemStore) -> Property:
    """Mark a submitting property as COMPLETE with its portal case id."""
    prop = load_property(store, command.property_id)
    fields = {"sce_case_id": command.sce_case_id} if command.sce_case_id else {}
    return apply_transition(store, prop, PropertyStatus.COMPLETE, fields)


def mark_ready_for_submission(property_id: int, store: ItemStore) -> Property:
    """Park a submitting property for manual final submission."""
    prop = load_property(store, property_id)
    return apply_transition(store, prop, PropertyStatus.READY_FOR_SUBMISSION)


def mark_failed(command: MarkFailedCommand, store: ItemStore) -> Property:
    """Fail a claimed in-progress property, keeping the reason for audit."""
    if not command.reason or not command.reason.strip():
        raise ValidationError("reason is required")

    prop = load_property(store, command.property_id)
    if prop.status not in IN_PROGRESS_STATUSES:
        raise ConflictError(
            f"Only in-progress properties can be failed. Current status: {prop.status.value}"
        )

    updated = apply_transition(store, prop, PropertyStatus.FAILED, {"failure_reason": command.reason.strip()})
    logger.warning(f"Property {prop.id} marked as failed: {command.reason}")
    return updated


def requeue_submit(command: RequeueSubmitCommand, store: ItemStore) -> Property:
    """Compensate an aborted submission: SUBMITTING_IN_PROGRESS -> VISITED."""
    prop = load_property(store, command.property_id)
    if prop.status != PropertyStatus.SUBMITTING_IN_PROGRESS:
        raise ConflictError(
            f"Requeue only allowed from SUBMITTING_IN_PROGRESS. Current status: {prop.status.value}"
        )

    updated = apply_transition(store, prop, PropertyStatus.VISITED)
    logger.info(f"Property {prop.id} requeued for submission: {command.reason or 'no reason given'}")
    return updated


def queue_addresses(command: QueueAddressesCommand, store: ItemStore) -> Dict[str, int]:
    """
    Queue addresses for discovery in PENDING_SCRAPE.

    Duplicates inside one request are collapsed and addresses that already
    exist are skipped rather than failing the request.

    Returns:
        {"count": created, "skipped_count": already existing}
    """
    if not command.addresses:
        raise ValidationError("addresses must be a non-empty array")

    unique = {}
    for entry in command.addresses:
        address = entry.address_full.strip() if entry.address_full else ""
        if not address:
            raise ValidationError("addressFull is required for every address")
        unique.setdefault(address, entry)

    to_create = []
    skipped = 0
    for address, entry in unique.items():
        if store.find_by_address(address) is not None:
            skipped += 1
            continue
        try:
            to_create.append(Property(
                id=0,
                address_full=address,
                street_number=entry.street_number,
                street_name=entry.street_name,
                zip_code=entry.zip_code,
                city=entry.city,
                state=entry.state,
                latitude=entry.latitude,
                longitude=entry.longitude,
                status=PropertyStatus.PENDING_SCRAPE,
            ))
        except ValueError as e:
            raise ValidationError(str(e))

    created = store.create_many(to_create) if to_create else 0
    # Rows lost to a concurrent insert of the same address count as skipped.
    skipped += len(to_create) - created
    logger.info(f"Queued {created} addresses ({skipped} skipped)")
    return {"count": created, "skipped_count": skipped}


def get_queue_status(store: ItemStore) -> Dict[str, int]:
    """Property counts per lifecycle status."""
    return {status.value: store.count(status) for status in PropertyStatus}
