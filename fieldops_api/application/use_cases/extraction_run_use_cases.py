"""Extraction run use cases - sessions, runs and the batch extraction processor."""
import json
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from ...domain.automation import AddressInput, AutomationClient
from ...domain.entities.extraction_run import (
    ExtractionRun,
    ExtractionRunItem,
    ExtractionRunItemStatus,
    ExtractionRunStatus,
    ExtractionSession,
    final_run_status,
)
from ...domain.errors import (
    ConflictError,
    FieldOpsError,
    InfrastructureError,
    NotFoundError,
    SharedSessionError,
    ValidationError,
)
from ...domain.repositories import ExtractionRunStore, ItemStore
from ...domain.value_objects.customer_data import CustomerData
from ...domain.value_objects.item_outcome import FailureKind, ItemOutcome
from ...infrastructure.crypto.session_vault import decrypt_session, encrypt_session
from ..commands.create_extraction_run_command import CreateExtractionRunCommand
from ..commands.create_session_command import CreateSessionCommand
from ..queries.get_extraction_run_query import GetExtractionRunQuery
from ..services.backoff import SINGLE_ATTEMPT, RetryPolicy
from ..services.failure_classifier import (
    classify_failure,
    is_shared_session_failure,
    shared_failure_summary,
)
from .claim_use_cases import store_customer_data

logger = logging.getLogger(__name__)

MAX_LABEL_LENGTH = 200


def _resolve_key(get_encryption_key: Callable[[], str]) -> str:
    try:
        return get_encryption_key()
    except RuntimeError as e:
        raise InfrastructureError(str(e))


def _to_naive_utc(value: datetime) -> datetime:
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


# ---------------------------------------------------------------------------
# Sessions
# ---------------------------------------------------------------------------

def create_session(
    command: CreateSessionCommand,
    run_store: ExtractionRunStore,
    get_encryption_key: Callable[[], str],
) -> ExtractionSession:
    """Validate, encrypt and store an automation session."""
    label = (command.label or "").strip()
    if not label:
        raise ValidationError("label cannot be empty")
    if len(label) > MAX_LABEL_LENGTH:
        raise ValidationError(f"label must be {MAX_LABEL_LENGTH} characters or less")

    if not command.session_state_json or not command.session_state_json.strip():
        raise ValidationError("sessionStateJson is required and must be a JSON string")
    try:
        json.loads(command.session_state_json)
    except ValueError:
        raise ValidationError("sessionStateJson must be valid JSON")

    expires_at = _to_naive_utc(command.expires_at)
    if expires_at <= datetime.utcnow():
        raise ValidationError("expiresAt must be in the future")

    encrypted_state = encrypt_session(command.session_state_json, _resolve_key(get_encryption_key))
    session = run_store.create_session(label, encrypted_state, expires_at)
    logger.info(f"Created extraction session {session.id} ({label})")
    return session


def list_sessions(run_store: ExtractionRunStore) -> List[Dict[str, Any]]:
    """Session metadata, newest first, without encrypted state."""
    return [session.to_public_dict() for session in run_store.list_sessions()]


def validate_session(
    session_id: int,
    run_store: ExtractionRunStore,
    get_encryption_key: Callable[[], str],
    validator: Callable[[str], Dict[str, Any]],
) -> Dict[str, Any]:
    """
    Check whether a stored session can still reach the portal.

    Portal-side failures are reported as valid=False rather than raised.
    """
    session = run_store.get_session(session_id)
    if session is None:
        raise NotFoundError("ExtractionSession", session_id)

    result: Dict[str, Any] = {
        "session_id": session_id,
        "checked_at": datetime.utcnow().isoformat(),
        "valid": False,
    }
    if not session.is_active:
        result["message"] = "Session is inactive. Create a new login bridge session."
        return result
    if session.is_expired():
        result["message"] = "Session expired. Create a new login bridge session."
        return result

    session_state = decrypt_session(session.encrypted_state, _resolve_key(get_encryption_key))
    try:
        details = validator(session_state) or {}
    except InfrastructureError:
        raise
    except Exception as e:
        reason = str(e) or "Unknown session validation failure."
        logger.warning(f"Extraction session {session_id} validation failed: {reason}")
        result["message"] = reason
        return result

    result.update(valid=True, message="Session can access SCE customer-search.")
    if details.get("current_url"):
        result["current_url"] = details["current_url"]
    return result


# ---------------------------------------------------------------------------
# Runs
# ---------------------------------------------------------------------------

def create_run(command: CreateExtractionRunCommand, run_store: ExtractionRunStore) -> ExtractionRun:
    """Create a PENDING run with one QUEUED item per property."""
    if isinstance(command.session_id, bool) or not isinstance(command.session_id, int) or command.session_id <= 0:
        raise ValidationError("sessionId must be a positive integer")
    if not command.property_ids:
        raise ValidationError("propertyIds must be a non-empty array")
    if any(isinstance(pid, bool) or not isinstance(pid, int) or pid <= 0 for pid in command.property_ids):
        raise ValidationError("propertyIds must contain only positive integers")

    if run_store.get_session(command.session_id) is None:
        raise NotFoundError("ExtractionSession", command.session_id)

    run = run_store.create_run(command.session_id, list(command.property_ids))
    logger.info(f"Created extraction run {run.id} with {len(command.property_ids)} items")
    return run


def start_run(
    run_id: int,
    run_store: ExtractionRunStore,
    launcher: Callable[[int], None],
) -> Dict[str, Any]:
    """
    Claim a PENDING run for processing and hand it to the launcher.

    The PENDING -> RUNNING flip is conditional so only one caller ever
    launches a given run.
    """
    run = run_store.get_run(run_id)
    if run is None:
        raise NotFoundError("ExtractionRun", run_id)
    if run.status != ExtractionRunStatus.PENDING:
        raise ConflictError(f"Run {run_id} cannot be started from status {run.status.value}")
    if not run_store.claim_run(run_id):
        current = run_store.get_run(run_id)
        status = current.status.value if current else "unknown"
        raise ConflictError(f"Run {run_id} was started by another request (status {status})")

    launcher(run_id)
    return {"id": run_id, "status": ExtractionRunStatus.RUNNING.value}


def get_run(query: GetExtractionRunQuery, run_store: ExtractionRunStore) -> ExtractionRun:
    run = run_store.get_run(query.run_id)
    if run is None:
        raise NotFoundError("ExtractionRun", query.run_id)
    return run


# ---------------------------------------------------------------------------
# Processor
# ---------------------------------------------------------------------------

@dataclass
class _RunCounters:
    processed: int = 0
    success: int = 0
    failure: int = 0

    def record(self, outcome: ItemOutcome) -> None:
        self.processed += 1
        if outcome.succeeded:
            self.success += 1
        else:
            self.failure += 1

    def record_skipped(self, count: int) -> None:
        self.processed += count
        self.failure += count

    def as_fields(self) -> Dict[str, int]:
        return {
            "processed_count": self.processed,
            "success_count": self.success,
            "failure_count": self.failure,
        }


def _classify_error(error: BaseException) -> FailureKind:
    if isinstance(error, SharedSessionError):
        return FailureKind.SHARED_SESSION
    return classify_failure(str(error))


def _is_retriable(error: BaseException) -> bool:
    if isinstance(error, (SharedSessionError, InfrastructureError)):
        return False
    return not is_shared_session_failure(str(error))


def _fail_item(
    run_store: ExtractionRunStore,
    item: ExtractionRunItem,
    kind: FailureKind,
    message: str,
) -> ItemOutcome:
    run_store.update_run_item(item.id, ExtractionRunItemStatus.FAILED, message)
    return ItemOutcome.failure(item.id, item.property_id, kind, message)


def _process_item(
    item: ExtractionRunItem,
    client: AutomationClient,
    run_store: ExtractionRunStore,
    item_store: ItemStore,
    session_state: str,
    retry_policy: RetryPolicy,
    timeout: Optional[float],
) -> ItemOutcome:
    """Run one extraction attempt; infrastructure errors propagate, everything else is an outcome."""
    run_store.update_run_item(item.id, ExtractionRunItemStatus.PROCESSING, None)

    prop = item_store.find_by_id(item.property_id)
    if prop is None:
        return _fail_item(run_store, item, FailureKind.ITEM_NOT_FOUND, f"Property {item.property_id} not found")

    address = AddressInput(
        street_number=prop.street_number or "",
        street_name=prop.street_name or "",
        zip_code=prop.zip_code or "",
    )
    try:
        raw = retry_policy.execute(
            lambda: client.extract_customer_data(address, session_state, timeout=timeout),
            should_retry=_is_retriable,
        )
    except InfrastructureError:
        raise
    except Exception as e:
        message = str(e) or "Unknown extraction error"
        return _fail_item(run_store, item, _classify_error(e), message)

    data = CustomerData.from_mapping(raw)
    if not data.has_usable_data():
        return _fail_item(
            run_store,
            item,
            FailureKind.NO_DATA,
            f"No customer data extracted for property {prop.id}; keeping status as {prop.status.value}",
        )

    try:
        store_customer_data(item_store, prop, data)
    except ConflictError as e:
        return _fail_item(run_store, item, FailureKind.ITEM_ERROR, e.message)

    run_store.update_run_item(item.id, ExtractionRunItemStatus.SUCCEEDED, None)
    return ItemOutcome.success(item.id, prop.id, data)


def process_extraction_run(
    run_id: int,
    client: AutomationClient,
    run_store: ExtractionRunStore,
    item_store: ItemStore,
    get_encryption_key: Callable[[], str],
    retry_policy: RetryPolicy = SINGLE_ATTEMPT,
    timeout: Optional[float] = None,
) -> None:
    """
    Process every QUEUED item of a run against one decrypted session.

    Items run strictly in ascending id order. Per-item failures are recorded
    and the loop continues. A failure classified as a shared-session failure
    fails all remaining QUEUED items with a summary message and stops the
    loop. Any other exception marks the run FAILED with the counters gathered
    so far and is re-raised.

    Safe to re-invoke on a run left RUNNING after a crash: only items still
    QUEUED are picked up. Never run two processors on the same run.

    Args:
        run_id: Extraction run to process
        client: Automation client for the external portal
        run_store: Extraction run store
        item_store: Item store holding the properties
        get_encryption_key: Returns the session encryption key
        retry_policy: Backoff for transient per-item extractor errors
        timeout: Seconds handed to each extraction call
    """
    run = run_store.get_run(run_id)
    if run is None:
        raise NotFoundError("ExtractionRun", run_id)

    counters = _RunCounters(run.processed_count, run.success_count, run.failure_count)
    started_at = run.started_at or datetime.utcnow()
    shared_failure_message: Optional[str] = None

    try:
        session = run_store.get_session(run.session_id)
        if session is None:
            raise NotFoundError("ExtractionSession", run.session_id)
        session_state = decrypt_session(session.encrypted_state, _resolve_key(get_encryption_key))

        run_store.update_run(run_id, {
            "status": ExtractionRunStatus.RUNNING,
            "started_at": started_at,
            "error_summary": None,
        })

        queued = run.queued_items()
        logger.info(f"Processing extraction run {run_id}: {len(queued)} queued items")
        outcomes: List[ItemOutcome] = []

        for index, item in enumerate(queued):
            outcome = _process_item(item, client, run_store, item_store, session_state, retry_policy, timeout)
            outcomes.append(outcome)
            counters.record(outcome)

            if outcome.is_shared_session_failure:
                shared_failure_message = outcome.error
                remaining_ids = [queued_item.id for queued_item in queued[index + 1:]]
                skipped = run_store.fail_queued_items(
                    run_id,
                    remaining_ids,
                    shared_failure_summary(outcome.error),
                )
                counters.record_skipped(skipped)
                logger.warning(
                    f"Extraction run {run_id} stopped after shared session failure on item {item.id}; "
                    f"{skipped} remaining items failed: {outcome.error}"
                )
                break

        final_status = final_run_status(counters.success, counters.failure)
        run_store.update_run(run_id, {
            "status": final_status,
            **counters.as_fields(),
            "finished_at": datetime.utcnow(),
            "error_summary": shared_failure_message,
        })
        logger.info(
            f"Extraction run {run_id} finished with {final_status.value} "
            f"({sum(1 for o in outcomes if o.succeeded)}/{len(outcomes)} attempted items succeeded)"
        )
    except Exception as e:
        message = e.message if isinstance(e, FieldOpsError) else str(e)
        logger.error(f"Extraction run {run_id} failed: {message or type(e).__name__}")
        run_store.update_run(run_id, {
            "status": ExtractionRunStatus.FAILED,
            **counters.as_fields(),
            "started_at": started_at,
            "finished_at": datetime.utcnow(),
            "error_summary": message or "Unexpected extraction failure",
        })
        raise
