"""Extraction controller - sessions, runs and background processing."""
import logging
from typing import Any, Callable, Dict, Optional

from ...application.commands.create_extraction_run_command import CreateExtractionRunCommand
from ...application.commands.create_session_command import CreateSessionCommand
from ...application.queries.get_extraction_run_query import GetExtractionRunQuery
from ...application.services.backoff import RetryPolicy
from ...application.use_cases.extraction_run_use_cases import (
    create_run,
    create_session,
    get_run,
    list_sessions,
    process_extraction_run,
    start_run,
    validate_session,
)
from ...config.config import get_session_encryption_key
from ...domain.automation import AutomationClient
from ...domain.repositories import ExtractionRunStore, ItemStore
from ..dtos.extraction_models import CreateRunRequest, CreateSessionRequest

logger = logging.getLogger(__name__)


def handle_create_session(payload: CreateSessionRequest, run_store: ExtractionRunStore) -> Dict[str, Any]:
    command = CreateSessionCommand(
        label=payload.label,
        session_state_json=payload.session_state_json,
        expires_at=payload.expires_at,
    )
    session = create_session(command, run_store, get_session_encryption_key)
    return {"success": True, "data": session.to_public_dict()}


def handle_list_sessions(run_store: ExtractionRunStore) -> Dict[str, Any]:
    return {"success": True, "data": list_sessions(run_store)}


def handle_validate_session(
    session_id: int,
    run_store: ExtractionRunStore,
    validator: Callable[[str], Dict[str, Any]],
) -> Dict[str, Any]:
    return {
        "success": True,
        "data": validate_session(session_id, run_store, get_session_encryption_key, validator),
    }


def handle_create_run(payload: CreateRunRequest, run_store: ExtractionRunStore) -> Dict[str, Any]:
    command = CreateExtractionRunCommand(session_id=payload.session_id, property_ids=payload.property_ids)
    return {"success": True, "data": create_run(command, run_store).to_dict()}


def run_extraction_in_background(
    run_id: int,
    client: AutomationClient,
    run_store: ExtractionRunStore,
    item_store: ItemStore,
    retry_policy: RetryPolicy,
    timeout: Optional[float],
) -> None:
    """Background task body; the run row already records any fatal error."""
    try:
        process_extraction_run(
            run_id,
            client,
            run_store,
            item_store,
            get_session_encryption_key,
            retry_policy=retry_policy,
            timeout=timeout,
        )
    except Exception as e:
        logger.error(f"Background extraction run {run_id} aborted: {e}")


def handle_start_run(
    run_id: int,
    run_store: ExtractionRunStore,
    launcher: Callable[[int], None],
) -> Dict[str, Any]:
    return {"success": True, "data": start_run(run_id, run_store, launcher)}


def handle_get_run(run_id: int, run_store: ExtractionRunStore) -> Dict[str, Any]:
    return {"success": True, "data": get_run(GetExtractionRunQuery(run_id=run_id), run_store).to_dict()}
