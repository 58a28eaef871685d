"""Cloud extraction router - Endpoints for sessions and extraction runs."""
import logging
from typing import Any, Callable, Dict

from fastapi import APIRouter, BackgroundTasks, Depends

from ...application.services.backoff import RetryPolicy
from ...config.config import get_automation_timeout_seconds
from ...domain.automation import AutomationClient
from ...domain.repositories import ExtractionRunStore, ItemStore
from ..controllers.extraction_controller import (
    handle_create_run,
    handle_create_session,
    handle_get_run,
    handle_list_sessions,
    handle_start_run,
    handle_validate_session,
    run_extraction_in_background,
)
from ..dependencies import (
    get_automation_client,
    get_extraction_run_store,
    get_item_store,
    get_retry_policy,
    get_session_validator,
    require_automation_enabled,
)
from ..dtos.extraction_models import CreateRunRequest, CreateSessionRequest

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/cloud-extraction",
    tags=["Cloud Extraction"],
    dependencies=[Depends(require_automation_enabled)],
)


@router.post("/sessions", status_code=201)
def create_session(
    payload: CreateSessionRequest,
    run_store: ExtractionRunStore = Depends(get_extraction_run_store),
) -> Dict[str, Any]:
    """Encrypt and store a portal session; the response never carries the state."""
    return handle_create_session(payload, run_store)


@router.get("/sessions", status_code=200)
def list_sessions(run_store: ExtractionRunStore = Depends(get_extraction_run_store)) -> Dict[str, Any]:
    return handle_list_sessions(run_store)


@router.post("/sessions/{session_id}/validate", status_code=200)
def validate_session(
    session_id: int,
    run_store: ExtractionRunStore = Depends(get_extraction_run_store),
    validator: Callable[[str], Dict[str, Any]] = Depends(get_session_validator),
) -> Dict[str, Any]:
    return handle_validate_session(session_id, run_store, validator)


@router.post("/runs", status_code=201)
def create_run(
    payload: CreateRunRequest,
    run_store: ExtractionRunStore = Depends(get_extraction_run_store),
) -> Dict[str, Any]:
    return handle_create_run(payload, run_store)


@router.post("/runs/{run_id}/start", status_code=202)
def start_run(
    run_id: int,
    background_tasks: BackgroundTasks,
    run_store: ExtractionRunStore = Depends(get_extraction_run_store),
    item_store: ItemStore = Depends(get_item_store),
    client: AutomationClient = Depends(get_automation_client),
    retry_policy: RetryPolicy = Depends(get_retry_policy),
) -> Dict[str, Any]:
    """
    Start a PENDING run.

    Processing continues in a background task after the 202 response.
    """
    timeout = get_automation_timeout_seconds()

    def launch(claimed_run_id: int) -> None:
        logger.info(f"Scheduling extraction run {claimed_run_id}")
        background_tasks.add_task(
            run_extraction_in_background,
            claimed_run_id,
            client,
            run_store,
            item_store,
            retry_policy,
            timeout,
        )

    return handle_start_run(run_id, run_store, launch)


@router.get("/runs/{run_id}", status_code=200)
def get_run(run_id: int, run_store: ExtractionRunStore = Depends(get_extraction_run_store)) -> Dict[str, Any]:
    return handle_get_run(run_id, run_store)
