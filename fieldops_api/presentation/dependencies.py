"""Process-lifetime wiring of stores and portal collaborators for the routers."""
import logging
from functools import lru_cache
from typing import Any, Callable, Dict, Optional

from ..application.services.backoff import RetryPolicy
from ..config.config import (
    get_extraction_retry_config,
    get_postgres_dsn,
    is_automation_enabled,
)
from ..domain.automation import AutomationClient
from ..domain.errors import ServiceUnavailableError
from ..infrastructure.adapters.postgres import PostgresClient
from ..infrastructure.repositories.document_repository import PostgresDocumentStore
from ..infrastructure.repositories.extraction_run_repository import PostgresExtractionRunStore
from ..infrastructure.repositories.property_repository import PostgresItemStore

logger = logging.getLogger(__name__)

SessionValidator = Callable[[str], Dict[str, Any]]

_automation_client: Optional[AutomationClient] = None
_session_validator: Optional[SessionValidator] = None


@lru_cache(maxsize=1)
def get_postgres_client() -> PostgresClient:
    """Single Postgres client for the process, built from the environment."""
    return PostgresClient(get_postgres_dsn())


def get_item_store() -> PostgresItemStore:
    return PostgresItemStore(get_postgres_client())


def get_document_store() -> PostgresDocumentStore:
    return PostgresDocumentStore(get_postgres_client())


def get_extraction_run_store() -> PostgresExtractionRunStore:
    return PostgresExtractionRunStore(get_postgres_client())


def register_automation_client(
    client: Optional[AutomationClient],
    validator: Optional[SessionValidator] = None,
) -> None:
    """Install the portal automation client (and optional session validator) for this process."""
    global _automation_client, _session_validator
    _automation_client = client
    _session_validator = validator
    logger.info(f"Automation client registered: {type(client).__name__ if client else None}")


def require_automation_enabled() -> None:
    """Gate for every cloud extraction endpoint."""
    if not is_automation_enabled():
        raise ServiceUnavailableError("SCE cloud extraction is disabled. Set SCE_AUTOMATION_ENABLED=true.")


def get_automation_client() -> AutomationClient:
    if _automation_client is None:
        raise ServiceUnavailableError("No SCE automation client is configured")
    return _automation_client


def get_session_validator() -> SessionValidator:
    if _session_validator is None:
        raise ServiceUnavailableError("No SCE session validator is configured")
    return _session_validator


def get_retry_policy() -> RetryPolicy:
    return RetryPolicy(**get_extraction_retry_config())
