"""Classification of extraction errors into item-level or shared-session failures."""
from typing import Tuple

from ...domain.value_objects.item_outcome import FailureKind

SHARED_SESSION_FAILURE_PATTERNS: Tuple[str, ...] = (
    "sce login required",
    "sce session expired",
    "does not have access to customer-search",
    "landed on",
    "could not find sce address fields",
    "could not find sce zip field",
)

SHARED_FAILURE_SUMMARY_PREFIX = "Skipped after shared SCE session failure"


def is_shared_session_failure(message: str) -> bool:
    """Check whether an error message points at the session rather than the item."""
    if not message:
        return False
    normalized = message.lower()
    return any(pattern in normalized for pattern in SHARED_SESSION_FAILURE_PATTERNS)


def classify_failure(message: str) -> FailureKind:
    """Map an extractor error message to its failure kind."""
    if is_shared_session_failure(message):
        return FailureKind.SHARED_SESSION
    return FailureKind.ITEM_ERROR


def shared_failure_summary(message: str) -> str:
    """Error recorded on items skipped by the short-circuit."""
    return f"{SHARED_FAILURE_SUMMARY_PREFIX}: {message}"
