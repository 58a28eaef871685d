"""Get extraction run query."""
from dataclasses import dataclass


@dataclass(frozen=True)
class GetExtractionRunQuery:
    """Query to get an extraction run with its items."""
    run_id: int
