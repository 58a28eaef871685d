"""List properties query."""
from dataclasses import dataclass
from typing import Optional

from ...domain.entities.property import PropertyStatus


@dataclass(frozen=True)
class ListPropertiesQuery:
    """Query to page through properties, optionally filtered by status."""
    status: Optional[PropertyStatus] = None
    limit: int = 50
    offset: int = 0
