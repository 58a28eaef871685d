"""Plan route command."""
from dataclasses import dataclass, field
from typing import List, Optional


@dataclass(frozen=True)
class PlanRouteCommand:
    """Command to order properties into a field route."""
    property_ids: List[int] = field(default_factory=list)
    start_latitude: Optional[float] = None
    start_longitude: Optional[float] = None
