"""Create extraction run command."""
from dataclasses import dataclass, field
from typing import List


@dataclass(frozen=True)
class CreateExtractionRunCommand:
    """Command to queue properties for extraction under one session."""
    session_id: int
    property_ids: List[int] = field(default_factory=list)
