"""Create extraction session command."""
from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class CreateSessionCommand:
    """Command to encrypt and store an automation session."""
    label: str
    session_state_json: str
    expires_at: datetime
