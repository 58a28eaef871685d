"""Automation client interface for the external SCE portal."""
from dataclasses import dataclass
from typing import Any, Dict, Optional, Protocol


@dataclass(frozen=True)
class AddressInput:
    """Address fields the portal customer search needs."""
    street_number: str
    street_name: str
    zip_code: str


class AutomationClient(Protocol):
    """Drives the portal with a decrypted session blob.

    Implementations raise on any portal-level failure; the message must carry
    enough text for shared-session classification.
    """

    def extract_customer_data(
        self,
        address: AddressInput,
        session_state: str,
        timeout: Optional[float] = None,
    ) -> Dict[str, Any]:
        ...
