"""Queue addresses command."""
from dataclasses import dataclass, field
from typing import List, Optional


@dataclass(frozen=True)
class AddressEntry:
    """One address to queue for discovery."""
    address_full: str
    street_number: Optional[str] = None
    street_name: Optional[str] = None
    zip_code: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None


@dataclass(frozen=True)
class QueueAddressesCommand:
    """Command to queue addresses in PENDING_SCRAPE."""
    addresses: List[AddressEntry] = field(default_factory=list)
