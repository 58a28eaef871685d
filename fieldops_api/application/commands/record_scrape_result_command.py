"""Record scrape result command."""
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class RecordScrapeResultCommand:
    """Command to store customer data for a claimed scrape item."""
    property_id: int
    customer_name: Optional[str] = None
    customer_phone: Optional[str] = None
    customer_email: Optional[str] = None
