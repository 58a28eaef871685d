"""Update customer data by address command."""
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional


@dataclass(frozen=True)
class UpdateCustomerDataCommand:
    """Command to store customer data extracted for an address."""
    address_full: str
    customer_name: Optional[str] = None
    customer_phone: Optional[str] = None
    customer_email: Optional[str] = None
    extracted_at: Optional[datetime] = None


@dataclass(frozen=True)
class BatchUpdateCustomerDataCommand:
    """Command to apply several address updates independently."""
    updates: List[UpdateCustomerDataCommand] = field(default_factory=list)
