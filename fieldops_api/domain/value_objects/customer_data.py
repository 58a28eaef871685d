"""Customer data value object and the ordered-fallback field merge."""
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

CUSTOMER_FIELDS = ("customer_name", "customer_phone", "customer_email")


def _present(value: Optional[str]) -> bool:
    return isinstance(value, str) and value.strip() != ""


@dataclass(frozen=True)
class CustomerData:
    """Customer contact fields returned by an extraction."""
    customer_name: Optional[str] = None
    customer_phone: Optional[str] = None
    customer_email: Optional[str] = None

    @classmethod
    def from_mapping(cls, data: Optional[Mapping[str, Any]]) -> "CustomerData":
        """Build from extractor output; accepts snake_case or camelCase keys."""
        data = data or {}
        return cls(
            customer_name=data.get("customer_name", data.get("customerName")),
            customer_phone=data.get("customer_phone", data.get("customerPhone")),
            customer_email=data.get("customer_email", data.get("customerEmail")),
        )

    def has_usable_data(self) -> bool:
        """True when at least one field is a non-empty string after trimming."""
        return any(_present(getattr(self, name)) for name in CUSTOMER_FIELDS)


def first_present(*candidates: Optional[str]) -> Optional[str]:
    """Return the first candidate that is a non-empty string, else the last candidate."""
    for candidate in candidates:
        if _present(candidate):
            return candidate
    return candidates[-1] if candidates else None


def merge_customer_fields(extracted: CustomerData, current: Mapping[str, Optional[str]]) -> Dict[str, Optional[str]]:
    """
    Merge extracted customer fields over the currently stored ones.

    For every field the extracted value wins when it is a non-empty string;
    otherwise the stored value is kept. Used by both the scrape-result path
    and the extraction run processor.

    Args:
        extracted: Values returned by the extractor
        current: Stored values keyed by field name

    Returns:
        Dict with the merged value for each customer field
    """
    return {
        name: first_present(getattr(extracted, name), current.get(name))
        for name in CUSTOMER_FIELDS
    }
