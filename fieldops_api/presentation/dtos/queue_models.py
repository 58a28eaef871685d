"""Pydantic models for queue operations."""
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class AddressModel(BaseModel):
    """One address to queue for discovery."""
    model_config = ConfigDict(populate_by_name=True, allow_inf_nan=False)

    address_full: str = Field(..., alias="addressFull", min_length=1, description="Full address line")
    street_number: Optional[str] = Field(None, alias="streetNumber", description="Street number")
    street_name: Optional[str] = Field(None, alias="streetName", description="Street name")
    zip_code: Optional[str] = Field(None, alias="zipCode", description="ZIP code")
    city: Optional[str] = Field(None, description="City")
    state: Optional[str] = Field(None, description="State")
    latitude: Optional[float] = Field(None, ge=-90, le=90, description="Latitude")
    longitude: Optional[float] = Field(None, ge=-180, le=180, description="Longitude")


class QueueAddressesRequest(BaseModel):
    """Request model for queueing addresses."""
    addresses: List[AddressModel] = Field(..., min_length=1, description="Addresses to queue")


class ScrapeResultRequest(BaseModel):
    """Customer data reported by a scrape worker."""
    model_config = ConfigDict(populate_by_name=True)

    customer_name: Optional[str] = Field(None, alias="customerName", description="Customer name")
    customer_phone: Optional[str] = Field(None, alias="customerPhone", description="Customer phone")
    customer_email: Optional[str] = Field(None, alias="customerEmail", description="Customer email")


class CompleteSubmissionRequest(BaseModel):
    """Request model for completing a submission."""
    model_config = ConfigDict(populate_by_name=True)

    sce_case_id: Optional[str] = Field(None, alias="sceCaseId", description="Case id assigned by the portal")


class FailRequest(BaseModel):
    """Request model for failing an in-progress property."""
    reason: str = Field(..., min_length=1, description="Failure reason kept for audit")


class RequeueSubmitRequest(BaseModel):
    """Request model for returning a submission to the queue."""
    reason: Optional[str] = Field(None, description="Why the submission was aborted")
