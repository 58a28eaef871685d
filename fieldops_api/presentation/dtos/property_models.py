"""Pydantic models for field visit operations."""
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ...domain.entities.document import DocumentType


class AddDocumentRequest(BaseModel):
    """Request model for recording a document."""
    model_config = ConfigDict(populate_by_name=True)

    doc_type: DocumentType = Field(..., alias="docType", description="Document type")
    file_name: str = Field(..., alias="fileName", min_length=1, description="Original file name")
    file_path: Optional[str] = Field(None, alias="filePath", description="Storage location")


class RoutePlanRequest(BaseModel):
    """Request model for ordering properties into a route."""
    model_config = ConfigDict(populate_by_name=True, allow_inf_nan=False)

    property_ids: List[int] = Field(..., alias="propertyIds", min_length=1, description="Properties to visit")
    start_lat: Optional[float] = Field(None, alias="startLat", description="Start latitude")
    start_lon: Optional[float] = Field(None, alias="startLon", description="Start longitude")


class UpdateByAddressRequest(BaseModel):
    """Customer data extracted for one address."""
    model_config = ConfigDict(populate_by_name=True)

    address_full: str = Field(..., alias="addressFull", min_length=1, description="Full address line")
    customer_name: Optional[str] = Field(None, alias="customerName", description="Customer name")
    customer_phone: Optional[str] = Field(None, alias="customerPhone", description="Customer phone")
    customer_email: Optional[str] = Field(None, alias="customerEmail", description="Customer email")
    extracted_at: Optional[datetime] = Field(None, alias="extractedAt", description="When the data was extracted")


class BatchUpdateRequest(BaseModel):
    """Several address updates applied independently."""
    updates: List[UpdateByAddressRequest] = Field(..., max_length=500, description="Address updates")
