"""
Fields shared by the read models built from stored rows.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from ..constants import Limits


class StoredRecord(BaseModel):
    """Row id and audit timestamps, read straight off an ORM object."""

    model_config = ConfigDict(from_attributes=True, extra="ignore")

    id: str = Field(..., description="UUID primary key")
    created_at: datetime
    updated_at: datetime


class TenantOwned(BaseModel):
    """A row that belongs to exactly one tenant."""

    tenant_id: str = Field(..., min_length=1, max_length=Limits.TENANT_ID_LENGTH)
