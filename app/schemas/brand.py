from pydantic import BaseModel, ConfigDict
from datetime import datetime
from typing import Optional


class BrandResponse(BaseModel):
    """Schema for brand response."""
    id: int
    name: str
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
