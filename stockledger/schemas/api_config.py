from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class ApiConfigWrite(BaseModel):
    base_url: str = Field(min_length=1)
    token: str = Field(min_length=1)


class ApiConfigRead(BaseModel):
    configured: bool
    base_url: Optional[str] = None
    token_hint: Optional[str] = None
    updated_at: Optional[datetime] = None
