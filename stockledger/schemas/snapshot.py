from datetime import date, datetime
from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class SnapshotTriggerRequest(BaseModel):
    # Both fields are optional here so a missing value becomes a 400 from the
    # service instead of a 422 from request validation.
    api_url: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("apiUrl", "api_url"),
    )
    api_token: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("apiToken", "api_token"),
    )

    model_config = ConfigDict(populate_by_name=True)


class SnapshotStats(BaseModel):
    total_products: int
    total_stock: float
    total_value: float
    low_stock_products: int
    out_of_stock_products: int

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SnapshotRead(BaseModel):
    id: int
    date: date
    total_products: int
    total_stock: float
    total_value: float
    low_stock_products: int
    out_of_stock_products: int
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class SnapshotTriggerResponse(BaseModel):
    success: bool = True
    snapshot: SnapshotRead
    stats: SnapshotStats


class StockTrendPoint(BaseModel):
    date: date
    stock: float
    value: float
