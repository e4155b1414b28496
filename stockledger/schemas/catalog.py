from datetime import datetime
from typing import Any, Literal, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from stockledger.schemas.marketplace import MarketplaceRead


class AbcCurveEntry(BaseModel):
    product_id: Optional[str]
    name: Optional[str]
    quantity: float
    value: float
    share: float
    cumulative_share: float
    abc_class: Literal["A", "B", "C"]


class CatalogPage(BaseModel):
    page: int
    limit: int
    total: Optional[int]
    items: list[dict[str, Any]]


class AbcClassTotals(BaseModel):
    count: int
    value: float


class AbcCurve(BaseModel):
    summary: dict[Literal["A", "B", "C"], AbcClassTotals]
    items: list[AbcCurveEntry]


class StockMovement(BaseModel):
    """One entry of a product's stock history (entry, exit, adjustment, return)."""

    id: Optional[Union[int, str]] = None
    type: Optional[str] = None
    quantity: Optional[float] = None
    previous_stock: Optional[float] = Field(
        None, validation_alias=AliasChoices("previousStock", "previous_stock")
    )
    new_stock: Optional[float] = Field(None, validation_alias=AliasChoices("newStock", "new_stock"))
    reason: Optional[str] = None
    created_at: Optional[Union[datetime, str]] = Field(
        None, validation_alias=AliasChoices("createdAt", "created_at")
    )

    model_config = ConfigDict(populate_by_name=True)


class ProductDetail(BaseModel):
    product: Any
    movements: list[StockMovement]
    marketplaces: MarketplaceRead
    abc_class: Optional[Literal["A", "B", "C"]] = None
