from pydantic import BaseModel, ConfigDict


class MarketplaceFlags(BaseModel):
    amazon: bool = False
    mercado_livre: bool = False
    image_edited: bool = False


class MarketplaceRead(MarketplaceFlags):
    product_id: str

    model_config = ConfigDict(from_attributes=True)
