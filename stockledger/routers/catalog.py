import logging

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from stockledger.core.constants import GENERIC_ERROR
from stockledger.dependencies import get_db, require_auth
from stockledger.schemas.catalog import AbcCurve, CatalogPage, ProductDetail, StockMovement
from stockledger.services.abc_service import abc_summary, class_for_product, classify_products
from stockledger.services.api_config_service import build_catalog_client
from stockledger.services.catalog_client import CatalogAPIError
from stockledger.services.marketplace_service import get_flags

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/catalog", tags=["Catalog"], dependencies=[Depends(require_auth)])


def _client(db: Session):
    try:
        return build_catalog_client(db)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


def _upstream_failure(exc: CatalogAPIError) -> HTTPException:
    logger.exception("Catalog request failed", extra={"status_code": exc.status_code})
    return HTTPException(status_code=500, detail=GENERIC_ERROR)


@router.get("/products", response_model=CatalogPage)
def browse_products(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    search: str = Query("", max_length=200),
    db: Session = Depends(get_db),
):
    client = _client(db)
    try:
        return client.list_products(page=page, limit=limit, search=search.strip())
    except CatalogAPIError as exc:
        raise _upstream_failure(exc) from exc


@router.get("/abc-curve", response_model=AbcCurve)
def abc_curve(db: Session = Depends(get_db)):
    client = _client(db)
    try:
        products, _pages = client.fetch_all_products()
    except CatalogAPIError as exc:
        raise _upstream_failure(exc) from exc
    entries = classify_products(products)
    return {"summary": abc_summary(entries), "items": entries}


@router.get("/products/{product_id}", response_model=ProductDetail)
def product_detail(
    product_id: str,
    include_abc: bool = Query(False, description="Walk the whole catalog to rank the product"),
    db: Session = Depends(get_db),
):
    client = _client(db)
    abc_class = None
    try:
        product = client.fetch_product(product_id)
        movements = client.fetch_product_movements(product_id)
        if include_abc:
            products, _pages = client.fetch_all_products()
            abc_class = class_for_product(classify_products(products), product_id)
    except CatalogAPIError as exc:
        if exc.status_code == 404:
            raise HTTPException(status_code=404, detail="Product not found.") from exc
        raise _upstream_failure(exc) from exc
    return {
        "product": product,
        "movements": movements,
        "marketplaces": get_flags(db, product_id),
        "abc_class": abc_class,
    }


@router.get("/products/{product_id}/movements", response_model=list[StockMovement])
def product_movements(product_id: str, db: Session = Depends(get_db)):
    client = _client(db)
    try:
        return client.fetch_product_movements(product_id)
    except CatalogAPIError as exc:
        raise _upstream_failure(exc) from exc
