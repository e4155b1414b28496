from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from stockledger.dependencies import get_db, require_auth
from stockledger.schemas.marketplace import MarketplaceFlags, MarketplaceRead
from stockledger.services.marketplace_service import get_flags, list_flagged, save_flags

router = APIRouter(prefix="/marketplaces", tags=["Marketplaces"], dependencies=[Depends(require_auth)])


@router.get("", response_model=list[MarketplaceRead])
def list_marketplace_flags(db: Session = Depends(get_db)):
    return list_flagged(db)


@router.get("/{product_id}", response_model=MarketplaceRead)
def product_marketplace_flags(product_id: str, db: Session = Depends(get_db)):
    try:
        return get_flags(db, product_id)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


@router.put("/{product_id}", response_model=MarketplaceRead)
def update_product_marketplace_flags(product_id: str, payload: MarketplaceFlags, db: Session = Depends(get_db)):
    try:
        return save_flags(db, product_id, payload.model_dump())
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
