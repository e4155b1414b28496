from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.orm import Session

from stockledger.dependencies import get_db, require_auth
from stockledger.schemas.financial import CashFlowRead, CashFlowWrite
from stockledger.services.cash_flow_service import create_entry, delete_entry, get_entry, list_entries

router = APIRouter(prefix="/cash-flow", tags=["Cash flow"], dependencies=[Depends(require_auth)])


@router.get("", response_model=list[CashFlowRead])
def list_cash_flow(
    limit: int = Query(100, ge=1, le=1000, description="Max entries, newest first"),
    entry_type: Optional[str] = Query(None, alias="type", pattern="^(income|expense)$"),
    date_from: Optional[date] = Query(None),
    date_to: Optional[date] = Query(None),
    db: Session = Depends(get_db),
):
    return list_entries(db, limit=limit, entry_type=entry_type, date_from=date_from, date_to=date_to)


@router.post("", response_model=CashFlowRead, status_code=status.HTTP_201_CREATED)
def create_cash_flow(payload: CashFlowWrite, db: Session = Depends(get_db)):
    return create_entry(db, payload)


@router.delete("/{entry_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_cash_flow(entry_id: int, db: Session = Depends(get_db)):
    entry = get_entry(db, entry_id)
    if entry is None:
        raise HTTPException(status_code=404, detail="Cash-flow entry not found.")
    delete_entry(db, entry)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
