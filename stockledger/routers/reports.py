from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from stockledger.dependencies import get_db, require_auth
from stockledger.services.report_service import build_financial_report

router = APIRouter(prefix="/reports", tags=["Reports"], dependencies=[Depends(require_auth)])


@router.get("/financial")
def financial_report(
    party_kind: Optional[str] = Query(None, pattern="^(company|person)$"),
    db: Session = Depends(get_db),
):
    return build_financial_report(db, party_kind=party_kind)
