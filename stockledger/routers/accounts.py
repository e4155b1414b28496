from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.orm import Session

from stockledger.dependencies import get_db, require_auth
from stockledger.schemas.financial import (
    AccountPayableRead,
    AccountPayableWrite,
    AccountReceivableRead,
    AccountReceivableWrite,
    SettleRequest,
)
from stockledger.services.account_service import (
    PAYABLES,
    RECEIVABLES,
    AccountKind,
    cancel_account,
    create_account,
    delete_account,
    get_account,
    list_accounts,
    settle_account,
    to_dict,
    update_account,
)


def build_account_router(kind: AccountKind, *, prefix: str, tag: str, write_schema, read_schema) -> APIRouter:
    router = APIRouter(prefix=prefix, tags=[tag], dependencies=[Depends(require_auth)])

    def _load(db: Session, account_id: int):
        account = get_account(db, kind, account_id)
        if account is None:
            raise HTTPException(status_code=404, detail="Account not found.")
        return account

    @router.get("", response_model=list[read_schema])
    def list_items(
        status_filter: Optional[str] = Query(None, alias="status", description="Effective status, or all"),
        date_from: Optional[date] = Query(None, description="Due on or after"),
        date_to: Optional[date] = Query(None, description="Due on or before"),
        search: Optional[str] = Query(None, description="Description, party or document number"),
        party_kind: Optional[str] = Query(None, pattern="^(company|person)$"),
        db: Session = Depends(get_db),
    ):
        try:
            return list_accounts(
                db,
                kind,
                status=status_filter,
                date_from=date_from,
                date_to=date_to,
                search=search,
                party_kind=party_kind,
            )
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc

    @router.get("/{account_id}", response_model=read_schema)
    def get_item(account_id: int, db: Session = Depends(get_db)):
        return to_dict(_load(db, account_id))

    @router.post("", response_model=read_schema, status_code=status.HTTP_201_CREATED)
    def create_item(payload: write_schema, db: Session = Depends(get_db)):
        return to_dict(create_account(db, kind, payload))

    @router.put("/{account_id}", response_model=read_schema)
    def update_item(account_id: int, payload: write_schema, db: Session = Depends(get_db)):
        try:
            account = update_account(db, kind, _load(db, account_id), payload)
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        return to_dict(account)

    @router.post("/{account_id}/settle", response_model=read_schema)
    def settle_item(account_id: int, payload: SettleRequest, db: Session = Depends(get_db)):
        try:
            account = settle_account(db, kind, _load(db, account_id), payload)
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        return to_dict(account)

    @router.post("/{account_id}/cancel", response_model=read_schema)
    def cancel_item(account_id: int, db: Session = Depends(get_db)):
        try:
            account = cancel_account(db, kind, _load(db, account_id))
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        return to_dict(account)

    @router.delete("/{account_id}", status_code=status.HTTP_204_NO_CONTENT)
    def delete_item(account_id: int, db: Session = Depends(get_db)):
        delete_account(db, kind, _load(db, account_id))
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    return router


payables_router = build_account_router(
    PAYABLES,
    prefix="/payables",
    tag="Payables",
    write_schema=AccountPayableWrite,
    read_schema=AccountPayableRead,
)

receivables_router = build_account_router(
    RECEIVABLES,
    prefix="/receivables",
    tag="Receivables",
    write_schema=AccountReceivableWrite,
    read_schema=AccountReceivableRead,
)


__all__ = ["build_account_router", "payables_router", "receivables_router"]
