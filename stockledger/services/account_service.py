"""Accounts payable and receivable, and the cash-flow rows that settle them."""
from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date
from typing import Optional

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from stockledger.core.constants import (
    COMPANY_NAME_MARKERS,
    PAYABLE_STATUSES,
    RECEIVABLE_STATUSES,
    REFERENCE_PAYABLE,
    REFERENCE_RECEIVABLE,
)
from stockledger.core.dates import utc_today
from stockledger.models.account_payable import AccountPayable
from stockledger.models.account_receivable import AccountReceivable
from stockledger.models.cash_flow import CashFlowEntry

_PARTY_TOKEN_RE = re.compile(r"[\s,;()\-]+")
_COMPANY_TOKENS = {marker.rstrip(".") for marker in COMPANY_NAME_MARKERS}

PARTY_KINDS = ("company", "person")


@dataclass(frozen=True)
class AccountKind:
    model: type
    reference_type: str
    party_field: str
    settled_status: str
    settled_date_field: str
    amount_field: str
    cash_flow_type: str
    statuses: tuple


PAYABLES = AccountKind(
    model=AccountPayable,
    reference_type=REFERENCE_PAYABLE,
    party_field="supplier",
    settled_status="paid",
    settled_date_field="paid_date",
    amount_field="paid_amount",
    cash_flow_type="expense",
    statuses=PAYABLE_STATUSES,
)

RECEIVABLES = AccountKind(
    model=AccountReceivable,
    reference_type=REFERENCE_RECEIVABLE,
    party_field="customer",
    settled_status="received",
    settled_date_field="received_date",
    amount_field="received_amount",
    cash_flow_type="income",
    statuses=RECEIVABLE_STATUSES,
)

_EDITABLE_FIELDS = (
    "description",
    "amount",
    "due_date",
    "payment_method",
    "category",
    "notes",
    "document_number",
)


def effective_status(account, today: Optional[date] = None) -> str:
    today = today or utc_today()
    if account.status == "pending" and account.due_date is not None and account.due_date < today:
        return "overdue"
    return account.status


def is_company_name(name) -> bool:
    if not name:
        return False
    tokens = _PARTY_TOKEN_RE.split(str(name).upper())
    return any(token.rstrip(".") in _COMPANY_TOKENS for token in tokens if token)


def to_dict(account, today: Optional[date] = None) -> dict:
    data = {column.name: getattr(account, column.name) for column in account.__table__.columns}
    data["status"] = effective_status(account, today)
    return data


def _matches_search(account, kind: AccountKind, search: str) -> bool:
    needle = search.casefold()
    for value in (account.description, getattr(account, kind.party_field), account.document_number):
        if value and needle in str(value).casefold():
            return True
    return False


def list_accounts(
    db: Session,
    kind: AccountKind,
    *,
    status: Optional[str] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    search: Optional[str] = None,
    party_kind: Optional[str] = None,
    today: Optional[date] = None,
) -> list[dict]:
    status = (status or "").strip().lower()
    if status and status != "all" and status not in kind.statuses:
        raise ValueError("Unknown status filter: {}".format(status))
    if party_kind and party_kind not in PARTY_KINDS:
        raise ValueError("party_kind must be one of: {}".format(", ".join(PARTY_KINDS)))

    today = today or utc_today()
    model = kind.model
    query = select(model).order_by(model.due_date.asc(), model.id.asc())
    if date_from is not None:
        query = query.where(model.due_date >= date_from)
    if date_to is not None:
        query = query.where(model.due_date <= date_to)
    rows = db.execute(query).scalars().all()

    search = (search or "").strip()
    results = []
    for row in rows:
        if party_kind:
            company = is_company_name(getattr(row, kind.party_field))
            if (party_kind == "company") != company:
                continue
        if search and not _matches_search(row, kind, search):
            continue
        data = to_dict(row, today)
        if status and status != "all" and data["status"] != status:
            continue
        results.append(data)
    return results


def get_account(db: Session, kind: AccountKind, account_id: int):
    return db.get(kind.model, account_id)


def _settlement_entry(kind: AccountKind, account, amount: float, settled_on: date) -> CashFlowEntry:
    return CashFlowEntry(
        type=kind.cash_flow_type,
        description=account.description,
        amount=amount,
        date=settled_on,
        category=account.category,
        payment_method=account.payment_method,
        reference_id=account.id,
        reference_type=kind.reference_type,
    )


def _delete_settlements(db: Session, kind: AccountKind, account_id: int) -> None:
    db.execute(
        delete(CashFlowEntry).where(
            CashFlowEntry.reference_type == kind.reference_type,
            CashFlowEntry.reference_id == account_id,
        )
    )


def _commit(db: Session) -> None:
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise


def create_account(db: Session, kind: AccountKind, payload, *, today: Optional[date] = None):
    """Insert an account; one created already settled also gets its cash-flow row."""
    today = today or utc_today()
    data = payload.model_dump()
    account = kind.model(**{field: data[field] for field in _EDITABLE_FIELDS})
    setattr(account, kind.party_field, data.get(kind.party_field))

    settled = data["status"] == kind.settled_status
    account.status = kind.settled_status if settled else "pending"
    settled_on = (data.get(kind.settled_date_field) or today) if settled else None
    setattr(account, kind.settled_date_field, settled_on)

    db.add(account)
    db.flush()
    if settled:
        amount = data.get(kind.amount_field) or account.amount
        db.add(_settlement_entry(kind, account, amount, settled_on))
    _commit(db)
    db.refresh(account)
    return account


def update_account(db: Session, kind: AccountKind, account, payload, *, today: Optional[date] = None):
    """Overwrite editable fields.

    Moving an account into the settled status writes its cash-flow row; moving
    it back to pending removes the rows that referenced it.
    Cancelled accounts keep their status; only their fields can be edited.
    """
    today = today or utc_today()
    data = payload.model_dump()
    was_settled = account.status == kind.settled_status
    cancelled = account.status == "cancelled"
    settled = data["status"] == kind.settled_status
    if cancelled and settled:
        raise ValueError("Cancelled accounts cannot be settled.")

    for field in _EDITABLE_FIELDS:
        setattr(account, field, data[field])
    setattr(account, kind.party_field, data.get(kind.party_field))

    if settled:
        settled_on = data.get(kind.settled_date_field) or getattr(account, kind.settled_date_field) or today
        account.status = kind.settled_status
        setattr(account, kind.settled_date_field, settled_on)
        if not was_settled:
            amount = data.get(kind.amount_field) or account.amount
            db.add(_settlement_entry(kind, account, amount, settled_on))
    elif not cancelled:
        account.status = "pending"
        setattr(account, kind.settled_date_field, None)
        if was_settled:
            _delete_settlements(db, kind, account.id)

    _commit(db)
    db.refresh(account)
    return account


def settle_account(db: Session, kind: AccountKind, account, payload, *, today: Optional[date] = None):
    """Mark an open account paid/received and record the cash movement."""
    if account.status == kind.settled_status:
        raise ValueError("Account is already {}.".format(kind.settled_status))
    if account.status == "cancelled":
        raise ValueError("Cancelled accounts cannot be settled.")

    settled_on = payload.settled_on or today or utc_today()
    account.status = kind.settled_status
    account.payment_method = payload.payment_method
    setattr(account, kind.settled_date_field, settled_on)
    db.add(_settlement_entry(kind, account, payload.amount, settled_on))
    _commit(db)
    db.refresh(account)
    return account


def cancel_account(db: Session, kind: AccountKind, account):
    if account.status == kind.settled_status:
        raise ValueError("Settled accounts cannot be cancelled.")
    account.status = "cancelled"
    _commit(db)
    db.refresh(account)
    return account


def delete_account(db: Session, kind: AccountKind, account) -> None:
    _delete_settlements(db, kind, account.id)
    db.delete(account)
    _commit(db)
