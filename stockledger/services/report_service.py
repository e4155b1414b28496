from collections import defaultdict
from datetime import date, timedelta
from typing import Optional

from sqlalchemy.orm import Session

from stockledger.core.constants import OPEN_STATUSES, UNLABELED_CATEGORY, UNLABELED_PARTY
from stockledger.core.dates import month_start, same_month, shift_months, utc_today, week_days
from stockledger.services.account_service import PAYABLES, RECEIVABLES, list_accounts
from stockledger.services.cash_flow_service import list_entries

TOP_PARTIES = 5
TREND_MONTHS = 12
FORECAST_DAYS = 30

AGING_BUCKETS = ("current", "1-30", "31-60", "60+")


def _sum_by_type(entries, entry_type: str) -> float:
    return sum(entry["amount"] for entry in entries if entry["type"] == entry_type)


def _growth(current: float, previous: float) -> float:
    if previous > 0:
        return (current - previous) / previous * 100
    return 0.0


def _ranked(totals: dict, limit: Optional[int] = None, key_name: str = "name", value_name: str = "value"):
    ranked = sorted(totals.items(), key=lambda item: item[1], reverse=True)
    if limit is not None:
        ranked = ranked[:limit]
    return [{key_name: name, value_name: value} for name, value in ranked]


def _party_totals(accounts, party_field: str, status: str) -> dict:
    totals = defaultdict(float)
    for account in accounts:
        if account["status"] != status:
            continue
        totals[account.get(party_field) or UNLABELED_PARTY] += account["amount"]
    return totals


def _category_totals(entries, entry_type: str) -> dict:
    totals = defaultdict(float)
    for entry in entries:
        if entry["type"] == entry_type:
            totals[entry.get("category") or UNLABELED_CATEGORY] += entry["amount"]
    return totals


def _payment_methods(entries) -> list[dict]:
    methods = defaultdict(lambda: {"income": 0.0, "expense": 0.0})
    for entry in entries:
        method = entry.get("payment_method") or UNLABELED_CATEGORY
        methods[method][entry["type"]] += entry["amount"]
    rows = [
        {"name": name, "income": values["income"], "expense": values["expense"],
         "total": values["income"] + values["expense"]}
        for name, values in methods.items()
    ]
    rows.sort(key=lambda row: row["total"], reverse=True)
    return rows


def _aging(open_payables, today: date) -> dict:
    buckets = {name: {"count": 0, "amount": 0.0} for name in AGING_BUCKETS}
    for account in open_payables:
        days_until_due = (account["due_date"] - today).days
        if days_until_due >= 0:
            name = "current"
        elif days_until_due >= -30:
            name = "1-30"
        elif days_until_due >= -60:
            name = "31-60"
        else:
            name = "60+"
        buckets[name]["count"] += 1
        buckets[name]["amount"] += account["amount"]
    return buckets


def _forecast(payables, receivables, opening_balance: float, today: date) -> list[dict]:
    balance = opening_balance
    rows = []
    for offset in range(FORECAST_DAYS):
        day = today + timedelta(days=offset)
        expected_income = sum(
            r["amount"] for r in receivables if r["due_date"] == day and r["status"] == "pending"
        )
        expected_expense = sum(
            p["amount"] for p in payables if p["due_date"] == day and p["status"] == "pending"
        )
        balance = balance + expected_income - expected_expense
        rows.append(
            {"date": day, "income": expected_income, "expense": expected_expense, "balance": balance}
        )
    return rows


def financial_metrics(payables, receivables, cash_flow, today: Optional[date] = None) -> dict:
    """Aggregate account and cash-flow rows (dicts) into the financial report.

    Account rows must already carry their effective status (``overdue`` for
    pending rows past due).
    """
    today = today or utc_today()
    last_month = shift_months(today, -1)

    current_flow = [entry for entry in cash_flow if same_month(entry["date"], today)]
    last_flow = [entry for entry in cash_flow if same_month(entry["date"], last_month)]

    current_income = _sum_by_type(current_flow, "income")
    current_expense = _sum_by_type(current_flow, "expense")
    last_income = _sum_by_type(last_flow, "income")
    last_expense = _sum_by_type(last_flow, "expense")

    overdue_days = [(today - p["due_date"]).days for p in payables if p["status"] == "overdue"]
    open_payables = [p for p in payables if p["status"] in OPEN_STATUSES]
    open_receivables = [r for r in receivables if r["status"] in OPEN_STATUSES]

    weekly = []
    for day in week_days(today):
        day_flow = [entry for entry in cash_flow if entry["date"] == day]
        weekly.append(
            {
                "date": day,
                "income": _sum_by_type(day_flow, "income"),
                "expense": _sum_by_type(day_flow, "expense"),
            }
        )

    monthly_trend = []
    for offset in range(TREND_MONTHS - 1, -1, -1):
        month = shift_months(today, -offset)
        month_flow = [entry for entry in cash_flow if same_month(entry["date"], month)]
        income = _sum_by_type(month_flow, "income")
        expense = _sum_by_type(month_flow, "expense")
        monthly_trend.append(
            {"month": month_start(month).strftime("%Y-%m"), "income": income, "expense": expense,
             "result": income - expense}
        )

    return {
        "reference_date": today,
        "current_income": current_income,
        "current_expense": current_expense,
        "last_income": last_income,
        "last_expense": last_expense,
        "income_growth": _growth(current_income, last_income),
        "expense_growth": _growth(current_expense, last_expense),
        "profit_margin": (
            (current_income - current_expense) / current_income * 100 if current_income > 0 else 0.0
        ),
        "avg_overdue_days": sum(overdue_days) / len(overdue_days) if overdue_days else 0.0,
        "payment_methods": _payment_methods(current_flow),
        "weekly": weekly,
        "total_pending_payable": sum(p["amount"] for p in open_payables),
        "total_pending_receivable": sum(r["amount"] for r in open_receivables),
        "pending_payables_count": len(open_payables),
        "pending_receivables_count": len(open_receivables),
        "overdue_payables_count": sum(1 for p in payables if p["status"] == "overdue"),
        "overdue_receivables_count": sum(1 for r in receivables if r["status"] == "overdue"),
        "top_suppliers": _ranked(
            _party_totals(payables, "supplier", "paid"), TOP_PARTIES, value_name="amount"
        ),
        "top_customers": _ranked(
            _party_totals(receivables, "customer", "received"), TOP_PARTIES, value_name="amount"
        ),
        "income_by_category": _ranked(_category_totals(current_flow, "income")),
        "expense_by_category": _ranked(_category_totals(current_flow, "expense")),
        "monthly_trend": monthly_trend,
        "forecast": _forecast(payables, receivables, current_income - current_expense, today),
        "aging": _aging(open_payables, today),
    }


def _entry_dict(entry) -> dict:
    return {column.name: getattr(entry, column.name) for column in entry.__table__.columns}


def build_financial_report(db: Session, *, party_kind: Optional[str] = None, today: Optional[date] = None) -> dict:
    today = today or utc_today()
    payables = list_accounts(db, PAYABLES, party_kind=party_kind, today=today)
    receivables = list_accounts(db, RECEIVABLES, party_kind=party_kind, today=today)
    cash_flow = [_entry_dict(entry) for entry in list_entries(db, limit=None)]
    return financial_metrics(payables, receivables, cash_flow, today)
