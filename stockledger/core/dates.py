from datetime import date, datetime, timedelta, timezone


def utc_today() -> date:
    return datetime.now(timezone.utc).date()


def month_start(value: date) -> date:
    return value.replace(day=1)


def shift_months(value: date, months: int) -> date:
    """First day of the month ``months`` away from ``value``'s month."""
    index = value.year * 12 + (value.month - 1) + months
    return date(index // 12, index % 12 + 1, 1)


def same_month(left: date, right: date) -> bool:
    return left.year == right.year and left.month == right.month


def week_days(value: date) -> list[date]:
    monday = value - timedelta(days=value.weekday())
    return [monday + timedelta(days=offset) for offset in range(7)]
