"""ABC curve over the catalog, ranked by stock value (price x available quantity)."""
from stockledger.core.constants import ABC_CLASS_A_SHARE, ABC_CLASS_B_SHARE
from stockledger.services.snapshot_service import as_number


def _product_id(product):
    value = product.get("id", product.get("productId"))
    return None if value is None else str(value)


def _product_name(product):
    for key in ("name", "title", "description"):
        value = product.get(key)
        if value:
            return str(value)
    return None


def abc_class_for(cumulative_before: float, value: float) -> str:
    if value <= 0:
        return "C"
    if cumulative_before < ABC_CLASS_A_SHARE:
        return "A"
    if cumulative_before < ABC_CLASS_B_SHARE:
        return "B"
    return "C"


def classify_products(products) -> list[dict]:
    entries = []
    for product in products:
        if not isinstance(product, dict):
            continue
        quantity = as_number(product.get("availableQuantity"))
        price = as_number(product.get("price"))
        entries.append(
            {
                "product_id": _product_id(product),
                "name": _product_name(product),
                "quantity": quantity,
                "value": max(0.0, float(price * quantity)),
            }
        )

    entries.sort(key=lambda entry: entry["value"], reverse=True)
    total_value = sum(entry["value"] for entry in entries)

    cumulative = 0.0
    for entry in entries:
        share = entry["value"] / total_value if total_value > 0 else 0.0
        entry["abc_class"] = abc_class_for(cumulative, entry["value"])
        cumulative += share
        entry["share"] = share
        entry["cumulative_share"] = cumulative
    return entries


def abc_summary(entries) -> dict:
    summary = {name: {"count": 0, "value": 0.0} for name in ("A", "B", "C")}
    for entry in entries:
        bucket = summary[entry["abc_class"]]
        bucket["count"] += 1
        bucket["value"] += entry["value"]
    return summary


def class_for_product(entries, product_id) -> str:
    product_id = str(product_id)
    for entry in entries:
        if entry["product_id"] == product_id:
            return entry["abc_class"]
    return "C"
