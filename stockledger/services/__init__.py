from stockledger.services.catalog_client import CatalogAPIError, CatalogClient
from stockledger.services.report_service import build_financial_report
from stockledger.services.snapshot_service import compute_stats, save_daily_snapshot

__all__ = [
    "CatalogAPIError",
    "CatalogClient",
    "build_financial_report",
    "compute_stats",
    "save_daily_snapshot",
]
