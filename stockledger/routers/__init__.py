from stockledger.routers.accounts import payables_router, receivables_router
from stockledger.routers.api_config import router as api_config_router
from stockledger.routers.cash_flow import router as cash_flow_router
from stockledger.routers.catalog import router as catalog_router
from stockledger.routers.categories import router as categories_router
from stockledger.routers.health import router as health_router
from stockledger.routers.marketplaces import router as marketplaces_router
from stockledger.routers.reports import router as reports_router
from stockledger.routers.snapshots import router as snapshots_router

__all__ = [
    "api_config_router",
    "cash_flow_router",
    "catalog_router",
    "categories_router",
    "health_router",
    "marketplaces_router",
    "payables_router",
    "receivables_router",
    "reports_router",
    "snapshots_router",
]
