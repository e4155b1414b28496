import importlib

from stockledger.models.account_payable import AccountPayable
from stockledger.models.account_receivable import AccountReceivable
from stockledger.models.api_config import ApiConfig
from stockledger.models.cash_flow import CashFlowEntry
from stockledger.models.daily_stock_snapshot import DailyStockSnapshot
from stockledger.models.financial_category import FinancialCategory
from stockledger.models.job_log import JobLog
from stockledger.models.product_marketplace import ProductMarketplace


def import_all_models() -> None:
    for module_name in (
        "stockledger.models.account_payable",
        "stockledger.models.account_receivable",
        "stockledger.models.api_config",
        "stockledger.models.cash_flow",
        "stockledger.models.daily_stock_snapshot",
        "stockledger.models.financial_category",
        "stockledger.models.job_log",
        "stockledger.models.product_marketplace",
    ):
        importlib.import_module(module_name)


__all__ = [
    "AccountPayable",
    "AccountReceivable",
    "ApiConfig",
    "CashFlowEntry",
    "DailyStockSnapshot",
    "FinancialCategory",
    "JobLog",
    "ProductMarketplace",
    "import_all_models",
]
