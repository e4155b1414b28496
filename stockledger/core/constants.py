SNAPSHOT_JOB_NAME = "daily-stock-snapshot"

CATALOG_ENDPOINT = "catalog"
CATALOG_ITEM_KEYS = ("results", "data", "products")
CATALOG_MOVEMENTS_PATH = "movements"
MOVEMENT_ITEM_KEYS = ("results", "data", "movements")

PAYABLE_STATUSES = ("pending", "paid", "overdue", "cancelled")
RECEIVABLE_STATUSES = ("pending", "received", "overdue", "cancelled")
OPEN_STATUSES = ("pending", "overdue")

REFERENCE_PAYABLE = "accounts_payable"
REFERENCE_RECEIVABLE = "accounts_receivable"

# Party names containing one of these are treated as companies.
COMPANY_NAME_MARKERS = ("LTDA", "ME", "MEI", "EIRELI", "S.A.", "S/A", "EPP", "CNPJ")

UNLABELED_CATEGORY = "Outros"
UNLABELED_PARTY = "Não identificado"

ABC_CLASS_A_SHARE = 0.80
ABC_CLASS_B_SHARE = 0.95

GENERIC_ERROR = "An error occurred while processing your request"
