"""Daily stock snapshots and the small finance ledger around them."""

__version__ = "0.1.0"
