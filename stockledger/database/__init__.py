from stockledger.database.base import Base
from stockledger.database.engine import engine, ensure_sqlite_schema
from stockledger.database.session import SessionLocal, get_db

__all__ = ["Base", "engine", "ensure_sqlite_schema", "SessionLocal", "get_db"]
