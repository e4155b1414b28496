from sqlalchemy.orm import sessionmaker

from stockledger.database import Base
from stockledger.database.engine import build_engine
from stockledger.models import import_all_models


def memory_session_factory():
    """Fresh in-memory database with every table created."""
    import_all_models()
    engine = build_engine("sqlite:///:memory:")
    Base.metadata.create_all(bind=engine)
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False), engine
