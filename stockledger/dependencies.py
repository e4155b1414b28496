from typing import Optional

from fastapi import Header

from stockledger.core.security import authenticate_request
from stockledger.database.session import get_db


def require_auth(
    api_key: Optional[str] = Header(None, alias="X-API-Key"),
    authorization: Optional[str] = Header(None),
):
    return authenticate_request(api_key=api_key, authorization=authorization)


__all__ = ["get_db", "require_auth"]
