from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session

from stockledger.dependencies import get_db, require_auth
from stockledger.schemas.api_config import ApiConfigRead, ApiConfigWrite
from stockledger.services.api_config_service import (
    delete_config,
    describe_config,
    get_active_config,
    save_config,
)

router = APIRouter(prefix="/api-config", tags=["Settings"], dependencies=[Depends(require_auth)])


@router.get("", response_model=ApiConfigRead)
def read_api_config(db: Session = Depends(get_db)):
    return describe_config(get_active_config(db))


@router.put("", response_model=ApiConfigRead)
def write_api_config(payload: ApiConfigWrite, db: Session = Depends(get_db)):
    try:
        config = save_config(db, payload.base_url, payload.token)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return describe_config(config)


@router.delete("", status_code=status.HTTP_204_NO_CONTENT)
def remove_api_config(db: Session = Depends(get_db)):
    delete_config(db)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
