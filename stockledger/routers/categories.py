from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.orm import Session

from stockledger.dependencies import get_db, require_auth
from stockledger.schemas.financial import CategoryRead, CategoryWrite
from stockledger.services.category_service import (
    create_category,
    delete_category,
    get_category,
    list_categories,
)

router = APIRouter(prefix="/categories", tags=["Categories"], dependencies=[Depends(require_auth)])


@router.get("", response_model=list[CategoryRead])
def list_financial_categories(
    category_type: Optional[str] = Query(None, alias="type", pattern="^(expense|income)$"),
    db: Session = Depends(get_db),
):
    return list_categories(db, category_type)


@router.post("", response_model=CategoryRead, status_code=status.HTTP_201_CREATED)
def create_financial_category(payload: CategoryWrite, db: Session = Depends(get_db)):
    return create_category(db, payload)


@router.delete("/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_financial_category(category_id: int, db: Session = Depends(get_db)):
    category = get_category(db, category_id)
    if category is None:
        raise HTTPException(status_code=404, detail="Category not found.")
    delete_category(db, category)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
