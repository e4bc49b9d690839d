from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import List, Optional

from storefront.core.exceptions import ValidationError
from storefront.core.localization import Currency, Language, LocalizationConfig
from storefront.crud import order as crud_order
from storefront.db.deps import get_db, get_current_user
from storefront.schemas.auth import CurrentUser
from storefront.schemas.order import OrderOut, ShippingDetails

router = APIRouter()

@router.post("/", response_model=OrderOut, status_code=status.HTTP_201_CREATED)
def create_order(
    details: ShippingDetails,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    return crud_order.create_order(db, user, details)

@router.get("/", response_model=List[OrderOut])
def list_my_orders(
    language: Optional[str] = Query(None),
    currency: Optional[str] = Query(None),
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    try:
        localization = LocalizationConfig.from_params(language, currency)
    except ValueError:
        raise ValidationError(
            f"Supported languages: {', '.join(l.value for l in Language)}; "
            f"currencies: {', '.join(c.value for c in Currency)}"
        )
    return crud_order.localize_orders(crud_order.list_orders(db, user), localization)

@router.get("/{order_id}", response_model=OrderOut)
def get_my_order(
    order_id: int,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    return crud_order.get_order(db, user, order_id)
