from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from storefront.crud import cart as crud_cart
from storefront.db.deps import get_db, get_current_user
from storefront.schemas.auth import CurrentUser
from storefront.schemas.cart import CartItemCreate, CartItemOut, CartItemUpdate, CartOut

router = APIRouter()

@router.get("/", response_model=CartOut)
def get_cart(
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    return crud_cart.get_cart(db, user)

@router.post("/items", response_model=CartItemOut)
def add_item(
    data: CartItemCreate,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    return crud_cart.add_item(db, user, data.product_id, data.quantity, data.size)

@router.put("/items/{item_id}", response_model=CartItemOut)
def update_item(
    item_id: int,
    data: CartItemUpdate,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    return crud_cart.update_quantity(db, user, item_id, data.quantity)

@router.delete("/items/{item_id}", status_code=status.HTTP_200_OK)
def remove_item(
    item_id: int,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    crud_cart.remove_item(db, user, item_id)
    return {"message": "Item removed from cart"}
