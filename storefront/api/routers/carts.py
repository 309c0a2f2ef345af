#storefront/api/routers/carts.py
from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from storefront.api.deps import get_lock_service, require_tables, to_http
from storefront.data.database import get_db
from storefront.domain.errors import StoreError
from storefront.domain.schemas import CartAddIn, CartLineOut, CartUpdateIn, SuccessOut
from storefront.services.cart_service import CartService
from storefront.services.lock_service import BaseLockService

router = APIRouter(
    prefix="/api/cart",
    tags=["cart"],
    dependencies=[Depends(require_tables("cart", "products"))],
)


def get_service(
    db: Session = Depends(get_db),
    lock_service: BaseLockService = Depends(get_lock_service),
) -> CartService:
    return CartService(db=db, lock_service=lock_service)


@router.get("", response_model=List[CartLineOut])
def get_cart(email: str = Query(..., min_length=1), svc: CartService = Depends(get_service)):
    try:
        return svc.get_cart(email)
    except StoreError as e:
        raise to_http(e)


@router.post("/add", response_model=SuccessOut)
def add_item(payload: CartAddIn, svc: CartService = Depends(get_service)):
    try:
        svc.add_product(payload.email, payload.product_id)
    except StoreError as e:
        raise to_http(e)
    return SuccessOut()


@router.post("/update", response_model=SuccessOut)
def update_item(payload: CartUpdateIn, svc: CartService = Depends(get_service)):
    try:
        svc.update_quantity(payload.email, payload.product_id, payload.quantity)
    except StoreError as e:
        raise to_http(e)
    return SuccessOut()


@router.delete("/{email}/{product_id}", response_model=SuccessOut)
def remove_item(email: str, product_id: int, svc: CartService = Depends(get_service)):
    try:
        svc.remove_product(email, product_id)
    except StoreError as e:
        raise to_http(e)
    return SuccessOut()


@router.delete("/{email}", response_model=SuccessOut)
def clear_cart(email: str, svc: CartService = Depends(get_service)):
    try:
        svc.clear_cart(email)
    except StoreError as e:
        raise to_http(e)
    return SuccessOut()
