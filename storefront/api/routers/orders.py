# storefront/api/routers/orders.py
from typing import List, Literal

from fastapi import APIRouter, BackgroundTasks, Depends, Query
from sqlalchemy.orm import Session

from storefront.api.deps import get_conversions, get_lock_service, require_tables, to_http
from storefront.data.database import get_db
from storefront.domain.errors import StoreError
from storefront.domain.schemas import OrderCreate, OrderCreatedOut, OrderOut
from storefront.services.conversion_service import ConversionService
from storefront.services.lock_service import BaseLockService
from storefront.services.order_service import OrderService

router = APIRouter(prefix="/api/orders", tags=["orders"])


def get_service(
    db: Session = Depends(get_db),
    lock_service: BaseLockService = Depends(get_lock_service),
    conversions: ConversionService = Depends(get_conversions),
) -> OrderService:
    return OrderService(db, lock_service=lock_service, conversions=conversions)


@router.get(
    "",
    response_model=List[OrderOut],
    dependencies=[Depends(require_tables("orders"))],
)
def list_orders(
    email: str = Query(..., min_length=1),
    sort: Literal["desc", "asc"] = Query("desc", description="desc = najnowsze pierwsze"),
    svc: OrderService = Depends(get_service),
):
    """
    Zamówienia użytkownika, items sparsowane ze snapshotu.
    """
    try:
        return svc.list_orders(email, newest_first=sort == "desc")
    except StoreError as e:
        raise to_http(e)


@router.post(
    "",
    response_model=OrderCreatedOut,
    dependencies=[Depends(require_tables("orders", "cart", "products", "users"))],
)
def create_order(
    payload: OrderCreate,
    background_tasks: BackgroundTasks,
    svc: OrderService = Depends(get_service),
):
    """
    Tworzy zamówienie z koszyka użytkownika (checkout).
    Śledzenie konwersji idzie w tle, po wysłaniu odpowiedzi.
    """
    try:
        order_id = svc.checkout(payload.email, schedule=background_tasks.add_task)
    except StoreError as e:
        raise to_http(e)
    return OrderCreatedOut(orderId=str(order_id))
