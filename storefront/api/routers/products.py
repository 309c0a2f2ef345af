# storefront/api/routers/products.py
from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from storefront.api.deps import require_tables, to_http
from storefront.data.database import get_db
from storefront.domain.errors import StoreError
from storefront.domain.schemas import ProductOut
from storefront.services.product_service import ProductService

router = APIRouter(prefix="/api", tags=["products"])


@router.get(
    "/products",
    response_model=List[ProductOut],
    dependencies=[Depends(require_tables("products"))],
)
def list_products(
    q: str | None = Query(None, description="Szukaj w nazwie, opisie i kategorii"),
    db: Session = Depends(get_db),
):
    try:
        return ProductService(db).list_products(q)
    except StoreError as e:
        raise to_http(e)
