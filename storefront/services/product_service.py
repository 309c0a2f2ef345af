from typing import Any, Dict, List

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from storefront.domain.errors import StorageFailure
from storefront.repos.product_repo import ProductRepo
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class ProductService:
    def __init__(self, db: Session):
        self.repo = ProductRepo(db)

    def list_products(self, query: str | None = None) -> List[Dict[str, Any]]:
        try:
            products = self.repo.list_products(query)
        except SQLAlchemyError:
            logger.exception(f"Odczyt produktow nieudany (q={query!r})")
            raise StorageFailure("Nie udało się pobrać produktów")

        #id jako string dla frontendu
        return [{**p.to_snapshot(), "id": str(p.id)} for p in products]
