# storefront/repos/product_repo.py
from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session

from storefront.data.models.product import ProductModel


class ProductRepo:
    def __init__(self, db: Session):
        self.db = db

    def list_products(self, query: str | None = None) -> list[ProductModel]:
        stmt = select(ProductModel).order_by(ProductModel.id)
        if query:
            like = f"%{query}%"
            stmt = stmt.where(
                or_(
                    ProductModel.name.like(like),
                    ProductModel.description.like(like),
                    ProductModel.category.like(like),
                )
            )
        return list(self.db.execute(stmt).scalars().all())

    def get_product(self, product_id: int) -> ProductModel | None:
        return self.db.get(ProductModel, product_id)

    def count(self) -> int:
        return self.db.execute(select(func.count()).select_from(ProductModel)).scalar_one()

    def add_products(self, products: list[ProductModel]) -> None:
        self.db.add_all(products)
        self.db.commit()

    def update_price(self, product_id: int, price: int) -> ProductModel | None:
        product = self.get_product(product_id)
        if product:
            product.price = price
            self.db.commit()
            self.db.refresh(product)
        return product
