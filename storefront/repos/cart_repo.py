# storefront/repos/cart_repo.py
from sqlalchemy import delete, select, update
from sqlalchemy.orm import Session

from storefront.data.models.cart import CartLineModel
from storefront.data.models.product import ProductModel


class CartRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_cart_lines(self, user_email: str) -> list[tuple[ProductModel, int]]:
        """Linie koszyka razem z aktualnymi danymi produktu (inner join)."""
        stmt = (
            select(ProductModel, CartLineModel.quantity)
            .join(CartLineModel, CartLineModel.product_id == ProductModel.id)
            .where(CartLineModel.user_email == user_email)
            .order_by(CartLineModel.product_id)
        )
        return [(product, quantity) for product, quantity in self.db.execute(stmt).all()]

    def get_line(self, user_email: str, product_id: int) -> CartLineModel | None:
        return self.db.get(CartLineModel, (user_email, product_id))

    def add_line(self, line: CartLineModel) -> None:
        self.db.add(line)

    def set_quantity(self, user_email: str, product_id: int, quantity: int) -> int:
        result = self.db.execute(
            update(CartLineModel)
            .where(
                CartLineModel.user_email == user_email,
                CartLineModel.product_id == product_id,
            )
            .values(quantity=quantity)
        )
        return result.rowcount

    def delete_line(self, user_email: str, product_id: int) -> int:
        result = self.db.execute(
            delete(CartLineModel).where(
                CartLineModel.user_email == user_email,
                CartLineModel.product_id == product_id,
            )
        )
        return result.rowcount

    def clear_cart(self, user_email: str) -> int:
        result = self.db.execute(
            delete(CartLineModel).where(CartLineModel.user_email == user_email)
        )
        return result.rowcount

    def commit(self):
        self.db.commit()

    def rollback(self):
        self.db.rollback()
