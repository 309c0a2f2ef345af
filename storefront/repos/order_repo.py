# storefront/repos/order_repo.py
from sqlalchemy import select
from sqlalchemy.orm import Session

from storefront.data.models.order import OrderModel


class OrderRepo:
    def __init__(self, db: Session):
        self.db = db

    def create_order(self, order: OrderModel) -> OrderModel:
        self.db.add(order)
        self.db.commit()
        # expire_on_commit=False: id jest juz ustawione, bez refresh po commicie
        return order

    def list_orders(self, user_email: str, newest_first: bool = True) -> list[OrderModel]:
        order_by = OrderModel.date.desc() if newest_first else OrderModel.date.asc()
        stmt = (
            select(OrderModel)
            .where(OrderModel.user_email == user_email)
            .order_by(order_by, OrderModel.id.desc() if newest_first else OrderModel.id.asc())
        )
        return list(self.db.execute(stmt).scalars().all())

    def rollback(self):
        self.db.rollback()
