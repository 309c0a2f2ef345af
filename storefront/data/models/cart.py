#storefront/data/models/cart.py
from sqlalchemy import Column, ForeignKey, Integer, Text

from storefront.data.database import Base


class CartLineModel(Base):
    __tablename__ = "cart"

    #jedna linia na pare (user, produkt)
    user_email = Column(Text, ForeignKey("users.email"), primary_key=True)
    product_id = Column(Integer, ForeignKey("products.id"), primary_key=True)
    quantity = Column(Integer, nullable=False)

