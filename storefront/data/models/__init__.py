#import wszystkich modeli zeby SQLAlchemy je zarejestrowal w Base.metadata

from storefront.data.models.product import ProductModel
from storefront.data.models.user import UserModel
from storefront.data.models.cart import CartLineModel
from storefront.data.models.order import OrderModel

__all__ = ["ProductModel", "UserModel", "CartLineModel", "OrderModel"]
