from typing import Any, Dict, List

from redis.exceptions import RedisError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from storefront.data.models.cart import CartLineModel
from storefront.domain.errors import (
    ConflictError,
    LockNotAcquired,
    StorageFailure,
    ValidationError,
)
from storefront.repos.cart_repo import CartRepo
from storefront.repos.product_repo import ProductRepo
from storefront.services.lock_service import BaseLockService, checkout_lock_key
from storefront.utils.logging import get_logger
from storefront.utils.settings import CHECKOUT_LOCK_TTL_SECONDS, CHECKOUT_LOCK_WAIT_SECONDS

logger = get_logger(__name__)


class CartService:
    """
    Prosty CRUD koszyka (user, produkt) -> ilosc.
    commands (add, update, remove, clear) biora ten sam lock co checkout,
    wiec zmiana koszyka nie wcisnie sie miedzy snapshot a czyszczenie
    query (get) tylko odczyt
    """

    def __init__(self, db: Session, lock_service: BaseLockService):
        self.repo = CartRepo(db)
        self.product_repo = ProductRepo(db)
        self.lock_service = lock_service

    #query - odczyt
    def get_cart(self, user_email: str) -> List[Dict[str, Any]]:
        if not user_email:
            raise ValidationError("Email jest wymagany")
        try:
            lines = self.repo.get_cart_lines(user_email)
        except SQLAlchemyError:
            logger.exception(f"Odczyt koszyka {user_email} nieudany")
            raise StorageFailure("Nie udało się pobrać koszyka")

        return [
            {**product.to_snapshot(), "id": str(product.id), "quantity": quantity}
            for product, quantity in lines
        ]

    #commands
    def add_product(self, user_email: str, product_id: int) -> None:
        def _add():
            if self.product_repo.get_product(product_id) is None:
                raise ValidationError("Produkt nie istnieje")

            existing = self.repo.get_line(user_email, product_id)
            if existing:
                #juz jest w koszyku, ilosc + 1
                existing.quantity += 1
            else:
                self.repo.add_line(
                    CartLineModel(user_email=user_email, product_id=product_id, quantity=1)
                )

        self._mutate(user_email, _add, f"add {product_id}")

    def update_quantity(self, user_email: str, product_id: int, quantity: int) -> None:
        if quantity <= 0:
            #ilosc 0 albo mniej to usuniecie linii
            self.remove_product(user_email, product_id)
            return
        self._mutate(
            user_email,
            lambda: self.repo.set_quantity(user_email, product_id, quantity),
            f"set {product_id}={quantity}",
        )

    def remove_product(self, user_email: str, product_id: int) -> None:
        self._mutate(
            user_email,
            lambda: self.repo.delete_line(user_email, product_id),
            f"remove {product_id}",
        )

    def clear_cart(self, user_email: str) -> None:
        self._mutate(user_email, lambda: self.repo.clear_cart(user_email), "clear")

    def _mutate(self, user_email: str, change, description: str) -> None:
        if not user_email:
            raise ValidationError("Email jest wymagany")

        try:
            with self.lock_service.hold(
                checkout_lock_key(user_email), CHECKOUT_LOCK_TTL_SECONDS, CHECKOUT_LOCK_WAIT_SECONDS
            ):
                try:
                    change()
                    self.repo.commit()
                except ValidationError:
                    self.repo.rollback()
                    raise
                except SQLAlchemyError:
                    self.repo.rollback()
                    logger.exception(f"Koszyk {user_email}: {description} nieudane")
                    raise StorageFailure("Nie udało się zmienić koszyka")
        except LockNotAcquired:
            raise ConflictError("Koszyk jest właśnie przetwarzany, spróbuj ponownie")
        except RedisError:
            logger.exception(f"Koszyk {user_email}: blad locka")
            raise StorageFailure("Nie udało się zmienić koszyka")

        logger.info(f"Koszyk {user_email}: {description}")
