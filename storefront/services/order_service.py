# storefront/services/order_service.py
import json
from typing import Any, Callable, Dict, List

from redis.exceptions import RedisError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from storefront.data.models.order import ORDER_STATUS_PROCESSING, OrderModel, utc_now_iso
from storefront.domain.errors import (
    ConflictError,
    EmptyCart,
    LockNotAcquired,
    StorageFailure,
    ValidationError,
)
from storefront.repos.cart_repo import CartRepo
from storefront.repos.order_repo import OrderRepo
from storefront.repos.user_repo import UserRepo
from storefront.services.conversion_service import ConversionService
from storefront.services.lock_service import BaseLockService, checkout_lock_key
from storefront.utils.logging import get_logger
from storefront.utils.settings import (
    CHECKOUT_LOCK_TTL_SECONDS,
    CHECKOUT_LOCK_WAIT_SECONDS,
    DEFAULT_COUNTRY,
)

logger = get_logger(__name__)


def parse_snapshot(raw: str | None, order_id: int | None = None) -> List[Dict[str, Any]]:
    """Snapshot z bazy -> lista linii. Pusty albo uszkodzony JSON daje []."""
    if not raw:
        return []
    try:
        items = json.loads(raw)
    except (TypeError, ValueError) as e:
        logger.error(f"[orders] items JSON parse failed (order {order_id}): {e}")
        return []
    if not isinstance(items, list):
        logger.error(f"[orders] items nie jest lista (order {order_id})")
        return []
    return items


class OrderService:
    """
    Serwis odpowiedzialny za domenę zamówień.

    checkout() zamienia koszyk użytkownika w niezmienne zamówienie:
    1. lock per użytkownik (dwa równoległe checkouty tego samego koszyka
       nie moga oba się udać)
    2. odczyt koszyka z produktami, total w int, snapshot JSON
    3. zapis zamówienia (jedna transakcja)
    4. czyszczenie koszyka (osobna transakcja, błąd tylko logowany)
    5. śledzenie konwersji po zwolnieniu locka (async, best effort)
    """

    def __init__(
        self,
        db: Session,
        lock_service: BaseLockService,
        conversions: ConversionService,
        lock_ttl: int = CHECKOUT_LOCK_TTL_SECONDS,
        lock_wait: float = CHECKOUT_LOCK_WAIT_SECONDS,
    ):
        self.db = db
        self.repo = OrderRepo(db)
        self.cart_repo = CartRepo(db)
        self.user_repo = UserRepo(db)
        self.lock_service = lock_service
        self.conversions = conversions
        self.lock_ttl = lock_ttl
        self.lock_wait = lock_wait

    #commands
    def checkout(self, user_email: str, schedule: Callable[..., Any] | None = None) -> int:
        """
        schedule: np. BackgroundTasks.add_task z routera, wtedy konwersja leci
        dopiero po wyslaniu odpowiedzi. Bez niego dispatch idzie od razu,
        ale zawsze po zwolnieniu locka.
        """
        if not user_email:
            raise ValidationError("Email jest wymagany")

        logger.info(f"[orders] create order requested: email={user_email}")

        try:
            with self.lock_service.hold(checkout_lock_key(user_email), self.lock_ttl, self.lock_wait):
                order, country = self._create_order(user_email)
                # zamówienie juz jest zapisane, dalej tylko efekty uboczne
                self._clear_cart(user_email, order.id)
        except LockNotAcquired:
            logger.warning(f"[orders] checkout lock timeout for {user_email}")
            raise ConflictError("Zamówienie dla tego koszyka jest już przetwarzane")
        except RedisError:
            logger.exception(f"[orders] checkout lock error for {user_email}")
            raise StorageFailure("Nie udało się utworzyć zamówienia")

        logger.info(f"[orders] order {order.id} created for {user_email}, total={order.total}")

        # publikacja do brokera moze wisiec do broker_connection_timeout
        if schedule is not None:
            schedule(self.conversions.track_order_conversion, user_email, country)
        else:
            self.conversions.track_order_conversion(user_email, country)
        return order.id

    def _create_order(self, user_email: str) -> tuple[OrderModel, str]:
        try:
            lines = self.cart_repo.get_cart_lines(user_email)
            if not lines:
                raise EmptyCart()

            # ceny w najmniejszej jednostce, suma tylko na intach
            total = sum(product.price * quantity for product, quantity in lines)
            snapshot = [
                {**product.to_snapshot(), "quantity": quantity}
                for product, quantity in lines
            ]

            user = self.user_repo.get_user(user_email)
            country = (user.country if user else None) or DEFAULT_COUNTRY

            order = OrderModel(
                user_email=user_email,
                date=utc_now_iso(),
                total=total,
                status=ORDER_STATUS_PROCESSING,
                items=json.dumps(snapshot, ensure_ascii=False),
            )
            created = self.repo.create_order(order)
        except EmptyCart:
            self.repo.rollback()
            raise
        except SQLAlchemyError:
            self.repo.rollback()
            logger.exception(f"[orders] order insert failed for {user_email}")
            raise StorageFailure("Nie udało się utworzyć zamówienia")

        return created, country

    def _clear_cart(self, user_email: str, order_id: int) -> None:
        try:
            removed = self.cart_repo.clear_cart(user_email)
            self.cart_repo.commit()
        except SQLAlchemyError:
            # zamówienie zostaje, w koszyku moga zostac linie
            self.cart_repo.rollback()
            logger.exception(f"[orders] cart clear failed for {user_email} after order {order_id}")
            return
        logger.info(f"[orders] cart cleared for {user_email}: {removed} lines")

    #query
    def list_orders(self, user_email: str, newest_first: bool = True) -> List[Dict[str, Any]]:
        if not user_email:
            raise ValidationError("Email jest wymagany")

        try:
            orders = self.repo.list_orders(user_email, newest_first=newest_first)
        except SQLAlchemyError:
            self.repo.rollback()
            logger.exception(f"[orders] list failed for {user_email}")
            raise StorageFailure("Nie udało się pobrać zamówień")

        return [
            {
                "id": str(o.id),
                "user_email": o.user_email,
                "date": o.date,
                "total": o.total,
                "status": o.status,
                "items": parse_snapshot(o.items, o.id),
            }
            for o in orders
        ]
