# storefront/data/seed.py
from sqlalchemy.engine import Engine

from storefront.data import database
from storefront.data.migrations import run_migrations
from storefront.data.models.product import ProductModel
from storefront.repos.product_repo import ProductRepo
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

DEMO_PRODUCTS = [
    {"name": "무선 이어폰", "price": 89000, "category": "전자제품", "description": "노이즈 캔슬링 블루투스 이어폰"},
    {"name": "기계식 키보드", "price": 129000, "category": "전자제품", "description": "갈축 텐키리스 키보드"},
    {"name": "캠핑 의자", "price": 45000, "category": "캠핑", "description": "접이식 경량 캠핑 의자"},
    {"name": "러닝화", "price": 99000, "category": "스포츠", "description": "쿠셔닝 러닝화"},
    {"name": "파이썬 입문서", "price": 28000, "category": "도서", "description": "처음 배우는 파이썬"},
]


def seed(engine: Engine | None = None) -> int:
    """Migruje schemat i dodaje demo produkty, tylko jesli katalog jest pusty."""
    engine = engine or database.engine
    run_migrations(engine)

    db = database.build_session_factory(engine)()
    try:
        repo = ProductRepo(db)
        # not forcing: only seed if empty
        if repo.count():
            logger.info("Katalog nie jest pusty, pomijam seed")
            return 0
        repo.add_products([ProductModel(**p) for p in DEMO_PRODUCTS])
        logger.info(f"Dodano {len(DEMO_PRODUCTS)} produktow")
        return len(DEMO_PRODUCTS)
    finally:
        db.close()


if __name__ == "__main__":
    seed()
