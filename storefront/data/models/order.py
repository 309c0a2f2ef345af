from datetime import datetime, timezone

from sqlalchemy import Column, ForeignKey, Integer, Text

from storefront.data.database import Base

ORDER_STATUS_PROCESSING = "processing"


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class OrderModel(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_email = Column(Text, ForeignKey("users.email"), nullable=False)

    date = Column(Text, nullable=False, default=utc_now_iso)
    total = Column(Integer, nullable=False)
    status = Column(Text, nullable=False, default=ORDER_STATUS_PROCESSING)
    # snapshot produktow z chwili zamowienia (JSON), nie zmienia sie po zapisie
    items = Column(Text, nullable=False)
