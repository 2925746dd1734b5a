from sqlalchemy import Column, Integer, String, DateTime, Numeric, JSON
from sqlalchemy.orm import relationship
from datetime import datetime, timezone

from marketplace.data.database import Base
from marketplace.domain.order_status import OrderStatus


class OrderModel(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, nullable=False, index=True)

    # koszyk i jego wersja z momentu checkoutu (sprzatanie nieoproznionego koszyka)
    cart_id = Column(Integer, nullable=False, index=True)
    cart_version = Column(Integer, nullable=False)

    status = Column(String(20), nullable=False, default=OrderStatus.PENDING.value)
    total = Column(Numeric(12, 2), nullable=False)
    details = Column(JSON, nullable=False, default=dict)
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))

    items = relationship(
        "OrderItemModel",
        back_populates="order",
        order_by="OrderItemModel.id",
        lazy="selectin",
    )
