"""
GoodsPrice database model.
"""

from datetime import datetime

from sqlalchemy import Column, String, Numeric, DateTime, Index, UniqueConstraint
from sqlalchemy.orm import relationship

from pricebot.database import Base, new_id


class GoodsPrice(Base):
    """
    Price of one good in one shop.

    good_id and shop_id are plain references without foreign keys: deleting a
    good or a shop leaves its prices in place.
    """

    __tablename__ = "goods_prices"
    __table_args__ = (
        UniqueConstraint("good_id", "shop_id", name="uq_price_good_shop"),
        Index("idx_price_good_amount", "good_id", "price"),
        Index("idx_price_shop", "shop_id"),
    )

    id = Column(String(32), primary_key=True, default=new_id)
    good_id = Column(String(32), nullable=False)
    shop_id = Column(String(32), nullable=False)
    price = Column(Numeric(12, 2), nullable=False)
    currency = Column(String(3), nullable=False, default="USD")
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    # Relationships (read-only, resolve to None for dangling references)
    good = relationship(
        "Good",
        primaryjoin="Good.id == foreign(GoodsPrice.good_id)",
        viewonly=True,
        lazy="joined",
    )
    shop = relationship(
        "Shop",
        primaryjoin="Shop.id == foreign(GoodsPrice.shop_id)",
        viewonly=True,
        lazy="joined",
    )
