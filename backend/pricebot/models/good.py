"""
Good database model.
"""

from sqlalchemy import Column, String

from pricebot.database import Base, new_id


class Good(Base):
    """Good model representing an item that can be priced."""

    __tablename__ = "goods"

    id = Column(String(32), primary_key=True, default=new_id)
    name = Column(String, nullable=False, index=True)
