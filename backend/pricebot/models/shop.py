"""
Shop database model.
"""

from sqlalchemy import Column, String

from pricebot.database import Base, new_id


class Shop(Base):
    """Shop model representing a place where goods are priced."""

    __tablename__ = "shops"

    id = Column(String(32), primary_key=True, default=new_id)
    name = Column(String, nullable=False, index=True)
