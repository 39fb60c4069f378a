"""
Receipt database model.
"""

from sqlalchemy import Column, String, Text, DateTime, Index
from datetime import datetime

from pricebot.database import Base, new_id


class Receipt(Base):
    """Receipt model holding the text recognized from one uploaded image."""

    __tablename__ = "receipts"
    __table_args__ = (
        Index("idx_receipt_created", "created_at"),
    )

    id = Column(String(32), primary_key=True, default=new_id)
    original_text = Column(Text, nullable=False, default="")  # Raw OCR text
    processed_text = Column(Text, nullable=False, default="")  # Normalized text
    file_name = Column(String, nullable=True)  # Name the file was uploaded with
    image_path = Column(String, nullable=True)  # Stored copy under UPLOAD_DIR
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
