"""
Receipt pipeline and receipt store accessor.

The pipeline is linear: validate → probe OCR → save image → decode →
recognize → normalize → save record. Any failure aborts the whole upload and
no Receipt is written.
"""

import logging
import uuid
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from pricebot.config import settings
from pricebot.exceptions import (
    InvalidInputError,
    NotFoundError,
    ServiceUnavailableError,
    StorageError,
)
from pricebot.models.receipt import Receipt
from pricebot.services.normalization import normalize_text
from pricebot.services.ocr_service import OcrEngine, decode_image

logger = logging.getLogger(__name__)

DEFAULT_EXTENSION = ".jpg"


class ReceiptPipeline:
    """Turns an uploaded image into a stored Receipt."""

    def __init__(
        self,
        engine: OcrEngine,
        upload_dir: Optional[str] = None,
        max_upload_size: Optional[int] = None,
    ):
        self.engine = engine
        self.upload_dir = Path(upload_dir or settings.UPLOAD_DIR)
        self.max_upload_size = max_upload_size or settings.MAX_UPLOAD_SIZE
        self.upload_dir.mkdir(parents=True, exist_ok=True)

    def validate(self, data: bytes, content_type: Optional[str]) -> None:
        if not data:
            raise InvalidInputError("File is empty")
        if not content_type or not content_type.lower().startswith("image/"):
            raise InvalidInputError(f"Invalid content type: {content_type}")
        if len(data) > self.max_upload_size:
            raise InvalidInputError(
                f"File too large. Max size: {self.max_upload_size / 1024 / 1024} MB"
            )

    def save_file(self, data: bytes, file_name: Optional[str]) -> Path:
        """Write the upload under a random name, keeping its extension."""
        suffix = Path(file_name).suffix.lower() if file_name else ""
        file_path = self.upload_dir / f"{uuid.uuid4()}{suffix or DEFAULT_EXTENSION}"
        try:
            file_path.write_bytes(data)
        except OSError as e:
            logger.error(f"Failed to save upload {file_name}: {e}")
            raise StorageError(f"File processing error: {e}")

        logger.info(f"File saved: {file_path}")
        return file_path

    def process(
        self,
        db: Session,
        data: bytes,
        file_name: Optional[str],
        content_type: Optional[str],
    ) -> Receipt:
        """
        Run the full pipeline for one upload.

        Raises:
            InvalidInputError: empty, oversized, non-image or undecodable upload.
            ServiceUnavailableError: the OCR engine is not ready.
            StorageError: the image could not be saved.
            ProcessingError: recognition failed.
        """
        self.validate(data, content_type)

        if not self.engine.is_available():
            raise ServiceUnavailableError(
                "OCR service is not available. Please check Tesseract installation."
            )

        logger.info(f"Processing receipt upload: {file_name} ({len(data)} bytes)")
        file_path = self.save_file(data, file_name)

        try:
            img = decode_image(data)
            original_text = self.engine.recognize(img)
            logger.info(f"OCR completed for file: {file_path.name}")

            receipt = Receipt(
                original_text=original_text,
                processed_text=normalize_text(original_text),
                file_name=file_name,
                image_path=str(file_path),
            )
            db.add(receipt)
            db.commit()
            db.refresh(receipt)
        except Exception:
            db.rollback()
            file_path.unlink(missing_ok=True)
            raise

        logger.info(f"Receipt saved with ID: {receipt.id}")
        return receipt


class ReceiptService:
    """Lookups and edits over stored receipts."""

    def get(self, db: Session, receipt_id: str) -> Optional[Receipt]:
        return db.query(Receipt).filter(Receipt.id == receipt_id).first()

    def list_all(self, db: Session) -> List[Receipt]:
        return db.query(Receipt).order_by(Receipt.created_at.desc()).all()

    def search_text(self, db: Session, text: str) -> List[Receipt]:
        """Case-insensitive search over raw and normalized text."""
        pattern = f"%{text}%"
        return (
            db.query(Receipt)
            .filter(or_(Receipt.processed_text.ilike(pattern), Receipt.original_text.ilike(pattern)))
            .order_by(Receipt.created_at.desc())
            .all()
        )

    def search_file_name(self, db: Session, file_name: str) -> List[Receipt]:
        return (
            db.query(Receipt)
            .filter(Receipt.file_name.ilike(f"%{file_name}%"))
            .order_by(Receipt.created_at.desc())
            .all()
        )

    def created_after(self, db: Session, moment: datetime) -> List[Receipt]:
        return (
            db.query(Receipt)
            .filter(Receipt.created_at > moment)
            .order_by(Receipt.created_at)
            .all()
        )

    def created_between(self, db: Session, start: datetime, end: datetime) -> List[Receipt]:
        if start > end:
            raise InvalidInputError("startDate must not be after endDate")
        return (
            db.query(Receipt)
            .filter(Receipt.created_at.between(start, end))
            .order_by(Receipt.created_at)
            .all()
        )

    def update_text(self, db: Session, receipt_id: str, processed_text: str) -> Receipt:
        """Replace the normalized text, e.g. after a manual correction."""
        receipt = self.get(db, receipt_id)
        if receipt is None:
            raise NotFoundError(f"Receipt not found with ID: {receipt_id}")

        receipt.processed_text = processed_text
        receipt.updated_at = datetime.utcnow()
        db.commit()
        db.refresh(receipt)
        return receipt

    def delete(self, db: Session, receipt_id: str) -> None:
        receipt = self.get(db, receipt_id)
        if receipt is None:
            raise NotFoundError(f"Receipt {receipt_id} not found")

        db.delete(receipt)
        db.commit()
        logger.info(f"Receipt deleted with ID: {receipt_id}")


receipt_service = ReceiptService()
