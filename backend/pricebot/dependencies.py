"""
Shared API dependencies.
"""

from fastapi import Request

from pricebot.database import get_db
from pricebot.services.ocr_service import OcrEngine
from pricebot.services.receipt_service import ReceiptPipeline

__all__ = ["get_db", "get_ocr_engine", "get_receipt_pipeline"]


def get_ocr_engine(request: Request) -> OcrEngine:
    """OCR engine created once in the application lifespan."""
    return request.app.state.ocr_engine


def get_receipt_pipeline(request: Request) -> ReceiptPipeline:
    """Receipt pipeline bound to the application's OCR engine."""
    return request.app.state.receipt_pipeline
