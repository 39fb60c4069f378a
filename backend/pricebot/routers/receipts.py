"""
Receipt API endpoints for upload, OCR status and retrieval.
"""

import logging
from datetime import datetime
from typing import List

from fastapi import (
    APIRouter,
    Depends,
    File,
    HTTPException,
    Query,
    Request,
    Response,
    UploadFile,
    status,
)
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from pricebot.config import settings
from pricebot.database import get_db
from pricebot.dependencies import get_ocr_engine, get_receipt_pipeline
from pricebot.exceptions import InvalidInputError
from pricebot.limiter import limiter
from pricebot.schemas import OcrStatusResponse, ReceiptResponse, ReceiptUpdate
from pricebot.services.ocr_service import OcrEngine
from pricebot.services.receipt_service import ReceiptPipeline, receipt_service

logger = logging.getLogger(__name__)

router = APIRouter()


def _parse_datetime(value: str, field: str) -> datetime:
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        raise InvalidInputError(f"{field} must be an ISO date-time, got {value!r}")


@router.post("/upload", response_model=ReceiptResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(settings.UPLOAD_RATE_LIMIT)
async def upload_receipt(
    request: Request,
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    pipeline: ReceiptPipeline = Depends(get_receipt_pipeline),
):
    """
    Upload a receipt image and run OCR on it.

    Returns the stored receipt. 400 for empty/non-image uploads, 503 when
    Tesseract is not available, 500 when recognition fails.
    """
    file_content = await file.read()
    # Recognition is slow and blocking
    return await run_in_threadpool(
        pipeline.process, db, file_content, file.filename, file.content_type
    )


@router.get("/status", response_model=OcrStatusResponse)
async def ocr_status(engine: OcrEngine = Depends(get_ocr_engine)):
    """Report whether the OCR engine is ready."""
    if engine.is_available():
        return {"available": True, "message": "OCR service is available"}
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={
            "available": False,
            "message": "OCR service is not available. Please check Tesseract installation.",
        },
    )


@router.get("", response_model=List[ReceiptResponse])
async def list_receipts(db: Session = Depends(get_db)):
    """List all receipts, newest first."""
    return receipt_service.list_all(db)


@router.get("/search", response_model=List[ReceiptResponse])
async def search_receipts(text: str = Query(..., min_length=1), db: Session = Depends(get_db)):
    """Search receipts by recognized text."""
    return receipt_service.search_text(db, text)


@router.get("/search/filename", response_model=List[ReceiptResponse])
async def search_receipts_by_file_name(
    file_name: str = Query(..., alias="fileName", min_length=1),
    db: Session = Depends(get_db),
):
    """Search receipts by uploaded file name."""
    return receipt_service.search_file_name(db, file_name)


@router.get("/after", response_model=List[ReceiptResponse])
async def receipts_after(date: str, db: Session = Depends(get_db)):
    """Receipts created after the given ISO date-time."""
    return receipt_service.created_after(db, _parse_datetime(date, "date"))


@router.get("/between", response_model=List[ReceiptResponse])
async def receipts_between(
    start_date: str = Query(..., alias="startDate"),
    end_date: str = Query(..., alias="endDate"),
    db: Session = Depends(get_db),
):
    """Receipts created between two ISO date-times (inclusive)."""
    start = _parse_datetime(start_date, "startDate")
    end = _parse_datetime(end_date, "endDate")
    return receipt_service.created_between(db, start, end)


@router.get("/{receipt_id}", response_model=ReceiptResponse)
async def get_receipt(receipt_id: str, db: Session = Depends(get_db)):
    """Get receipt details."""
    receipt = receipt_service.get(db, receipt_id)
    if not receipt:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Receipt {receipt_id} not found",
        )
    return receipt


@router.put("/{receipt_id}", response_model=ReceiptResponse)
async def update_receipt(
    receipt_id: str, update: ReceiptUpdate, db: Session = Depends(get_db)
):
    """Replace the normalized text of a receipt."""
    return receipt_service.update_text(db, receipt_id, update.processed_text)


@router.delete("/{receipt_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_receipt(receipt_id: str, db: Session = Depends(get_db)):
    """Delete a receipt."""
    receipt_service.delete(db, receipt_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
