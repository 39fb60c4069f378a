"""
Diagnostics endpoints: OCR readiness and host information.
"""

import os
import platform

from fastapi import APIRouter, Depends

from pricebot.config import settings
from pricebot.dependencies import get_ocr_engine
from pricebot.services.ocr_service import OcrEngine

router = APIRouter()


@router.get("/ocr")
async def ocr_diagnostics(engine: OcrEngine = Depends(get_ocr_engine)):
    """Report OCR readiness. Always 200; the body carries the status."""
    available = engine.is_available()
    response = {"available": available, "status": "OK" if available else "NOT_AVAILABLE"}
    if available:
        response["testResult"] = "OCR initialized successfully"
    else:
        response["error"] = "Tesseract is not available"
    return response


@router.get("/system")
async def system_info():
    """Interpreter, OS and OCR settings of the running process."""
    return {
        "pythonVersion": platform.python_version(),
        "osName": platform.system(),
        "osVersion": platform.release(),
        "workingDir": os.getcwd(),
        "tesseractCmd": settings.TESSERACT_CMD,
        "ocrLanguages": settings.OCR_LANGUAGES,
    }
