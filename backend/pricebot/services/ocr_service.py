"""
OCR Service for extracting text from receipt images.

Wraps Tesseract (via pytesseract) as a single long-lived engine with an
explicit readiness probe. The engine is created once at startup and passed to
whoever needs it.
"""

import io
import logging
import threading
from typing import Optional

import pytesseract
from PIL import Image, UnidentifiedImageError

from pricebot.config import settings
from pricebot.exceptions import InvalidInputError, ProcessingError

logger = logging.getLogger(__name__)


def decode_image(data: bytes) -> Image.Image:
    """
    Decode raw bytes into a PIL image.

    Raises:
        InvalidInputError: the bytes are not a readable image.
    """
    try:
        img = Image.open(io.BytesIO(data))
        img.load()
    except (UnidentifiedImageError, OSError, ValueError) as e:
        raise InvalidInputError(f"Invalid image format: {e}")

    logger.info(f"Image read successfully: {img.width}x{img.height} pixels")
    return img


def preprocess_image(img: Image.Image) -> Image.Image:
    """
    Preprocess image for better OCR accuracy.

    Args:
        img: Decoded PIL Image

    Returns:
        Preprocessed PIL Image
    """
    # Convert to RGB if necessary
    if img.mode != "RGB":
        img = img.convert("RGB")

    return img


class OcrEngine:
    """
    Tesseract engine handle.

    Calls are serialized with a lock and bounded by a timeout, since a single
    recognition can take long and the binary is shared.
    """

    def __init__(
        self,
        tesseract_cmd: Optional[str] = None,
        languages: Optional[str] = None,
        config: Optional[str] = None,
        timeout: Optional[int] = None,
    ):
        self.tesseract_cmd = tesseract_cmd or settings.TESSERACT_CMD
        self.languages = languages or settings.OCR_LANGUAGES
        self.config = config if config is not None else settings.OCR_CONFIG
        self.timeout = timeout if timeout is not None else settings.OCR_TIMEOUT
        self._lock = threading.Lock()

        pytesseract.pytesseract.tesseract_cmd = self.tesseract_cmd
        logger.info(
            f"OCR engine configured: cmd={self.tesseract_cmd}, lang={self.languages}, "
            f"timeout={self.timeout}s"
        )

    def is_available(self) -> bool:
        """Check whether the tesseract binary can be executed."""
        try:
            version = pytesseract.get_tesseract_version()
        except (pytesseract.TesseractNotFoundError, OSError) as e:
            logger.warning(f"Tesseract is not available: {e}")
            return False

        logger.debug(f"Tesseract {version} available")
        return True

    def recognize(self, img: Image.Image) -> str:
        """
        Extract text from a decoded image.

        Raises:
            ProcessingError: recognition failed or exceeded the timeout.
        """
        img = preprocess_image(img)
        try:
            with self._lock:
                text = pytesseract.image_to_string(
                    img,
                    lang=self.languages,
                    config=self.config,
                    timeout=self.timeout,
                )
        except (RuntimeError, OSError) as e:
            # TesseractError and the timeout error are both RuntimeError
            logger.error(f"OCR processing error: {e}")
            raise ProcessingError(f"Tesseract error: {e}")

        logger.debug(f"Recognized text length: {len(text)} characters")
        return text.strip()
