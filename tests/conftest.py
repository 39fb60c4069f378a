"""
pytest configuration - shared fixtures
"""
import sys
import os
import io
from contextlib import contextmanager
from typing import Generator, Optional

import pytest
from PIL import Image
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool

# Add backend directory to sys.path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "../backend"))

# Keep the application engine off the filesystem
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")

from pricebot.database import Base, get_db
from pricebot.models import Good, GoodsPrice, Receipt, Shop  # noqa: F401 - registers tables
from pricebot.exceptions import PriceBotError
from pricebot.services.receipt_service import ReceiptPipeline


class FakeOcrEngine:
    """Stand-in for OcrEngine that never touches tesseract."""

    def __init__(self, text: str = "MILK   1.99\n\nBREAD  0.89\n", available: bool = True):
        self.text = text
        self.available = available
        self.error: Optional[PriceBotError] = None
        self.calls = 0

    def is_available(self) -> bool:
        return self.available

    def recognize(self, img) -> str:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.text.strip()


@pytest.fixture
def test_db() -> Generator[Session, None, None]:
    """Create in-memory SQLite database for testing"""
    engine = create_engine(
        "sqlite:///:memory:",
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    SessionLocal = sessionmaker(bind=engine)
    session = SessionLocal()

    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(engine)


@pytest.fixture
def db_session(test_db):
    """Alias for test_db for clarity"""
    return test_db


@pytest.fixture
def session_factory(test_db):
    """Session factory for the chat router bound to the test database."""

    @contextmanager
    def _factory():
        yield test_db

    return _factory


@pytest.fixture
def fake_ocr() -> FakeOcrEngine:
    return FakeOcrEngine()


@pytest.fixture
def upload_dir(tmp_path):
    return tmp_path / "uploads"


@pytest.fixture
def pipeline(fake_ocr, upload_dir) -> ReceiptPipeline:
    return ReceiptPipeline(fake_ocr, upload_dir=str(upload_dir))


@pytest.fixture
def png_bytes() -> bytes:
    """A small valid PNG image."""
    buffer = io.BytesIO()
    Image.new("RGB", (60, 30), "white").save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def client(test_db, fake_ocr, pipeline):
    """TestClient with the test database and a fake OCR engine."""
    from fastapi.testclient import TestClient
    from pricebot.limiter import limiter
    from pricebot.main import app

    def _get_db():
        yield test_db

    app.dependency_overrides[get_db] = _get_db
    app.state.ocr_engine = fake_ocr
    app.state.receipt_pipeline = pipeline
    limiter.enabled = False

    yield TestClient(app)

    app.dependency_overrides.clear()
    limiter.enabled = True
