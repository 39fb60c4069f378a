"""
FastAPI application entry point for Price Bot.

This module initializes the FastAPI app with middleware, CORS, logging,
the OCR engine, and registers all API routers.
"""

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from slowapi.errors import RateLimitExceeded

from pricebot.config import settings
from pricebot.database import init_db
from pricebot.exceptions import PriceBotError
from pricebot.limiter import limiter
from pricebot.logger import setup_logging
from pricebot.routers import diagnostics, goods, prices, receipts, shops
from pricebot.services.ocr_service import OcrEngine
from pricebot.services.receipt_service import ReceiptPipeline

setup_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for startup and shutdown events.
    """
    # Startup
    logger.info("Initializing database...")
    init_db()
    logger.info("Database initialized successfully")

    app.state.ocr_engine = OcrEngine()
    app.state.receipt_pipeline = ReceiptPipeline(app.state.ocr_engine)
    if not app.state.ocr_engine.is_available():
        logger.warning("Tesseract is not available; receipt uploads will return 503")

    yield

    # Shutdown
    logger.info("Shutting down application...")


# Create FastAPI app
app = FastAPI(
    title="Price Bot API",
    description="API for shops, goods, prices and receipt recognition",
    version="1.0.0",
    lifespan=lifespan,
)
app.state.limiter = limiter


@app.exception_handler(RateLimitExceeded)
async def custom_rate_limit_handler(request: Request, exc: RateLimitExceeded):
    return JSONResponse(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        content={"detail": "Rate limit exceeded. Please try again later."},
    )


@app.exception_handler(PriceBotError)
async def price_bot_error_handler(request: Request, exc: PriceBotError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    else:
        logger.warning(f"{request.method} {request.url.path} rejected: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Global exception: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"message": "Internal Server Error", "details": str(exc)},
    )


# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register routers
app.include_router(shops.router, prefix=f"{settings.API_PREFIX}/shops", tags=["shops"])
app.include_router(goods.router, prefix=f"{settings.API_PREFIX}/goods", tags=["goods"])
app.include_router(prices.router, prefix=f"{settings.API_PREFIX}/prices", tags=["prices"])
app.include_router(receipts.router, prefix=f"{settings.API_PREFIX}/receipts", tags=["receipts"])
app.include_router(diagnostics.router, prefix=f"{settings.API_PREFIX}/test", tags=["diagnostics"])


@app.get("/")
async def root():
    """Root endpoint for health check."""
    return {"message": "Price Bot API", "status": "running"}


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "pricebot.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level="info",
    )
