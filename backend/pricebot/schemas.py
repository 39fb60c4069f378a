from typing import Optional
from datetime import datetime
from decimal import Decimal
from pydantic import BaseModel, Field, field_validator

from pricebot.services.catalog_service import MAX_NAME_LENGTH


def _require_text(value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError("must not be blank")
    return value


# --- Shop ---
class ShopBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=MAX_NAME_LENGTH)

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str) -> str:
        return _require_text(v)


class ShopCreate(ShopBase):
    pass


class ShopResponse(BaseModel):
    id: str
    name: str

    class Config:
        from_attributes = True


# --- Good ---
class GoodBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=MAX_NAME_LENGTH)

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str) -> str:
        return _require_text(v)


class GoodCreate(GoodBase):
    pass


class GoodResponse(BaseModel):
    id: str
    name: str

    class Config:
        from_attributes = True


# --- Price ---
class GoodsPriceRequest(BaseModel):
    good_id: str = Field(..., alias="goodId", min_length=1)
    shop_id: str = Field(..., alias="shopId", min_length=1)
    price: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2)
    currency: Optional[str] = Field(None, min_length=3, max_length=3)

    @field_validator("currency")
    @classmethod
    def upper_currency(cls, v: Optional[str]) -> Optional[str]:
        return v.upper() if v else v

    class Config:
        populate_by_name = True


class GoodsPriceResponse(BaseModel):
    id: str
    good_id: str
    shop_id: str
    price: Decimal
    currency: str
    created_at: datetime
    updated_at: datetime
    good: Optional[GoodResponse] = None
    shop: Optional[ShopResponse] = None

    class Config:
        from_attributes = True


# --- Receipt ---
class ReceiptResponse(BaseModel):
    id: str
    original_text: str
    processed_text: str
    file_name: Optional[str] = None
    image_path: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class ReceiptUpdate(BaseModel):
    processed_text: str = Field(..., alias="processedText")

    class Config:
        populate_by_name = True


class OcrStatusResponse(BaseModel):
    available: bool
    message: str
