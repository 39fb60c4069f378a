"""
Price engine: one price per (good, shop) pair, plus ordered and filtered queries.
"""

import logging
import re
from datetime import datetime
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import List, Optional, Union

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from pricebot.config import settings
from pricebot.exceptions import InvalidInputError, NotFoundError
from pricebot.models.good import Good
from pricebot.models.price import GoodsPrice
from pricebot.models.shop import Shop

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")
CURRENCY_RE = re.compile(r"[A-Z]{3}")


def parse_amount(value: Union[Decimal, str, int, float]) -> Decimal:
    """
    Convert user input to a positive amount rounded to cents.

    Raises:
        InvalidInputError: if the value is not a number or not greater than zero.
    """
    try:
        amount = Decimal(str(value).strip()).quantize(CENT, rounding=ROUND_HALF_UP)
    except (InvalidOperation, ValueError):
        raise InvalidInputError(f"Invalid price format: {value!r}")

    if not amount.is_finite() or amount <= 0:
        raise InvalidInputError("Price must be greater than 0")
    return amount


def parse_currency(value: Optional[str]) -> str:
    """
    Upper-case a currency code, falling back to DEFAULT_CURRENCY when empty.

    Raises:
        InvalidInputError: the code is not three letters.
    """
    currency = (value or settings.DEFAULT_CURRENCY).strip().upper()
    if not CURRENCY_RE.fullmatch(currency):
        raise InvalidInputError(f"Invalid currency code: {value!r}")
    return currency


class PriceService:
    """Upsert and lookups over GoodsPrice records."""

    def set_price(
        self,
        db: Session,
        good_id: str,
        shop_id: str,
        amount: Union[Decimal, str, int, float],
        currency: Optional[str] = None,
    ) -> GoodsPrice:
        """
        Create or update the price of a good in a shop.

        An existing record for the pair keeps its id and created_at; only
        price, currency and updated_at change. A new record requires both
        the good and the shop to exist.

        Raises:
            InvalidInputError: amount is not a positive number or the currency
                is not a three-letter code.
            NotFoundError: the good or the shop does not exist (nothing is written).
        """
        amount = parse_amount(amount)
        currency = parse_currency(currency)
        now = datetime.utcnow()

        existing = self.get_by_pair(db, good_id, shop_id)
        if existing is not None:
            return self._update(db, existing, amount, currency, now)

        good = db.query(Good).filter(Good.id == good_id).first()
        shop = db.query(Shop).filter(Shop.id == shop_id).first()
        if good is None or shop is None:
            raise NotFoundError("Good or Shop not found")

        price = GoodsPrice(
            good_id=good.id,
            shop_id=shop.id,
            price=amount,
            currency=currency,
            created_at=now,
            updated_at=now,
        )
        db.add(price)
        try:
            db.commit()
        except IntegrityError:
            # Another writer created the pair between the lookup and the insert
            db.rollback()
            existing = self.get_by_pair(db, good_id, shop_id)
            if existing is None:
                raise
            logger.warning(f"Price for good {good_id} in shop {shop_id} created concurrently, updating it")
            return self._update(db, existing, amount, currency, now)

        db.refresh(price)
        logger.info(f"Created price {price.id} for good {good_id} in shop {shop_id}")
        return price

    def _update(
        self, db: Session, price: GoodsPrice, amount: Decimal, currency: str, now: datetime
    ) -> GoodsPrice:
        price.price = amount
        price.currency = currency
        price.updated_at = now
        db.commit()
        db.refresh(price)
        logger.info(f"Updated price {price.id}: {amount} {currency}")
        return price

    def get(self, db: Session, price_id: str) -> Optional[GoodsPrice]:
        return db.query(GoodsPrice).filter(GoodsPrice.id == price_id).first()

    def get_by_pair(self, db: Session, good_id: str, shop_id: str) -> Optional[GoodsPrice]:
        return (
            db.query(GoodsPrice)
            .filter(GoodsPrice.good_id == good_id, GoodsPrice.shop_id == shop_id)
            .first()
        )

    def exists(self, db: Session, good_id: str, shop_id: str) -> bool:
        return self.get_by_pair(db, good_id, shop_id) is not None

    def list_all(self, db: Session) -> List[GoodsPrice]:
        return db.query(GoodsPrice).order_by(GoodsPrice.created_at).all()

    def for_good(self, db: Session, good_id: str) -> List[GoodsPrice]:
        """All prices of a good, cheapest first."""
        return (
            db.query(GoodsPrice)
            .filter(GoodsPrice.good_id == good_id)
            .order_by(GoodsPrice.price.asc(), GoodsPrice.created_at.asc(), GoodsPrice.shop_id.asc())
            .all()
        )

    def for_shop(self, db: Session, shop_id: str) -> List[GoodsPrice]:
        return (
            db.query(GoodsPrice)
            .filter(GoodsPrice.shop_id == shop_id)
            .order_by(GoodsPrice.created_at)
            .all()
        )

    def cheapest(self, db: Session, good_id: str) -> Optional[GoodsPrice]:
        """
        Lowest price of a good.

        Ties go to the earliest created record, then to the lowest shop id.
        """
        return (
            db.query(GoodsPrice)
            .filter(GoodsPrice.good_id == good_id)
            .order_by(GoodsPrice.price.asc(), GoodsPrice.created_at.asc(), GoodsPrice.shop_id.asc())
            .first()
        )

    def most_expensive(self, db: Session, good_id: str) -> Optional[GoodsPrice]:
        """Highest price of a good, same tie-break as cheapest()."""
        return (
            db.query(GoodsPrice)
            .filter(GoodsPrice.good_id == good_id)
            .order_by(GoodsPrice.price.desc(), GoodsPrice.created_at.asc(), GoodsPrice.shop_id.asc())
            .first()
        )

    def search_by_good_name(self, db: Session, term: str) -> List[GoodsPrice]:
        return (
            db.query(GoodsPrice)
            .join(Good, Good.id == GoodsPrice.good_id)
            .filter(Good.name.ilike(f"%{term}%"))
            .order_by(Good.name, GoodsPrice.price)
            .all()
        )

    def search_by_shop_name(self, db: Session, term: str) -> List[GoodsPrice]:
        return (
            db.query(GoodsPrice)
            .join(Shop, Shop.id == GoodsPrice.shop_id)
            .filter(Shop.name.ilike(f"%{term}%"))
            .order_by(Shop.name, GoodsPrice.price)
            .all()
        )

    def in_range(
        self,
        db: Session,
        min_price: Union[Decimal, str, float],
        max_price: Union[Decimal, str, float],
    ) -> List[GoodsPrice]:
        """Prices between min_price and max_price, both inclusive."""
        try:
            low = Decimal(str(min_price))
            high = Decimal(str(max_price))
        except InvalidOperation:
            raise InvalidInputError("Price range bounds must be numbers")

        return (
            db.query(GoodsPrice)
            .filter(GoodsPrice.price >= low, GoodsPrice.price <= high)
            .order_by(GoodsPrice.price)
            .all()
        )

    def by_currency(self, db: Session, currency: str) -> List[GoodsPrice]:
        return (
            db.query(GoodsPrice)
            .filter(GoodsPrice.currency == currency.upper())
            .order_by(GoodsPrice.created_at)
            .all()
        )

    def delete(self, db: Session, price_id: str) -> None:
        """
        Delete a price by id.

        Raises:
            NotFoundError: no price has this id.
        """
        price = self.get(db, price_id)
        if price is None:
            raise NotFoundError(f"Price {price_id} not found")
        db.delete(price)
        db.commit()
        logger.info(f"Deleted price {price_id}")

    def delete_by_pair(self, db: Session, good_id: str, shop_id: str) -> None:
        """Delete the price of a good in a shop; does nothing when there is none."""
        price = self.get_by_pair(db, good_id, shop_id)
        if price is None:
            return
        db.delete(price)
        db.commit()
        logger.info(f"Deleted price of good {good_id} in shop {shop_id}")


price_service = PriceService()
