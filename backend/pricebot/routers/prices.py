"""
API endpoints for goods prices.
"""

from decimal import Decimal
from typing import List
from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.orm import Session

from pricebot.database import get_db
from pricebot.exceptions import NotFoundError
from pricebot.schemas import GoodsPriceRequest, GoodsPriceResponse
from pricebot.services.price_service import price_service

router = APIRouter()


@router.post("", response_model=GoodsPriceResponse, status_code=status.HTTP_201_CREATED)
async def set_price(request: GoodsPriceRequest, db: Session = Depends(get_db)):
    """Create or update the price of a good in a shop."""
    try:
        return price_service.set_price(
            db, request.good_id, request.shop_id, request.price, request.currency
        )
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)


@router.get("", response_model=List[GoodsPriceResponse])
async def list_prices(db: Session = Depends(get_db)):
    """List all prices."""
    return price_service.list_all(db)


@router.get("/range", response_model=List[GoodsPriceResponse])
async def prices_in_range(
    min_price: Decimal = Query(..., alias="minPrice", ge=0),
    max_price: Decimal = Query(..., alias="maxPrice", ge=0),
    db: Session = Depends(get_db),
):
    """Prices between minPrice and maxPrice (inclusive)."""
    return price_service.in_range(db, min_price, max_price)


@router.get("/currency/{currency}", response_model=List[GoodsPriceResponse])
async def prices_by_currency(currency: str, db: Session = Depends(get_db)):
    """Prices in the given currency."""
    return price_service.by_currency(db, currency)


@router.get("/search/good", response_model=List[GoodsPriceResponse])
async def search_by_good_name(
    good_name: str = Query(..., alias="goodName", min_length=1),
    db: Session = Depends(get_db),
):
    """Prices of goods whose name contains goodName."""
    return price_service.search_by_good_name(db, good_name)


@router.get("/search/shop", response_model=List[GoodsPriceResponse])
async def search_by_shop_name(
    shop_name: str = Query(..., alias="shopName", min_length=1),
    db: Session = Depends(get_db),
):
    """Prices in shops whose name contains shopName."""
    return price_service.search_by_shop_name(db, shop_name)


@router.get("/good/{good_id}", response_model=List[GoodsPriceResponse])
async def prices_for_good(good_id: str, db: Session = Depends(get_db)):
    """All prices of a good, cheapest first."""
    return price_service.for_good(db, good_id)


@router.get("/good/{good_id}/cheapest", response_model=GoodsPriceResponse)
async def cheapest_price(good_id: str, db: Session = Depends(get_db)):
    """Cheapest price of a good."""
    price = price_service.cheapest(db, good_id)
    if not price:
        raise HTTPException(status_code=404, detail="No prices for this good")
    return price


@router.get("/good/{good_id}/most-expensive", response_model=GoodsPriceResponse)
async def most_expensive_price(good_id: str, db: Session = Depends(get_db)):
    """Most expensive price of a good."""
    price = price_service.most_expensive(db, good_id)
    if not price:
        raise HTTPException(status_code=404, detail="No prices for this good")
    return price


@router.get("/good/{good_id}/shop/{shop_id}", response_model=GoodsPriceResponse)
async def price_for_pair(good_id: str, shop_id: str, db: Session = Depends(get_db)):
    """Price of a good in a shop."""
    price = price_service.get_by_pair(db, good_id, shop_id)
    if not price:
        raise HTTPException(status_code=404, detail="Price not found")
    return price


@router.delete("/good/{good_id}/shop/{shop_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_price_for_pair(good_id: str, shop_id: str, db: Session = Depends(get_db)):
    """Delete the price of a good in a shop. Succeeds when there is none."""
    price_service.delete_by_pair(db, good_id, shop_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/shop/{shop_id}", response_model=List[GoodsPriceResponse])
async def prices_for_shop(shop_id: str, db: Session = Depends(get_db)):
    """All prices in a shop."""
    return price_service.for_shop(db, shop_id)


@router.get("/{price_id}", response_model=GoodsPriceResponse)
async def get_price(price_id: str, db: Session = Depends(get_db)):
    """Get a price by id."""
    price = price_service.get(db, price_id)
    if not price:
        raise HTTPException(status_code=404, detail="Price not found")
    return price


@router.put("/{price_id}", response_model=GoodsPriceResponse)
async def update_price(
    price_id: str, request: GoodsPriceRequest, db: Session = Depends(get_db)
):
    """Re-run set-price for the pair in the body; the id must exist."""
    if not price_service.get(db, price_id):
        raise HTTPException(status_code=404, detail="Price not found")
    try:
        return price_service.set_price(
            db, request.good_id, request.shop_id, request.price, request.currency
        )
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)


@router.delete("/{price_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_price(price_id: str, db: Session = Depends(get_db)):
    """Delete a price by id."""
    price_service.delete(db, price_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
