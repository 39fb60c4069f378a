"""
API endpoints for shop management.
"""

from typing import List
from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.orm import Session

from pricebot.database import get_db
from pricebot.schemas import ShopCreate, ShopResponse
from pricebot.services.catalog_service import shop_service

router = APIRouter()


@router.post("", response_model=ShopResponse, status_code=status.HTTP_201_CREATED)
async def create_shop(shop: ShopCreate, db: Session = Depends(get_db)):
    """Create a new shop."""
    return shop_service.create(db, shop.name)


@router.get("", response_model=List[ShopResponse])
async def list_shops(db: Session = Depends(get_db)):
    """List all shops."""
    return shop_service.list_all(db)


@router.get("/search", response_model=List[ShopResponse])
async def search_shops(name: str = Query(..., min_length=1), db: Session = Depends(get_db)):
    """Find shops whose name contains the given text (case-insensitive)."""
    return shop_service.search(db, name)


@router.get("/{shop_id}", response_model=ShopResponse)
async def get_shop(shop_id: str, db: Session = Depends(get_db)):
    """Get a shop by id."""
    shop = shop_service.get(db, shop_id)
    if not shop:
        raise HTTPException(status_code=404, detail="Shop not found")
    return shop


@router.put("/{shop_id}", response_model=ShopResponse)
async def update_shop(shop_id: str, shop: ShopCreate, db: Session = Depends(get_db)):
    """Rename an existing shop."""
    return shop_service.rename(db, shop_id, shop.name)


@router.delete("/{shop_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_shop(shop_id: str, db: Session = Depends(get_db)):
    """Delete a shop. Its prices are kept."""
    shop_service.delete(db, shop_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
