"""
API endpoints for good management.
"""

from typing import List
from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.orm import Session

from pricebot.database import get_db
from pricebot.schemas import GoodCreate, GoodResponse
from pricebot.services.catalog_service import good_service

router = APIRouter()


@router.post("", response_model=GoodResponse, status_code=status.HTTP_201_CREATED)
async def create_good(good: GoodCreate, db: Session = Depends(get_db)):
    """Create a new good."""
    return good_service.create(db, good.name)


@router.get("", response_model=List[GoodResponse])
async def list_goods(db: Session = Depends(get_db)):
    """List all goods."""
    return good_service.list_all(db)


@router.get("/search", response_model=List[GoodResponse])
async def search_goods(name: str = Query(..., min_length=1), db: Session = Depends(get_db)):
    """Find goods whose name contains the given text (case-insensitive)."""
    return good_service.search(db, name)


@router.get("/{good_id}", response_model=GoodResponse)
async def get_good(good_id: str, db: Session = Depends(get_db)):
    """Get a good by id."""
    good = good_service.get(db, good_id)
    if not good:
        raise HTTPException(status_code=404, detail="Good not found")
    return good


@router.put("/{good_id}", response_model=GoodResponse)
async def update_good(good_id: str, good: GoodCreate, db: Session = Depends(get_db)):
    """Rename an existing good."""
    return good_service.rename(db, good_id, good.name)


@router.delete("/{good_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_good(good_id: str, db: Session = Depends(get_db)):
    """Delete a good. Its prices are kept."""
    good_service.delete(db, good_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
