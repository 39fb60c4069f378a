"""
Store accessors for shops and goods.

Both collections share the same contract, so one class parametrized by the
model serves both.
"""

import logging
from typing import Generic, List, Optional, Type, TypeVar

from sqlalchemy.orm import Session

from pricebot.exceptions import InvalidInputError, NotFoundError
from pricebot.models.good import Good
from pricebot.models.shop import Shop

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", Shop, Good)

MAX_NAME_LENGTH = 200


class NamedEntityService(Generic[ModelT]):
    """CRUD and name search over a collection of named records."""

    def __init__(self, model: Type[ModelT], label: str):
        self.model = model
        self.label = label

    def clean_name(self, name: Optional[str]) -> str:
        """
        Strip a name and check it is non-blank and at most MAX_NAME_LENGTH long.

        Raises:
            InvalidInputError: the name is blank or too long.
        """
        name = (name or "").strip()
        if not name:
            raise InvalidInputError(f"{self.label.capitalize()} name is required")
        if len(name) > MAX_NAME_LENGTH:
            raise InvalidInputError(
                f"{self.label.capitalize()} name must be at most {MAX_NAME_LENGTH} characters"
            )
        return name

    def create(self, db: Session, name: str) -> ModelT:
        """Create a record. Names are not unique."""
        name = self.clean_name(name)

        entity = self.model(name=name)
        db.add(entity)
        db.commit()
        db.refresh(entity)
        logger.info(f"Created {self.label} '{entity.name}' ({entity.id})")
        return entity

    def get(self, db: Session, entity_id: str) -> Optional[ModelT]:
        return db.query(self.model).filter(self.model.id == entity_id).first()

    def list_all(self, db: Session) -> List[ModelT]:
        return db.query(self.model).order_by(self.model.name).all()

    def search(self, db: Session, term: str) -> List[ModelT]:
        """Case-insensitive substring search by name."""
        return (
            db.query(self.model)
            .filter(self.model.name.ilike(f"%{term}%"))
            .order_by(self.model.name)
            .all()
        )

    def find_by_name(self, db: Session, name: str) -> Optional[ModelT]:
        return db.query(self.model).filter(self.model.name == name).first()

    def exists_by_name(self, db: Session, name: str) -> bool:
        return self.find_by_name(db, name) is not None

    def rename(self, db: Session, entity_id: str, name: str) -> ModelT:
        entity = self.get(db, entity_id)
        if entity is None:
            raise NotFoundError(f"{self.label.capitalize()} {entity_id} not found")

        entity.name = self.clean_name(name)
        db.commit()
        db.refresh(entity)
        return entity

    def delete(self, db: Session, entity_id: str) -> None:
        """
        Delete a record by id.

        Prices referencing it are left untouched.
        """
        entity = self.get(db, entity_id)
        if entity is None:
            raise NotFoundError(f"{self.label.capitalize()} {entity_id} not found")

        db.delete(entity)
        db.commit()
        logger.info(f"Deleted {self.label} {entity_id}")


shop_service = NamedEntityService(Shop, "shop")
good_service = NamedEntityService(Good, "good")
