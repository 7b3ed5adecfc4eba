"""
Storage contract consumed by the Friendship Manager

The service only talks to the store through insert / query / count /
update_where / delete_where, so the persistence engine stays swappable.
Every write is committed on its own, which makes each call one atomic
statement from the caller's point of view.
"""
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, List, Sequence, Type

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from friends_api.core.exceptions import InternalStoreError, StoreConflict

logger = logging.getLogger(__name__)


class Store(ABC):
    """Narrow persistence interface"""

    @abstractmethod
    def insert(self, entity: Any) -> Any:
        """Persist a new entity. Raises StoreConflict on a uniqueness violation."""

    @abstractmethod
    def query(self, model: Type, *criteria, order_by: Sequence = ()) -> List[Any]:
        """Return every entity of `model` matching all criteria"""

    @abstractmethod
    def count(self, model: Type, *criteria) -> int:
        """Count entities of `model` matching all criteria"""

    @abstractmethod
    def update_where(self, model: Type, criteria: Iterable, fields: Dict[str, Any]) -> int:
        """Set `fields` on matching rows, returning rows affected"""

    @abstractmethod
    def delete_where(self, model: Type, criteria: Iterable) -> int:
        """Delete matching rows, returning rows affected"""


class SQLAlchemyStore(Store):
    """Store backed by a SQLAlchemy session"""

    def __init__(self, db: Session):
        self.db = db

    def insert(self, entity):
        try:
            self.db.add(entity)
            self.db.commit()
            self.db.refresh(entity)
            return entity
        except IntegrityError as e:
            self.db.rollback()
            logger.info(f"Insert of {type(entity).__name__} hit a uniqueness constraint: {e.orig}")
            raise StoreConflict()
        except SQLAlchemyError as e:
            self._fail(f"insert {type(entity).__name__}", e)

    def query(self, model, *criteria, order_by=()):
        try:
            q = self.db.query(model).filter(*criteria)
            if order_by:
                q = q.order_by(*order_by)
            return q.all()
        except SQLAlchemyError as e:
            self._fail(f"query {model.__name__}", e)

    def count(self, model, *criteria):
        try:
            return self.db.query(model).filter(*criteria).count()
        except SQLAlchemyError as e:
            self._fail(f"count {model.__name__}", e)

    def update_where(self, model, criteria, fields):
        try:
            rows = self.db.query(model).filter(*criteria).update(fields, synchronize_session="fetch")
            self.db.commit()
            return rows
        except SQLAlchemyError as e:
            self._fail(f"update {model.__name__}", e)

    def delete_where(self, model, criteria):
        try:
            rows = self.db.query(model).filter(*criteria).delete(synchronize_session="fetch")
            self.db.commit()
            return rows
        except SQLAlchemyError as e:
            self._fail(f"delete {model.__name__}", e)

    def _fail(self, action: str, error: SQLAlchemyError):
        self.db.rollback()
        logger.error(f"Store failure during {action}: {error}")
        raise InternalStoreError() from error
