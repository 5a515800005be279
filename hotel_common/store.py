"""Row-level table store used by the booking and payment flows.

Every write is committed as its own round trip. Failures raised by the
database are rolled back and surfaced as :class:`RemoteOperationError` with
the driver message untouched.
"""
from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Type, TypeVar, Union

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .database import Base
from .exceptions import RemoteOperationError

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=Base)
Hook = Callable[[Session, Dict[str, Any]], Any]


class TableStore:
    def __init__(self, db: Session, hooks: Optional[Mapping[str, Hook]] = None) -> None:
        self.db = db
        self._hooks: Dict[str, Hook] = dict(hooks or {})

    def register_hook(self, name: str, hook: Hook) -> None:
        self._hooks[name] = hook

    def _filtered(self, model: Type[ModelT], filters: Optional[Mapping[str, Any]]):
        query = self.db.query(model)
        for column_name, value in (filters or {}).items():
            column = getattr(model, column_name)
            if isinstance(value, (list, tuple, set, frozenset)):
                query = query.filter(column.in_(list(value)))
            else:
                query = query.filter(column == value)
        return query

    def select(
        self,
        model: Type[ModelT],
        *,
        filters: Optional[Mapping[str, Any]] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
        single: bool = False,
    ) -> Union[List[ModelT], Optional[ModelT]]:
        try:
            query = self._filtered(model, filters)
            if order_by:
                column = getattr(model, order_by)
                query = query.order_by(column.desc() if descending else column.asc())
            if single:
                return query.first()
            return query.all()
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise RemoteOperationError(str(exc)) from exc

    def insert(self, model: Type[ModelT], rows: Union[Mapping[str, Any], Sequence[Mapping[str, Any]]]):
        """Insert one row (mapping) or several (sequence of mappings) and return the new objects."""
        many = not isinstance(rows, Mapping)
        objects = [model(**dict(row)) for row in (rows if many else [rows])]
        try:
            self.db.add_all(objects)
            self.db.commit()
            for obj in objects:
                self.db.refresh(obj)
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.warning("Insert into %s failed: %s", model.__tablename__, exc)
            raise RemoteOperationError(str(exc)) from exc
        return objects if many else objects[0]

    def update(self, model: Type[ModelT], values: Mapping[str, Any], *, filters: Mapping[str, Any]) -> List[ModelT]:
        try:
            rows = self._filtered(model, filters).all()
            for row in rows:
                for key, value in values.items():
                    setattr(row, key, value)
            self.db.commit()
            for row in rows:
                self.db.refresh(row)
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.warning("Update of %s failed: %s", model.__tablename__, exc)
            raise RemoteOperationError(str(exc)) from exc
        return rows

    def invoke(self, name: str, payload: Dict[str, Any]) -> Any:
        hook = self._hooks.get(name)
        if hook is None:
            raise RemoteOperationError(f"Function not found: {name}")
        try:
            return hook(self.db, payload)
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise RemoteOperationError(str(exc)) from exc

