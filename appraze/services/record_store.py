"""
Record Store Client

Table-name + filter façade over the relational store. Every call is its own
unit of work: it commits (or rolls back) before returning, so a sequence of
calls is never atomic as a whole. Callers that need several writes to land
together have to arrange compensation themselves.
"""
import logging
from typing import Any, Dict, Iterable, List, Optional, Sequence

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.inspection import inspect as sa_inspect

from appraze.core.exceptions import RecordStoreError
from appraze.models import TABLES

logger = logging.getLogger(__name__)

Row = Dict[str, Any]

_OPERATORS = {
    "gte": lambda col, v: col >= v,
    "lte": lambda col, v: col <= v,
    "ne": lambda col, v: col != v,
    "in": lambda col, v: col.in_(list(v)),
}


class RecordStore:
    """
    Usage:
        store = RecordStore(db)
        review = store.maybe_single("reviews", {"id": review_id}, expand=("employee",))
        store.update("reviews", {"status": "draft"}, {"id": review_id})
    """

    def __init__(self, db: Session):
        self.db = db

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------
    def select(
        self,
        table: str,
        filters: Optional[Dict[str, Any]] = None,
        order_by: Optional[str] = None,
        ascending: bool = True,
        limit: Optional[int] = None,
        expand: Sequence[str] = (),
    ) -> List[Row]:
        model = self._model(table)
        query = self._filtered(model, filters)
        if order_by:
            column = self._column(model, order_by)
            query = query.order_by(column.asc() if ascending else column.desc())
        if limit is not None:
            query = query.limit(limit)
        try:
            rows = query.all()
            return [self._to_dict(row, expand) for row in rows]
        except SQLAlchemyError as e:
            raise self._database_error(table, "select", e)

    def single(self, table: str, filters: Dict[str, Any], expand: Sequence[str] = ()) -> Row:
        """Exactly one row; zero or several rows raise the not-found code."""
        rows = self.select(table, filters, limit=2, expand=expand)
        if len(rows) != 1:
            raise RecordStoreError(
                f"JSON object requested, multiple (or no) rows returned from '{table}'",
                code=RecordStoreError.NOT_FOUND,
            )
        return rows[0]

    def maybe_single(self, table: str, filters: Dict[str, Any], expand: Sequence[str] = ()) -> Optional[Row]:
        """Like `single`, but "no rows" is not an error and maps to None."""
        try:
            return self.single(table, filters, expand=expand)
        except RecordStoreError as e:
            if e.is_not_found:
                return None
            raise

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------
    def insert(self, table: str, rows: Iterable[Row]) -> List[Row]:
        model = self._model(table)
        objects = []
        for values in rows:
            self._check_columns(model, values)
            obj = model(**values)
            self.db.add(obj)
            objects.append(obj)
        self._commit(table, "insert")
        return [self._to_dict(obj) for obj in objects]

    def update(self, table: str, values: Row, filters: Dict[str, Any]) -> List[Row]:
        """Unscoped update-by-filter; no version check, last writer wins."""
        model = self._model(table)
        self._check_columns(model, values)
        try:
            targets = self._filtered(model, filters).all()
        except SQLAlchemyError as e:
            raise self._database_error(table, "update", e)
        for obj in targets:
            for key, value in values.items():
                setattr(obj, key, value)
        self._commit(table, "update")
        return [self._to_dict(obj) for obj in targets]

    def upsert(self, table: str, row: Row, on_conflict: Sequence[str]) -> Row:
        model = self._model(table)
        self._check_columns(model, row)
        key = {name: row[name] for name in on_conflict}
        try:
            existing = self._filtered(model, key).first()
        except SQLAlchemyError as e:
            raise self._database_error(table, "upsert", e)
        if existing is None:
            existing = model(**row)
            self.db.add(existing)
        else:
            for name, value in row.items():
                setattr(existing, name, value)
        self._commit(table, "upsert")
        return self._to_dict(existing)

    def delete(self, table: str, filters: Dict[str, Any]) -> int:
        model = self._model(table)
        try:
            targets = self._filtered(model, filters).all()
        except SQLAlchemyError as e:
            raise self._database_error(table, "delete", e)
        for obj in targets:
            # ORM delete so relationship cascades (e.g. field values) apply
            self.db.delete(obj)
        self._commit(table, "delete")
        return len(targets)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    def _model(self, table: str):
        model = TABLES.get(table)
        if model is None:
            raise RecordStoreError(f"Unknown table '{table}'", code=RecordStoreError.BAD_REQUEST)
        return model

    def _column(self, model, name: str):
        if name not in model.__table__.columns.keys():
            raise RecordStoreError(
                f"Column '{name}' does not exist on '{model.__tablename__}'",
                code=RecordStoreError.BAD_REQUEST,
            )
        return getattr(model, name)

    def _check_columns(self, model, values: Row) -> None:
        for name in values:
            self._column(model, name)

    def _filtered(self, model, filters: Optional[Dict[str, Any]]):
        query = self.db.query(model)
        for key, value in (filters or {}).items():
            name, _, op = key.partition("__")
            column = self._column(model, name)
            if not op:
                query = query.filter(column.is_(None) if value is None else column == value)
            elif op in _OPERATORS:
                query = query.filter(_OPERATORS[op](column, value))
            else:
                raise RecordStoreError(f"Unsupported filter operator '{op}'", code=RecordStoreError.BAD_REQUEST)
        return query

    def _to_dict(self, obj, expand: Sequence[str] = ()) -> Row:
        row = {column.key: getattr(obj, column.key) for column in obj.__table__.columns}
        relationships = sa_inspect(obj.__class__).relationships
        for name in expand:
            if name not in relationships:
                raise RecordStoreError(
                    f"Could not find a relationship '{name}' on '{obj.__tablename__}'",
                    code=RecordStoreError.BAD_REQUEST,
                )
            related = getattr(obj, name)
            if related is None:
                row[name] = None
            elif relationships[name].uselist:
                row[name] = [self._to_dict(item) for item in related]
            else:
                row[name] = self._to_dict(related)
        return row

    def _commit(self, table: str, operation: str) -> None:
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            logger.warning(f"Record store {operation} on {table} violated a constraint: {e.orig}")
            raise RecordStoreError(str(e.orig), code=RecordStoreError.UNIQUE_VIOLATION) from e
        except SQLAlchemyError as e:
            raise self._database_error(table, operation, e)

    def _database_error(self, table: str, operation: str, error: Exception) -> RecordStoreError:
        self.db.rollback()
        logger.error(f"Record store {operation} on {table} failed: {error}")
        return RecordStoreError(f"Record store {operation} on '{table}' failed")
