# tuma_helper/db/gateway.py
"""
Typed CRUD gateway over the SQLAlchemy session.

Filters are plain `{column: value}` dicts: a list/tuple value becomes IN, a
None value becomes IS NULL. Extra SQLAlchemy expressions can be passed via
`where=`. Every call runs under the store retry policy, and committed writes
are published to the change feed.
"""
import logging
from datetime import date, datetime, time
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional, Sequence, Type, TypeVar

from fastapi import Depends
from sqlalchemy import func, inspect
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Query, Session

from tuma_helper.core.retry import RetryPolicy, default_policy
from tuma_helper.db.base import Base, get_db
from tuma_helper.db.changefeed import DELETE, INSERT, UPDATE, ChangeEvent, ChangeFeed, Subscription, feed

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=Base)


def _plain(value: Any) -> Any:
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return float(value)
    if hasattr(value, "value") and not isinstance(value, (int, float, str)):
        return value.value
    return value


def row_to_dict(obj: Base) -> Dict[str, Any]:
    mapper = inspect(obj).mapper
    return {attr.key: _plain(getattr(obj, attr.key)) for attr in mapper.column_attrs}


class Gateway:
    def __init__(self, db: Session, policy: Optional[RetryPolicy] = None, changes: Optional[ChangeFeed] = None):
        self.db = db
        self.policy = policy or default_policy()
        self.changes = changes if changes is not None else feed

    # ---- helpers ----

    def _conditions(self, model: Type[M], filters: Optional[Dict[str, Any]]) -> list:
        conditions = []
        for key, value in (filters or {}).items():
            column = getattr(model, key)
            if isinstance(value, (list, tuple, set)):
                conditions.append(column.in_(list(value)))
            elif value is None:
                conditions.append(column.is_(None))
            else:
                conditions.append(column == value)
        return conditions

    def query(self, model: Type[M], filters: Optional[Dict[str, Any]] = None, where: Sequence = ()) -> Query:
        return self.db.query(model).filter(*self._conditions(model, filters), *where)

    def run(self, fn):
        """Run an arbitrary store call under the retry policy."""
        return self.policy.call(fn, on_retry=lambda _exc: self.db.rollback())

    def _write(self, fn):
        def attempt():
            try:
                return fn()
            except SQLAlchemyError:
                self.db.rollback()
                raise
        return self.run(attempt)

    def _publish(self, table: str, event: str, records: Iterable[Dict[str, Any]]) -> None:
        for record in records:
            self.changes.publish(ChangeEvent(table=table, event=event, record=record))

    # ---- reads ----

    def select(
        self,
        model: Type[M],
        filters: Optional[Dict[str, Any]] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
        where: Sequence = (),
    ) -> List[M]:
        def fetch():
            q = self.query(model, filters, where)
            if order_by:
                column = getattr(model, order_by)
                q = q.order_by(column.desc() if descending else column.asc(), model.id.desc() if descending else model.id.asc())
            if offset:
                q = q.offset(offset)
            if limit:
                q = q.limit(limit)
            return q.all()
        return self.run(fetch)

    def first(
        self,
        model: Type[M],
        filters: Optional[Dict[str, Any]] = None,
        where: Sequence = (),
        fresh: bool = False,
    ) -> Optional[M]:
        """`fresh=True` overwrites any copy already held in the session identity map."""
        def fetch():
            q = self.query(model, filters, where)
            if fresh:
                q = q.populate_existing()
            return q.first()
        return self.run(fetch)

    def get(self, model: Type[M], id: Any, fresh: bool = False) -> Optional[M]:
        return self.first(model, {"id": id}, fresh=fresh)

    def count(self, model: Type[M], filters: Optional[Dict[str, Any]] = None, where: Sequence = ()) -> int:
        return self.run(lambda: self.query(model, filters, where).count())

    # ---- writes ----

    def insert(self, model: Type[M], values: Dict[str, Any]) -> M:
        def do_insert():
            obj = model(**values)
            self.db.add(obj)
            self.db.commit()
            self.db.refresh(obj)
            return obj
        obj = self._write(do_insert)
        self._publish(model.__tablename__, INSERT, [row_to_dict(obj)])
        return obj

    def _ids(self, model: Type[M], filters, where) -> List[Any]:
        return [row[0] for row in self.db.query(model.id).filter(*self._conditions(model, filters), *where).all()]

    def _apply_update(self, model: Type[M], filters, where, values: Dict[str, Any]) -> int:
        def do_update():
            ids = self._ids(model, filters, where)
            if not ids:
                return []
            changed = (
                self.db.query(model)
                .filter(model.id.in_(ids), *self._conditions(model, filters), *where)
                .update(values, synchronize_session=False)
            )
            self.db.commit()
            return ids if changed else []
        ids = self._write(do_update)
        if ids:
            rows = self.db.query(model).filter(model.id.in_(ids)).all()
            self._publish(model.__tablename__, UPDATE, [row_to_dict(r) for r in rows])
        return len(ids)

    def update(self, model: Type[M], filters: Dict[str, Any], values: Dict[str, Any], where: Sequence = ()) -> int:
        return self._apply_update(model, filters, where, values)

    def increment(self, model: Type[M], filters: Dict[str, Any], column: str, by: int = 1) -> int:
        """Atomic `column = coalesce(column, 0) + by` evaluated by the store."""
        col = getattr(model, column)
        return self._apply_update(model, filters, (), {col: func.coalesce(col, 0) + by})

    def delete(self, model: Type[M], filters: Dict[str, Any], where: Sequence = ()) -> int:
        def do_delete():
            rows = self.query(model, filters, where).all()
            snapshots = [row_to_dict(r) for r in rows]
            for r in rows:
                self.db.delete(r)
            self.db.commit()
            return snapshots
        snapshots = self._write(do_delete)
        self._publish(model.__tablename__, DELETE, snapshots)
        return len(snapshots)

    # ---- realtime ----

    def subscribe(self, table: str, event: str, filters: Optional[Dict[str, Any]] = None) -> Subscription:
        return self.changes.subscribe(table, event, filters)


def get_gateway(db: Session = Depends(get_db)) -> Gateway:
    return Gateway(db)
