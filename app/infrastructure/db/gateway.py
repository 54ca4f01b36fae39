# app/infrastructure/db/gateway.py
"""
Persistence gateway.

Domain services talk to storage only through :class:`PersistenceGateway`:
collections are addressed by name, rows travel as plain dicts, and each
call is atomic-or-failed (its own session and transaction).

Filter keys use a ``field__op`` suffix::

    {"user_id": uid, "invoice_date__gte": start, "status__ne": "draft"}

Supported ops: ``gte``, ``lte``, ``gt``, ``lt``, ``ne``, ``in``, ``isnull``.
A bare field name means equality.
"""

from __future__ import annotations

import logging
from typing import Any, Protocol, Sequence

from sqlalchemy import and_, asc, desc, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.infrastructure.db.models import (
    BusinessSettings,
    Customer,
    ExpenseEntry,
    IncomeEntry,
    Invoice,
    InvoiceItem,
    ITRComputationRecord,
    Payment,
    Purchase,
    PurchaseOrder,
    RentalCustomer,
    RentalInvoice,
    Supplier,
)

logger = logging.getLogger("gateway")

Row = dict[str, Any]
Filters = dict[str, Any]

FILTER_OPS = ("gte", "lte", "gt", "lt", "ne", "in", "isnull")


class GatewayError(Exception):
    """Storage call failed."""


class NotFoundError(GatewayError):
    def __init__(self, collection: str, record_id: Any):
        super().__init__(f"{collection} record {record_id} not found")
        self.collection = collection
        self.record_id = record_id


class ConstraintError(GatewayError):
    """Write rejected by a uniqueness / foreign-key / not-null constraint."""


class PersistenceGateway(Protocol):
    async def query(
        self,
        collection: str,
        filters: Filters | None = None,
        order_by: Sequence[str] | None = None,
    ) -> list[Row]: ...

    async def get(self, collection: str, record_id: str) -> Row: ...

    async def insert(self, collection: str, record: Row) -> Row: ...

    async def update(self, collection: str, record: Row) -> Row: ...

    async def delete(self, collection: str, record: Row) -> Row: ...


def split_filter_key(key: str) -> tuple[str, str | None]:
    """``"invoice_date__gte"`` -> ``("invoice_date", "gte")``."""
    field_name, sep, op = key.rpartition("__")
    if sep and op in FILTER_OPS:
        return field_name, op
    return key, None


# ---------------------------------------------------------------------------
# SQLAlchemy implementation
# ---------------------------------------------------------------------------

COLLECTIONS = {
    "business_settings": BusinessSettings,
    "customers": Customer,
    "suppliers": Supplier,
    "invoices": Invoice,
    "invoice_items": InvoiceItem,
    "payments": Payment,
    "purchase_orders": PurchaseOrder,
    "purchases": Purchase,
    "rental_customers": RentalCustomer,
    "rental_invoices": RentalInvoice,
    "income_entries": IncomeEntry,
    "expense_entries": ExpenseEntry,
    "itr_computations": ITRComputationRecord,
}


def _to_row(obj: Any) -> Row:
    return {col.key: getattr(obj, col.key) for col in obj.__table__.columns}


class SqlAlchemyGateway:
    """``PersistenceGateway`` over SQLAlchemy async sessions."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self.session_factory = session_factory

    @staticmethod
    def _model(collection: str):
        try:
            return COLLECTIONS[collection]
        except KeyError:
            raise GatewayError(f"Unknown collection: {collection}")

    @staticmethod
    def _condition(model, key: str, value: Any):
        field_name, op = split_filter_key(key)
        column = getattr(model, field_name, None)
        if column is None:
            raise GatewayError(f"{model.__tablename__} has no field {field_name}")
        if op is None:
            return column == value
        if op == "gte":
            return column >= value
        if op == "lte":
            return column <= value
        if op == "gt":
            return column > value
        if op == "lt":
            return column < value
        if op == "ne":
            # SQL `!=` drops NULLs; keep them, matching the in-memory semantics
            return (column != value) | column.is_(None)
        if op == "in":
            return column.in_(list(value))
        return column.is_(None) if value else column.is_not(None)

    async def query(
        self,
        collection: str,
        filters: Filters | None = None,
        order_by: Sequence[str] | None = None,
    ) -> list[Row]:
        model = self._model(collection)
        stmt = select(model)
        conditions = [self._condition(model, k, v) for k, v in (filters or {}).items()]
        if conditions:
            stmt = stmt.where(and_(*conditions))
        for key in order_by or ():
            if key.startswith("-"):
                stmt = stmt.order_by(desc(getattr(model, key[1:])))
            else:
                stmt = stmt.order_by(asc(getattr(model, key)))

        async with self.session_factory() as session:
            try:
                result = await session.execute(stmt)
            except SQLAlchemyError as exc:
                logger.error("Query on %s failed: %s", collection, exc)
                raise GatewayError(f"Query on {collection} failed") from exc
            return [_to_row(obj) for obj in result.scalars().all()]

    async def get(self, collection: str, record_id: str) -> Row:
        model = self._model(collection)
        async with self.session_factory() as session:
            obj = await session.get(model, record_id)
            if obj is None:
                raise NotFoundError(collection, record_id)
            return _to_row(obj)

    async def insert(self, collection: str, record: Row) -> Row:
        model = self._model(collection)
        columns = {col.key for col in model.__table__.columns}
        obj = model(**{k: v for k, v in record.items() if k in columns})
        async with self.session_factory() as session:
            session.add(obj)
            try:
                await session.commit()
            except IntegrityError as exc:
                await session.rollback()
                logger.warning("Insert into %s rejected: %s", collection, exc.orig)
                raise ConstraintError(f"Insert into {collection} violates a constraint") from exc
            await session.refresh(obj)
            return _to_row(obj)

    async def update(self, collection: str, record: Row) -> Row:
        model = self._model(collection)
        record_id = record.get("id")
        async with self.session_factory() as session:
            obj = await session.get(model, record_id)
            if obj is None:
                raise NotFoundError(collection, record_id)
            for key, value in record.items():
                if key != "id" and hasattr(model, key):
                    setattr(obj, key, value)
            try:
                await session.commit()
            except IntegrityError as exc:
                await session.rollback()
                logger.warning("Update of %s/%s rejected: %s", collection, record_id, exc.orig)
                raise ConstraintError(f"Update of {collection} violates a constraint") from exc
            await session.refresh(obj)
            return _to_row(obj)

    async def delete(self, collection: str, record: Row) -> Row:
        model = self._model(collection)
        record_id = record.get("id")
        async with self.session_factory() as session:
            obj = await session.get(model, record_id)
            if obj is None:
                raise NotFoundError(collection, record_id)
            row = _to_row(obj)
            await session.delete(obj)
            try:
                await session.commit()
            except IntegrityError as exc:
                await session.rollback()
                raise ConstraintError(f"Delete from {collection} violates a constraint") from exc
            return row
