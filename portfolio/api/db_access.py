# This file wraps database access so API services can read and write JSON documents safely.
# It exists to keep SQL construction out of services and make testing against SQLite easy.
# Query plans are compiled to SQLAlchemy Core expressions over one document table per collection.
# Keeping this layer small makes query behavior easier to audit and troubleshoot.

from __future__ import annotations

import uuid
from collections.abc import Callable, Iterable, Sequence
from typing import Any

from sqlalchemy import and_, create_engine, delete, func, inspect, literal, not_, or_, select, text, update
from sqlalchemy.engine import Engine, RowMapping
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.sql.elements import ColumnElement
from sqlalchemy.sql.schema import Table

from portfolio.catalog.query_plan import (
    AllOf,
    AnyOf,
    Condition,
    FieldKind,
    FieldSpec,
    Op,
    QueryPlan,
    SortKey,
)
from portfolio.catalog.timestamps import now_timestamp
from portfolio.common.db import TABLES, metadata

Clause = Condition | AllOf | AnyOf
Document = dict[str, Any]


def new_document_id() -> str:
    return uuid.uuid4().hex


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _sqlite_path(keys: Sequence[str]) -> str:
    return "$" + "".join(f'."{key}"' for key in keys)


class DocumentStore:
    """Minimal SQLAlchemy wrapper for document reads and writes."""

    def __init__(self, *, database_url: str) -> None:
        connect_args = {"check_same_thread": False} if database_url.startswith("sqlite") else {}
        self._engine: Engine = create_engine(
            database_url,
            pool_pre_ping=True,
            future=True,
            connect_args=connect_args,
        )

    @property
    def engine(self) -> Engine:
        return self._engine

    def can_connect(self) -> bool:
        try:
            with self._engine.connect() as connection:
                connection.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError:
            return False

    def table_exists(self, collection: str) -> bool:
        return inspect(self._engine).has_table(self._table(collection).name)

    def create_all(self) -> None:
        metadata.create_all(self._engine)

    # Reads

    def find(self, collection: str, plan: QueryPlan) -> list[Document]:
        table = self._table(collection)
        query = (
            select(table)
            .where(*self._where(table, plan.conditions))
            .order_by(*self._order_by(table, plan.sort))
            .limit(plan.limit)
            .offset(plan.offset)
        )
        return self._fetch(query)

    def count(self, collection: str, conditions: Sequence[Clause] = ()) -> int:
        table = self._table(collection)
        query = select(func.count()).select_from(table).where(*self._where(table, conditions))
        with self._engine.connect() as connection:
            return int(connection.execute(query).scalar_one())

    def find_all(
        self,
        collection: str,
        conditions: Sequence[Clause] = (),
        *,
        sort: Sequence[SortKey] = (),
        limit: int | None = None,
    ) -> list[Document]:
        table = self._table(collection)
        query = select(table).where(*self._where(table, conditions)).order_by(*self._order_by(table, sort))
        if limit is not None:
            query = query.limit(limit)
        return self._fetch(query)

    def find_one(self, collection: str, conditions: Sequence[Clause]) -> Document | None:
        rows = self.find_all(collection, conditions, limit=1)
        return rows[0] if rows else None

    def get(self, collection: str, document_id: str) -> Document | None:
        table = self._table(collection)
        return next(iter(self._fetch(select(table).where(table.c.id == document_id))), None)

    def get_many(self, collection: str, document_ids: Iterable[str]) -> dict[str, Document]:
        ids = sorted({value for value in document_ids if value})
        if not ids:
            return {}
        table = self._table(collection)
        return {row["id"]: row for row in self._fetch(select(table).where(table.c.id.in_(ids)))}

    def scan(self, collection: str) -> list[Document]:
        table = self._table(collection)
        return self._fetch(select(table).order_by(table.c.created_at.asc(), table.c.id.asc()))

    def exists(self, collection: str, conditions: Sequence[Clause]) -> bool:
        return self.find_one(collection, conditions) is not None

    # Writes

    def insert(self, collection: str, body: Document, *, unique_key: str | None = None) -> Document:
        table = self._table(collection)
        stamp = now_timestamp()
        document_id = new_document_id()
        with self._engine.begin() as connection:
            connection.execute(
                table.insert().values(
                    id=document_id,
                    unique_key=unique_key,
                    data=body,
                    created_at=stamp,
                    updated_at=stamp,
                )
            )
        return self._document(document_id, body, stamp, stamp)

    def replace(
        self,
        collection: str,
        document_id: str,
        body: Document,
        *,
        unique_key: str | None = None,
    ) -> Document | None:
        table = self._table(collection)
        stamp = now_timestamp()
        with self._engine.begin() as connection:
            result = connection.execute(
                update(table)
                .where(table.c.id == document_id)
                .values(unique_key=unique_key, data=body, updated_at=stamp)
            )
            if result.rowcount == 0:
                return None
        return self.get(collection, document_id)

    def modify(
        self,
        collection: str,
        document_id: str,
        change: Callable[[Document], Document],
    ) -> Document | None:
        """Read-modify-write of one document body; concurrent writers may overwrite each other."""

        table = self._table(collection)
        with self._engine.begin() as connection:
            row = connection.execute(select(table.c.data).where(table.c.id == document_id)).first()
            if row is None:
                return None
            body = change(dict(row.data))
            connection.execute(
                update(table)
                .where(table.c.id == document_id)
                .values(data=body, updated_at=now_timestamp())
            )
        return self.get(collection, document_id)

    def increment(self, collection: str, document_id: str, field: str, amount: int = 1) -> Document | None:
        def _bump(body: Document) -> Document:
            body[field] = int(body.get(field) or 0) + amount
            return body

        return self.modify(collection, document_id, _bump)

    def push(self, collection: str, document_id: str, field: str, item: Any) -> Document | None:
        def _append(body: Document) -> Document:
            body[field] = [*(body.get(field) or []), item]
            return body

        return self.modify(collection, document_id, _append)

    def update_many(
        self,
        collection: str,
        document_ids: Sequence[str],
        change: Callable[[Document], Document],
    ) -> tuple[int, int]:
        """Apply `change` to every listed document; returns (matched, modified)."""

        table = self._table(collection)
        matched = 0
        modified = 0
        with self._engine.begin() as connection:
            rows = connection.execute(
                select(table.c.id, table.c.data).where(table.c.id.in_(list(document_ids)))
            ).all()
            stamp = now_timestamp()
            for row in rows:
                matched += 1
                current = dict(row.data)
                body = change(dict(current))
                if body == current:
                    continue
                connection.execute(
                    update(table).where(table.c.id == row.id).values(data=body, updated_at=stamp)
                )
                modified += 1
        return matched, modified

    def delete(self, collection: str, document_id: str) -> bool:
        table = self._table(collection)
        with self._engine.begin() as connection:
            result = connection.execute(delete(table).where(table.c.id == document_id))
        return result.rowcount > 0

    # Compilation

    def _table(self, collection: str) -> Table:
        try:
            return TABLES[collection]
        except KeyError as exc:
            raise ValueError(f"Unknown collection: {collection!r}") from exc

    def _fetch(self, query: Any) -> list[Document]:
        with self._engine.connect() as connection:
            rows = connection.execute(query).mappings().all()
        return [self._row_document(row) for row in rows]

    @staticmethod
    def _row_document(row: RowMapping) -> Document:
        return DocumentStore._document(row["id"], row["data"], row["created_at"], row["updated_at"])

    @staticmethod
    def _document(document_id: str, body: Document, created_at: str, updated_at: str) -> Document:
        return {"id": document_id, **body, "createdAt": created_at, "updatedAt": updated_at}

    def _where(self, table: Table, clauses: Sequence[Clause]) -> list[ColumnElement[bool]]:
        return [self._compile(table, clause) for clause in clauses]

    def _compile(self, table: Table, clause: Clause) -> ColumnElement[bool]:
        if isinstance(clause, AnyOf):
            return or_(*(self._compile(table, branch) for branch in clause.conditions))
        if isinstance(clause, AllOf):
            return and_(*(self._compile(table, branch) for branch in clause.conditions))
        return self._compile_condition(table, clause)

    def _expression(self, table: Table, spec: FieldSpec, *, as_text: bool = False) -> ColumnElement[Any]:
        if spec.column is not None:
            return table.c[spec.column]
        path = spec.json_path
        element = table.c.data[path[0]] if len(path) == 1 else table.c.data[path]
        if as_text or spec.kind.is_list:
            return element.as_string()
        if spec.kind is FieldKind.NUMBER:
            return element.as_float()
        if spec.kind is FieldKind.BOOLEAN:
            return element.as_boolean()
        return element.as_string()

    def _compile_condition(self, table: Table, condition: Condition) -> ColumnElement[bool]:
        spec, op, value = condition.field, condition.op, condition.value

        if spec.kind.is_list and op is not Op.EXISTS:
            return self._compile_membership(table, spec, op, value)

        if op is Op.REGEX:
            pattern = f"%{_escape_like(str(value))}%"
            return self._expression(table, spec, as_text=True).ilike(pattern, escape="\\")

        expression = self._expression(table, spec)
        if op is Op.EXISTS:
            return expression.is_not(None) if value else expression.is_(None)

        if op is Op.EQ:
            return expression == value
        if op is Op.NE:
            return or_(expression.is_(None), expression != value)
        if op is Op.GT:
            return expression > value
        if op is Op.GTE:
            return expression >= value
        if op is Op.LT:
            return expression < value
        if op is Op.LTE:
            return expression <= value
        if op is Op.IN:
            return expression.in_(list(value))
        if op is Op.NIN:
            return or_(expression.is_(None), expression.not_in(list(value)))
        raise ValueError(f"Operator {op.value} is not supported on {spec.name}")

    def _elements(self, table: Table, spec: FieldSpec) -> tuple[Any, ColumnElement[Any]]:
        """Row source over one array field plus the per-element value it compares."""

        path = spec.json_path
        if self._engine.dialect.name == "postgresql":
            array = table.c.data[path[0]] if len(path) == 1 else table.c.data[path]
            if spec.item_key:
                source = func.json_array_elements(array).table_valued("value")
                return source, source.c.value.op("->>")(literal(spec.item_key))
            source = func.json_array_elements_text(array).table_valued("value")
            return source, source.c.value
        source = func.json_each(table.c.data, _sqlite_path(path)).table_valued("value")
        if spec.item_key:
            return source, func.json_extract(source.c.value, _sqlite_path((spec.item_key,)))
        return source, source.c.value

    def _any_element(
        self,
        table: Table,
        spec: FieldSpec,
        predicate: Callable[[ColumnElement[Any]], ColumnElement[bool]],
    ) -> ColumnElement[bool]:
        source, element = self._elements(table, spec)
        return select(literal(1)).select_from(source).where(predicate(element)).exists()

    def _compile_membership(self, table: Table, spec: FieldSpec, op: Op, value: Any) -> ColumnElement[bool]:
        if op is Op.REGEX:
            pattern = f"%{_escape_like(str(value))}%"
            return self._any_element(table, spec, lambda element: element.ilike(pattern, escape="\\"))
        if op in {Op.EQ, Op.CONTAINS}:
            return self._any_element(table, spec, lambda element: element == str(value))
        if op is Op.NE:
            return not_(self._any_element(table, spec, lambda element: element == str(value)))
        if op is Op.IN:
            items = [str(item) for item in value]
            return self._any_element(table, spec, lambda element: element.in_(items))
        if op is Op.NIN:
            items = [str(item) for item in value]
            return not_(self._any_element(table, spec, lambda element: element.in_(items)))
        raise ValueError(f"Operator {op.value} is not supported on list fields")

    def _order_by(self, table: Table, sort: Sequence[SortKey]) -> list[Any]:
        clauses: list[Any] = []
        for key in sort:
            expression = self._expression(table, key.field)
            clauses.append(expression.desc().nulls_last() if key.descending else expression.asc().nulls_first())
        if not any(key.field.name == "id" for key in sort):
            clauses.append(table.c.id.asc())
        return clauses
