"""SQLAlchemy-backed implementation of CartRepository.

Slot uniqueness is a database constraint here, and writes go through
``INSERT ... ON CONFLICT DO UPDATE``, so concurrent upserts from several
processes (tabs, devices, workers) still converge on one row per slot.

Unselected colour/size are stored as empty strings: SQL treats NULLs as
distinct, which would let the unique constraint admit duplicates.
"""

from __future__ import annotations

import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime, timezone

from sqlalchemy import (
    DateTime,
    Integer,
    String,
    UniqueConstraint,
    create_engine,
    delete,
    select,
    update,
)
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import DeclarativeBase, Mapped, Session, mapped_column, sessionmaker

from cartsync.domain.exceptions import EntityNotFoundError, StoreUnavailableError
from cartsync.domain.model.cart import CartLineItem, utcnow
from cartsync.domain.model.value_objects import Quantity, VariantKey
from cartsync.domain.repository.cart_repository import CartRepository


class Base(DeclarativeBase):
    pass


class CartItemRow(Base):
    __tablename__ = "cart_items"
    __table_args__ = (
        UniqueConstraint(
            "user_id", "product_id", "color", "size", name="uq_cart_items_user_slot"
        ),
    )

    seq: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    id: Mapped[str] = mapped_column(String(32), unique=True, nullable=False)
    user_id: Mapped[str] = mapped_column(String(255), index=True, nullable=False)
    product_id: Mapped[str] = mapped_column(String(255), nullable=False)
    color: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    size: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)


def create_cart_engine(database_url: str) -> Engine:
    connect_args = {"check_same_thread": False} if database_url.startswith("sqlite") else {}
    return create_engine(database_url, future=True, echo=False, connect_args=connect_args)


class SqlCartRepository(CartRepository):

    def __init__(self, engine: Engine) -> None:
        self._engine = engine
        self._sessions = sessionmaker(engine, expire_on_commit=False, autoflush=False)
        try:
            Base.metadata.create_all(engine)
        except SQLAlchemyError as exc:
            raise StoreUnavailableError(f"Cannot initialise cart store: {exc}") from exc

    # --- CartRepository interface ---------------------------------------------

    def list_for_user(self, user_id: str) -> list[CartLineItem]:
        with self._session() as session:
            rows = session.scalars(
                select(CartItemRow)
                .where(CartItemRow.user_id == user_id)
                .order_by(CartItemRow.seq)
            ).all()
            return [self._to_domain(row) for row in rows]

    def list_all(self) -> list[CartLineItem]:
        with self._session() as session:
            rows = session.scalars(select(CartItemRow).order_by(CartItemRow.seq)).all()
            return [self._to_domain(row) for row in rows]

    def get_slot(
        self, user_id: str, product_id: str, variant: VariantKey
    ) -> CartLineItem | None:
        with self._session() as session:
            row = self._get_slot_row(session, user_id, product_id, variant)
            return self._to_domain(row) if row is not None else None

    def get_by_id(self, item_id: str, user_id: str) -> CartLineItem | None:
        with self._session() as session:
            row = session.scalars(
                select(CartItemRow).where(
                    CartItemRow.id == item_id, CartItemRow.user_id == user_id
                )
            ).one_or_none()
            return self._to_domain(row) if row is not None else None

    def upsert_slot(
        self, user_id: str, product_id: str, variant: VariantKey, quantity: int
    ) -> CartLineItem:
        Quantity(quantity)
        now = utcnow()
        insert_fn = pg_insert if self._engine.dialect.name == "postgresql" else sqlite_insert
        stmt = insert_fn(CartItemRow).values(
            id=uuid.uuid4().hex,
            user_id=user_id,
            product_id=product_id,
            color=variant.color or "",
            size=variant.size or "",
            quantity=quantity,
            created_at=now,
            updated_at=now,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[
                CartItemRow.user_id,
                CartItemRow.product_id,
                CartItemRow.color,
                CartItemRow.size,
            ],
            set_={"quantity": quantity, "updated_at": now},
        )
        with self._session() as session:
            session.execute(stmt)
            session.commit()
            row = self._get_slot_row(session, user_id, product_id, variant)
            if row is None:
                raise StoreUnavailableError("Cart upsert did not persist a row")
            return self._to_domain(row)

    def replace_slot_if(
        self,
        user_id: str,
        product_id: str,
        variant: VariantKey,
        expected: int | None,
        quantity: int,
    ) -> CartLineItem | None:
        Quantity(quantity)
        now = utcnow()
        if expected is None:
            insert_fn = pg_insert if self._engine.dialect.name == "postgresql" else sqlite_insert
            # Core insert; its result carries the rowcount of a skipped conflict
            stmt = insert_fn(CartItemRow.__table__).values(
                id=uuid.uuid4().hex,
                user_id=user_id,
                product_id=product_id,
                color=variant.color or "",
                size=variant.size or "",
                quantity=quantity,
                created_at=now,
                updated_at=now,
            ).on_conflict_do_nothing(
                index_elements=["user_id", "product_id", "color", "size"]
            )
        else:
            stmt = (
                update(CartItemRow)
                .where(
                    CartItemRow.user_id == user_id,
                    CartItemRow.product_id == product_id,
                    CartItemRow.color == (variant.color or ""),
                    CartItemRow.size == (variant.size or ""),
                    CartItemRow.quantity == expected,
                )
                .values(quantity=quantity, updated_at=now)
            )
        with self._session() as session:
            result = session.execute(stmt)
            session.commit()
            if result.rowcount == 0:
                return None
            row = self._get_slot_row(session, user_id, product_id, variant)
            return self._to_domain(row) if row is not None else None

    def delete(self, item_id: str, user_id: str) -> None:
        with self._session() as session:
            result = session.execute(
                delete(CartItemRow).where(
                    CartItemRow.id == item_id, CartItemRow.user_id == user_id
                )
            )
            if result.rowcount == 0:
                session.rollback()
                raise EntityNotFoundError("Cart item not found")
            session.commit()

    def clear(self, user_id: str) -> int:
        with self._session() as session:
            result = session.execute(
                delete(CartItemRow).where(CartItemRow.user_id == user_id)
            )
            session.commit()
            return result.rowcount

    # --- Helpers --------------------------------------------------------------

    @contextmanager
    def _session(self) -> Iterator[Session]:
        try:
            with self._sessions() as session:
                yield session
        except SQLAlchemyError as exc:
            raise StoreUnavailableError(f"Cart store unavailable: {exc}") from exc

    @staticmethod
    def _get_slot_row(
        session: Session, user_id: str, product_id: str, variant: VariantKey
    ) -> CartItemRow | None:
        return session.scalars(
            select(CartItemRow).where(
                CartItemRow.user_id == user_id,
                CartItemRow.product_id == product_id,
                CartItemRow.color == (variant.color or ""),
                CartItemRow.size == (variant.size or ""),
            )
        ).one_or_none()

    @staticmethod
    def _aware(value: datetime) -> datetime:
        # SQLite hands back naive datetimes
        return value if value.tzinfo is not None else value.replace(tzinfo=timezone.utc)

    @classmethod
    def _to_domain(cls, row: CartItemRow) -> CartLineItem:
        return CartLineItem(
            id=row.id,
            user_id=row.user_id,
            product_id=row.product_id,
            variant=VariantKey(row.color or None, row.size or None),
            quantity=row.quantity,
            created_at=cls._aware(row.created_at),
            updated_at=cls._aware(row.updated_at),
        )
