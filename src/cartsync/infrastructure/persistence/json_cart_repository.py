"""JSON-file-backed implementation of CartRepository.

Every mutation is a read-modify-write of the whole file, done under one
lock per file path and finished with an atomic replace, so concurrent
upserts of the same slot inside a process can never produce two lines.
"""

from __future__ import annotations

import json
import os
import tempfile
import threading
from datetime import datetime
from pathlib import Path

from cartsync.domain.exceptions import EntityNotFoundError, StoreUnavailableError
from cartsync.domain.model.cart import CartLineItem, utcnow
from cartsync.domain.model.value_objects import VariantKey
from cartsync.domain.repository.cart_repository import CartRepository

_LOCKS: dict[Path, threading.RLock] = {}
_LOCKS_GUARD = threading.Lock()


def _lock_for(path: Path) -> threading.RLock:
    with _LOCKS_GUARD:
        return _LOCKS.setdefault(path.resolve(), threading.RLock())


class JsonCartRepository(CartRepository):

    def __init__(self, file_path: Path) -> None:
        self._file_path = file_path
        self._lock = _lock_for(file_path)
        self._ensure_file()

    # --- CartRepository interface ---------------------------------------------

    def list_for_user(self, user_id: str) -> list[CartLineItem]:
        return [self._to_domain(raw) for raw in self._load_raw() if raw["user_id"] == user_id]

    def list_all(self) -> list[CartLineItem]:
        return [self._to_domain(raw) for raw in self._load_raw()]

    def get_slot(
        self, user_id: str, product_id: str, variant: VariantKey
    ) -> CartLineItem | None:
        for raw in self._load_raw():
            if self._matches_slot(raw, user_id, product_id, variant):
                return self._to_domain(raw)
        return None

    def get_by_id(self, item_id: str, user_id: str) -> CartLineItem | None:
        for raw in self._load_raw():
            if raw["id"] == item_id and raw["user_id"] == user_id:
                return self._to_domain(raw)
        return None

    def upsert_slot(
        self, user_id: str, product_id: str, variant: VariantKey, quantity: int
    ) -> CartLineItem:
        with self._lock:
            records = self._load_raw()
            for i, raw in enumerate(records):
                if self._matches_slot(raw, user_id, product_id, variant):
                    item = self._to_domain(raw)
                    item.set_quantity(quantity)
                    records[i] = self._to_raw(item)
                    break
            else:
                item = CartLineItem.create(user_id, product_id, variant, quantity)
                records.append(self._to_raw(item))
            self._persist_raw(records)
            return item

    def replace_slot_if(
        self,
        user_id: str,
        product_id: str,
        variant: VariantKey,
        expected: int | None,
        quantity: int,
    ) -> CartLineItem | None:
        with self._lock:
            records = self._load_raw()
            for i, raw in enumerate(records):
                if self._matches_slot(raw, user_id, product_id, variant):
                    if raw["quantity"] != expected:
                        return None
                    item = self._to_domain(raw)
                    item.set_quantity(quantity)
                    records[i] = self._to_raw(item)
                    break
            else:
                if expected is not None:
                    return None
                item = CartLineItem.create(user_id, product_id, variant, quantity)
                records.append(self._to_raw(item))
            self._persist_raw(records)
            return item

    def delete(self, item_id: str, user_id: str) -> None:
        with self._lock:
            records = self._load_raw()
            kept = [
                raw for raw in records
                if not (raw["id"] == item_id and raw["user_id"] == user_id)
            ]
            if len(kept) == len(records):
                raise EntityNotFoundError("Cart item not found")
            self._persist_raw(kept)

    def clear(self, user_id: str) -> int:
        with self._lock:
            records = self._load_raw()
            kept = [raw for raw in records if raw["user_id"] != user_id]
            removed = len(records) - len(kept)
            if removed:
                self._persist_raw(kept)
            return removed

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _matches_slot(raw: dict, user_id: str, product_id: str, variant: VariantKey) -> bool:
        return (
            raw["user_id"] == user_id
            and raw["product_id"] == product_id
            and raw.get("color") == variant.color
            and raw.get("size") == variant.size
        )

    @staticmethod
    def _to_raw(item: CartLineItem) -> dict:
        return {
            "id": item.id,
            "user_id": item.user_id,
            "product_id": item.product_id,
            "color": item.variant.color,
            "size": item.variant.size,
            "quantity": item.quantity,
            "created_at": item.created_at.isoformat(),
            "updated_at": item.updated_at.isoformat(),
        }

    @staticmethod
    def _to_domain(raw: dict) -> CartLineItem:
        created_at = datetime.fromisoformat(raw["created_at"]) if "created_at" in raw else utcnow()
        return CartLineItem(
            id=raw["id"],
            user_id=raw["user_id"],
            product_id=raw["product_id"],
            variant=VariantKey(raw.get("color"), raw.get("size")),
            quantity=raw["quantity"],
            created_at=created_at,
            updated_at=datetime.fromisoformat(raw.get("updated_at", created_at.isoformat())),
        )

    # --- File helpers ---------------------------------------------------------

    def _load_raw(self) -> list[dict]:
        with self._lock:
            try:
                return json.loads(self._file_path.read_text(encoding="utf-8"))
            except (OSError, json.JSONDecodeError) as exc:
                raise StoreUnavailableError(
                    f"Cannot read cart store {self._file_path}: {exc}"
                ) from exc

    def _persist_raw(self, records: list[dict]) -> None:
        payload = json.dumps(records, indent=2) + "\n"
        try:
            fd, tmp_name = tempfile.mkstemp(
                dir=self._file_path.parent, prefix=".cart-", suffix=".json"
            )
        except OSError as exc:
            raise StoreUnavailableError(
                f"Cannot write cart store {self._file_path}: {exc}"
            ) from exc
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(payload)
            os.replace(tmp_name, self._file_path)
        except OSError as exc:
            Path(tmp_name).unlink(missing_ok=True)
            raise StoreUnavailableError(
                f"Cannot write cart store {self._file_path}: {exc}"
            ) from exc

    def _ensure_file(self) -> None:
        if not self._file_path.exists():
            try:
                self._file_path.parent.mkdir(parents=True, exist_ok=True)
                self._file_path.write_text("[]", encoding="utf-8")
            except OSError as exc:
                raise StoreUnavailableError(
                    f"Cannot create cart store {self._file_path}: {exc}"
                ) from exc
