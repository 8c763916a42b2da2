"""Tests for the SQLAlchemy cart store, run against a file-backed SQLite."""

import pytest

from cartsync.domain.exceptions import (
    EntityNotFoundError,
    StoreUnavailableError,
    ValidationError,
)
from cartsync.domain.model.value_objects import VariantKey
from cartsync.infrastructure.persistence.sql_cart_repository import (
    SqlCartRepository,
    create_cart_engine,
)

RED_M = VariantKey("Red", "M")


@pytest.fixture
def repo(tmp_path):
    engine = create_cart_engine(f"sqlite:///{tmp_path / 'cart.db'}")
    yield SqlCartRepository(engine)
    engine.dispose()


class TestSqlUpsert:

    def test_upsert_replaces_quantity(self, repo):
        first = repo.upsert_slot("u1", "P1", RED_M, 2)
        second = repo.upsert_slot("u1", "P1", RED_M, 7)

        assert second.id == first.id
        assert second.quantity == 7
        assert len(repo.list_for_user("u1")) == 1

    def test_default_variant_is_one_slot(self, repo):
        repo.upsert_slot("u1", "P1", VariantKey(), 1)
        repo.upsert_slot("u1", "P1", VariantKey(None, None), 4)

        items = repo.list_for_user("u1")
        assert len(items) == 1
        assert items[0].variant == VariantKey()
        assert items[0].quantity == 4

    def test_timestamps_are_aware(self, repo):
        item = repo.upsert_slot("u1", "P1", RED_M, 1)
        assert item.created_at.tzinfo is not None
        assert item.updated_at >= item.created_at

    def test_rejects_non_positive_quantity(self, repo):
        with pytest.raises(ValidationError):
            repo.upsert_slot("u1", "P1", RED_M, 0)
        assert repo.list_all() == []


class TestSqlReadsAndDeletes:

    def test_get_by_id_is_scoped_to_owner(self, repo):
        item = repo.upsert_slot("u1", "P1", RED_M, 1)
        assert repo.get_by_id(item.id, "u1") is not None
        assert repo.get_by_id(item.id, "u2") is None

    def test_delete_unknown_item(self, repo):
        with pytest.raises(EntityNotFoundError):
            repo.delete("nope", "u1")

    def test_clear(self, repo):
        repo.upsert_slot("u1", "P1", RED_M, 1)
        repo.upsert_slot("u1", "P2", VariantKey(), 1)
        repo.upsert_slot("u2", "P2", VariantKey(), 1)

        assert repo.clear("u1") == 2
        assert [i.user_id for i in repo.list_all()] == ["u2"]


def test_unreachable_database_is_store_unavailable(tmp_path):
    engine = create_cart_engine(f"sqlite:///{tmp_path / 'missing' / 'cart.db'}")
    with pytest.raises(StoreUnavailableError):
        SqlCartRepository(engine)


class TestSqlReplaceSlotIf:

    def test_creates_only_when_still_empty(self, repo):
        assert repo.replace_slot_if("u1", "P1", VariantKey(), None, 2).quantity == 2
        assert repo.replace_slot_if("u1", "P1", VariantKey(), None, 5) is None
        assert repo.get_slot("u1", "P1", VariantKey()).quantity == 2

    def test_stale_expectation_writes_nothing(self, repo):
        repo.upsert_slot("u1", "P1", RED_M, 3)
        assert repo.replace_slot_if("u1", "P1", RED_M, 2, 4) is None
        assert repo.replace_slot_if("u1", "P1", RED_M, 3, 4).quantity == 4
        assert len(repo.list_for_user("u1")) == 1
