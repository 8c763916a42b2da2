"""Tests for the JSON-file cart store."""

import os
import threading

import pytest

from cartsync.application.add_to_cart import AddToCartHandler
from cartsync.domain.exceptions import EntityNotFoundError, StoreUnavailableError
from cartsync.domain.model.value_objects import VariantKey
from cartsync.infrastructure.persistence.json_cart_repository import JsonCartRepository
from tests.fakes import make_catalog

RED_M = VariantKey("Red", "M")


@pytest.fixture
def repo(tmp_path):
    return JsonCartRepository(tmp_path / "cart_items.json")


class TestUpsert:

    def test_creates_file_on_first_use(self, tmp_path):
        path = tmp_path / "nested" / "cart.json"
        JsonCartRepository(path)
        assert path.read_text(encoding="utf-8") == "[]"

    def test_upsert_replaces_quantity(self, repo):
        first = repo.upsert_slot("u1", "P1", RED_M, 2)
        second = repo.upsert_slot("u1", "P1", RED_M, 5)

        assert second.id == first.id
        assert [i.quantity for i in repo.list_for_user("u1")] == [5]

    def test_variants_are_distinct_slots(self, repo):
        repo.upsert_slot("u1", "P1", RED_M, 1)
        repo.upsert_slot("u1", "P1", VariantKey("Blue", "M"), 1)
        repo.upsert_slot("u1", "P1", VariantKey(), 1)

        assert len(repo.list_for_user("u1")) == 3
        assert repo.get_slot("u1", "P1", VariantKey()).variant.is_default

    def test_survives_reopen(self, tmp_path):
        path = tmp_path / "cart.json"
        JsonCartRepository(path).upsert_slot("u1", "P1", RED_M, 3)

        item = JsonCartRepository(path).get_slot("u1", "P1", RED_M)

        assert item.quantity == 3
        assert item.created_at.tzinfo is not None

    def test_concurrent_upserts_keep_one_line(self, repo):
        def worker(q):
            repo.upsert_slot("u1", "P1", RED_M, q)

        threads = [threading.Thread(target=worker, args=(q,)) for q in range(1, 9)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(repo.list_for_user("u1")) == 1

    def test_concurrent_adds_are_all_counted(self, repo):
        handler = AddToCartHandler(repo, make_catalog())
        handler.handle("u1", "P3", 1)
        start = threading.Barrier(8)

        def worker():
            start.wait()
            handler.handle("u1", "P3", 1)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert [i.quantity for i in repo.list_for_user("u1")] == [9]

    def test_list_preserves_insertion_order(self, repo):
        for pid in ("P3", "P1", "P2"):
            repo.upsert_slot("u1", pid, VariantKey(), 1)
        assert [i.product_id for i in repo.list_for_user("u1")] == ["P3", "P1", "P2"]


class TestDeleteAndClear:

    def test_delete_requires_ownership(self, repo):
        item = repo.upsert_slot("u1", "P1", RED_M, 1)

        with pytest.raises(EntityNotFoundError):
            repo.delete(item.id, "u2")

        repo.delete(item.id, "u1")
        assert repo.list_for_user("u1") == []

    def test_clear_counts_only_that_user(self, repo):
        repo.upsert_slot("u1", "P1", RED_M, 1)
        repo.upsert_slot("u1", "P2", VariantKey(), 1)
        repo.upsert_slot("u2", "P1", RED_M, 1)

        assert repo.clear("u1") == 2
        assert repo.clear("u1") == 0
        assert len(repo.list_all()) == 1


class TestFailures:

    def test_corrupt_file_is_store_unavailable(self, tmp_path):
        path = tmp_path / "cart.json"
        path.write_text("{not json", encoding="utf-8")
        repo = JsonCartRepository(path)

        with pytest.raises(StoreUnavailableError):
            repo.list_for_user("u1")

    def test_failed_write_leaves_no_temp_file(self, tmp_path, monkeypatch):
        path = tmp_path / "cart.json"
        repo = JsonCartRepository(path)

        def refuse(src, dst):
            raise OSError("disk full")

        monkeypatch.setattr(os, "replace", refuse)

        with pytest.raises(StoreUnavailableError, match="disk full"):
            repo.upsert_slot("u1", "P1", RED_M, 1)
        assert [p.name for p in tmp_path.iterdir()] == ["cart.json"]
        assert path.read_text(encoding="utf-8") == "[]"


class TestReplaceSlotIf:

    def test_creates_only_when_still_empty(self, repo):
        assert repo.replace_slot_if("u1", "P1", RED_M, None, 2).quantity == 2
        assert repo.replace_slot_if("u1", "P1", RED_M, None, 5) is None
        assert repo.get_slot("u1", "P1", RED_M).quantity == 2

    def test_stale_expectation_writes_nothing(self, repo):
        repo.upsert_slot("u1", "P1", RED_M, 3)
        assert repo.replace_slot_if("u1", "P1", RED_M, 2, 4) is None
        assert repo.replace_slot_if("u1", "P1", RED_M, 3, 4).quantity == 4

    def test_removed_slot_does_not_match(self, repo):
        item = repo.upsert_slot("u1", "P1", RED_M, 3)
        repo.delete(item.id, "u1")
        assert repo.replace_slot_if("u1", "P1", RED_M, 3, 4) is None
        assert repo.list_for_user("u1") == []
