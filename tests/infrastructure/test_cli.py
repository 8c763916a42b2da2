"""End-to-end tests of the click CLI against a temporary data directory."""

import json

import pytest
from click.testing import CliRunner

from cartsync.infrastructure.cli.main import cli
from cartsync.infrastructure.config import get_settings


@pytest.fixture
def runner(tmp_path, monkeypatch):
    monkeypatch.setenv("CARTSYNC_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("CARTSYNC_LOG_LEVEL", "WARNING")
    get_settings.cache_clear()
    runner = CliRunner()
    result = runner.invoke(
        cli, ["product", "add", "--name", "Helmet", "--price", "80.00", "--stock", "5"]
    )
    assert result.exit_code == 0, result.output
    yield runner
    get_settings.cache_clear()


def _cart(runner, user="u1"):
    result = runner.invoke(cli, ["cart", "summary", "--user", user, "--json"])
    assert result.exit_code == 0, result.output
    return json.loads(result.output)


class TestCartCommands:

    def test_add_and_summary(self, runner):
        result = runner.invoke(cli, ["cart", "add", "--user", "u1", "--product", "1",
                                     "--quantity", "2"])
        assert result.exit_code == 0, result.output

        assert _cart(runner) == {
            "itemCount": 2,
            "uniqueItemCount": 1,
            "subtotal": "$160.00",
            "unpricedProductIds": [],
        }

    def test_add_over_stock_fails(self, runner):
        result = runner.invoke(cli, ["cart", "add", "--user", "u1", "--product", "1",
                                     "--quantity", "6"])
        assert result.exit_code == 1
        assert "Only 5 items available for Helmet" in result.output

    def test_clear(self, runner):
        runner.invoke(cli, ["cart", "add", "--user", "u1", "--product", "1", "--quantity", "1"])
        result = runner.invoke(cli, ["cart", "clear", "--user", "u1"])
        assert "Cleared 1 items" in result.output
        assert _cart(runner)["itemCount"] == 0


class TestSyncCommand:

    def test_sync_from_stdin_reports_json(self, runner):
        runner.invoke(cli, ["cart", "add", "--user", "u1", "--product", "1", "--quantity", "2"])
        payload = json.dumps({"localCartItems": [{"productId": "1", "quantity": 3}]})

        result = runner.invoke(cli, ["cart", "sync", "--user", "u1", "--json"], input=payload)

        assert result.exit_code == 0, result.output
        report = json.loads(result.output)
        assert report["direction"] == "merge"
        assert report["conflicts"][0]["resolutionReason"] == "RecentLocalActivity"
        assert report["finalCart"][0]["quantity"] == 3

    def test_malformed_snapshot_fails(self, runner):
        payload = json.dumps([{"quantity": 1}])
        result = runner.invoke(cli, ["cart", "sync", "--user", "u1"], input=payload)
        assert result.exit_code == 1
        assert "Invalid local cart" in result.output
        assert "productId" in result.output

    def test_invalid_json(self, runner):
        result = runner.invoke(cli, ["cart", "sync", "--user", "u1"], input="{oops")
        assert result.exit_code == 2


class TestCleanCommand:

    def test_dry_run_lists_without_changes(self, runner):
        runner.invoke(cli, ["product", "update", "--id", "1", "--stock", "100"])
        runner.invoke(cli, ["cart", "add", "--user", "u1", "--product", "1", "--quantity", "30"])

        result = runner.invoke(cli, ["cart", "clean", "--dry-run"])

        assert "Would reset 1 cart items" in result.output
        assert _cart(runner)["itemCount"] == 30
