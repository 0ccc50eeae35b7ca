"""Integration tests for the maintenance entry point."""
import json
from unittest.mock import patch

import pytest

from src.layer import create_cache_layer
from src.main import main, run


class TestMaintenanceCommands:
    """Test suite for health and flush commands."""

    @pytest.mark.asyncio
    async def test_health_reachable(self, layer, capsys):
        """Test health prints the snapshot and exits 0."""
        exit_code = await run("health", layer)

        lines = capsys.readouterr().out.splitlines()
        payload = json.loads(next(line for line in lines if line.startswith('{"state"')))
        assert exit_code == 0
        assert payload["reachable"] is True
        assert payload["state"] == "connected"

    @pytest.mark.asyncio
    async def test_health_unreachable(self, settings, capsys):
        """Test health exits 1 when Redis is down."""
        def factory(_settings):
            raise ConnectionRefusedError(111, "Connection refused")

        layer = create_cache_layer(settings=settings, client_factory=factory)

        assert await run("health", layer) == 1

    @pytest.mark.asyncio
    async def test_flush(self, layer, fake_redis):
        """Test flush empties the store and disconnects afterwards."""
        await layer.store.set("entity:1", {}, ttl=60)

        exit_code = await run("flush", layer)

        assert exit_code == 0
        assert fake_redis.data == {}
        assert fake_redis.closed is True

    def test_main_rejects_unknown_command(self):
        """Test argparse refuses commands other than health and flush."""
        with pytest.raises(SystemExit):
            main(["drop-everything"])

    def test_main_dispatches(self):
        """Test main() runs the chosen command and returns its exit code."""
        async def fake_run(command, layer=None):
            return 0 if command == "health" else 1

        with patch("src.main.run", side_effect=fake_run) as run_mock, \
                patch("src.main.setup_logging"):
            assert main(["health"]) == 0

        run_mock.assert_called_once_with("health")
