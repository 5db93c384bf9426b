"""Shared fixtures for RPS Duel tests."""

import pytest
from typer.testing import CliRunner

from rpsduel.core.game import GameEngine, GameState
from rpsduel.core.registry import GameRegistry
from rpsduel.gateway import ConnectionManager, GameGateway
from rpsduel.utils.config import Config

from tests.helpers import FakeSocket, FixedRandom


@pytest.fixture
def fixed_rng():
    """Random source with zero damage jitter."""
    return FixedRandom(value=0)


@pytest.fixture
def engine(fixed_rng):
    return GameEngine(rng=fixed_rng)


@pytest.fixture
def registry():
    return GameRegistry()


@pytest.fixture
def started_game(registry) -> GameState:
    """A game where Ash hosts and Gary has joined; Ash holds the turn."""
    game_id = registry.create("p1", "Ash")
    return registry.join(game_id, "p2", "Gary")


@pytest.fixture
def fast_config():
    """Config with every delay set to zero."""
    return Config(animation_delay=0, state_update_delay=0, cleanup_delay=0)


@pytest.fixture
def connections():
    return ConnectionManager()


@pytest.fixture
def gateway(registry, connections, engine, fast_config):
    return GameGateway(registry, connections, engine, fast_config)


@pytest.fixture
def connect(connections):
    """Open a fake socket and return (socket_id, socket)."""

    def _connect(broken: bool = False) -> tuple[str, FakeSocket]:
        socket = FakeSocket(broken=broken)
        socket_id = connections.connect(socket)
        return socket_id, socket

    return _connect


@pytest.fixture
def cli_runner():
    return CliRunner()
