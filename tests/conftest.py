"""Fixtures for testing mpris-watch."""

from __future__ import annotations

import asyncio
import logging
import pathlib
from collections.abc import AsyncGenerator, Callable

import pytest

from mpris_watch.constants import CONFIG_ENV_VAR
from mpris_watch.controllers.roster import RosterController
from mpris_watch.models.snapshot import PlayerSnapshot
from tests.fake_bus import FakeBus, FakePlayer

SPOTIFY = "org.mpris.MediaPlayer2.spotify"
VLC = "org.mpris.MediaPlayer2.vlc"


@pytest.fixture(name="caplog")
def caplog_fixture(caplog: pytest.LogCaptureFixture) -> pytest.LogCaptureFixture:
    """Set log level to debug for tests using the caplog fixture."""
    caplog.set_level(logging.DEBUG)
    return caplog


@pytest.fixture(autouse=True)
def isolated_config(tmp_path: pathlib.Path, monkeypatch: pytest.MonkeyPatch) -> pathlib.Path:
    """Make sure no settings file of the user is picked up."""
    config_home = tmp_path / "config"
    monkeypatch.setenv("XDG_CONFIG_HOME", str(config_home))
    monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)
    return config_home


@pytest.fixture
def bus() -> FakeBus:
    """Return an empty fake session bus."""
    return FakeBus()


@pytest.fixture
def spotify(bus: FakeBus) -> FakePlayer:
    """Put a Spotify player (playing Queen) on the bus."""
    return bus.add_player(
        FakePlayer(
            SPOTIFY,
            metadata={"xesam:artist": ["Queen"], "xesam:title": "Bohemian Rhapsody"},
            volume=0.8,
        ),
        announce=False,
    )


class UpdateCollector:
    """Collects the snapshots published by a roster controller."""

    def __init__(self) -> None:
        """Initialize."""
        self.updates: asyncio.Queue[list[PlayerSnapshot]] = asyncio.Queue()

    def __call__(self, snapshots: list[PlayerSnapshot]) -> None:
        """Store a published update."""
        self.updates.put_nowait(snapshots)

    async def next(self, timeout: float = 2) -> list[PlayerSnapshot]:
        """Wait for the next published update."""
        return await asyncio.wait_for(self.updates.get(), timeout)

    def pending(self) -> int:
        """Return the number of updates not consumed yet."""
        return self.updates.qsize()


@pytest.fixture
def collector() -> UpdateCollector:
    """Return a collector for published snapshots."""
    return UpdateCollector()


@pytest.fixture
async def start_roster(
    bus: FakeBus, collector: UpdateCollector
) -> AsyncGenerator[Callable[[], RosterController], None]:
    """Return a function starting a roster controller on the fake bus in the background."""
    started: list[tuple[RosterController, asyncio.Task[None]]] = []

    def _start() -> RosterController:
        controller = RosterController(bus, on_update=collector)
        started.append((controller, asyncio.create_task(controller.run())))
        return controller

    yield _start
    for controller, task in started:
        task.cancel()
        await asyncio.gather(task, return_exceptions=True)
        await controller.close()
