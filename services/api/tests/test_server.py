"""Startup order: the listener is up before the database bootstrap runs."""

import asyncio

from navigatio_api import server as server_mod
from navigatio_api.config import ServerConfig


class FakeServer:
    """Mimics ``uvicorn.Server``: ``started`` flips once the socket is bound."""

    def __init__(self, fail: bool = False) -> None:
        self.started = False
        self.fail = fail
        self.should_exit = asyncio.Event()
        self.events: list[str] = []

    async def serve(self) -> None:
        await asyncio.sleep(0.01)
        if self.fail:
            raise OSError("address already in use")
        self.started = True
        self.events.append("listening")
        await self.should_exit.wait()
        self.events.append("stopped")


def test_listener_accepts_before_database_connects() -> None:
    config = ServerConfig(mongodb_uri="mongodb://db.test")

    async def run() -> FakeServer:
        fake = FakeServer()

        async def connect(uri: str) -> None:
            fake.events.append(f"connect:{uri}:started={fake.started}")
            await asyncio.sleep(0.01)
            fake.events.append("connected")
            fake.should_exit.set()

        await server_mod.serve(config, app=None, server=fake, connect=connect)
        return fake

    fake = asyncio.run(run())
    assert fake.events == [
        "listening",
        "connect:mongodb://db.test:started=True",
        "connected",
        "stopped",
    ]


def test_failed_listener_skips_database() -> None:
    config = ServerConfig(mongodb_uri="mongodb://db.test")
    connected: list[str] = []

    async def connect(uri: str) -> None:
        connected.append(uri)

    async def run() -> None:
        await server_mod.serve(config, app=None, server=FakeServer(fail=True), connect=connect)

    try:
        asyncio.run(run())
    except OSError as exc:
        assert "address already in use" in str(exc)
    else:  # pragma: no cover - failure path
        raise AssertionError("startup error was swallowed")
    assert connected == []


def test_discover_collaborators_loads_entry_points(monkeypatch) -> None:
    marker = object()

    class EP:
        name = "wallets"

        def load(self):
            return marker

    monkeypatch.setattr(server_mod, "entry_points", lambda group: [EP()])
    assert server_mod.discover_collaborators() == {"wallets": marker}
