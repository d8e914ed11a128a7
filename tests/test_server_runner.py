from __future__ import annotations

from types import SimpleNamespace
from typing import Any, cast

import pytest

from clocktick.server.runner import ServerRunner


class _FakeLoop:
    def __init__(self, calls: list[str], handlers: list[Any]) -> None:
        self._calls = calls
        self._handlers = handlers

    def add_signal_handler(self, _sig, handler) -> None:
        self._calls.append("signal")
        self._handlers.append(handler)


@pytest.mark.asyncio
async def test_server_runner_serves(monkeypatch) -> None:
    calls: list[str] = []
    configs: list[dict[str, Any]] = []

    class _FakeServer:
        should_exit = False

        async def serve(self) -> None:
            calls.append("serve")

    def _config(app, **kwargs):
        configs.append(kwargs)
        return object()

    monkeypatch.setattr("clocktick.server.runner.uvicorn.Config", _config)
    monkeypatch.setattr(
        "clocktick.server.runner.uvicorn.Server", lambda _cfg: _FakeServer()
    )
    monkeypatch.setattr(
        "clocktick.server.runner.asyncio.get_running_loop",
        lambda: _FakeLoop(calls, []),
    )

    app = cast(Any, SimpleNamespace())
    runner = ServerRunner(app, host="0.0.0.0", port=9000)
    await runner.run()

    assert calls.count("signal") == 2
    assert "serve" in calls
    assert configs[0]["host"] == "0.0.0.0"
    assert configs[0]["port"] == 9000
    assert configs[0]["log_config"] is None


@pytest.mark.asyncio
async def test_first_signal_requests_exit(monkeypatch) -> None:
    handlers: list[Any] = []
    server = SimpleNamespace(should_exit=False)

    async def _serve() -> None:
        handlers[0]()

    server.serve = _serve

    monkeypatch.setattr(
        "clocktick.server.runner.uvicorn.Config", lambda *a, **kw: object()
    )
    monkeypatch.setattr("clocktick.server.runner.uvicorn.Server", lambda _cfg: server)
    monkeypatch.setattr(
        "clocktick.server.runner.asyncio.get_running_loop",
        lambda: _FakeLoop([], handlers),
    )

    exits: list[int] = []
    monkeypatch.setattr("clocktick.server.runner.os._exit", exits.append)

    await ServerRunner(cast(Any, SimpleNamespace()), host="h", port=1).run()

    assert server.should_exit is True
    assert exits == []

    handlers[0]()
    assert exits == [1]
