"""
Unit tests for the engine worker.

Runs real background threads against an in-memory gateway.
"""

import pytest

from metroplan.api.engine_gateway import EngineNetworkError
from metroplan.workers.engine_worker import EngineWorker


class FakeGateway:
    """Gateway double usable as an async context manager."""

    def __init__(self, outcome):
        self.outcome = outcome
        self.entered = False
        self.exited = False

    async def __aenter__(self):
        self.entered = True
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        self.exited = True
        return None

    async def simulate(self, graph, routes, frequency):
        if isinstance(self.outcome, Exception):
            raise self.outcome
        return self.outcome


class TestEngineWorker:
    """Test background execution of gateway operations."""

    def test_completed_request(self, qtbot):
        gateways = []

        def factory():
            gateways.append(FakeGateway({"ok": True}))
            return gateways[-1]

        worker = EngineWorker(factory)

        with qtbot.waitSignal(worker.request_completed, timeout=5000) as blocker:
            worker.submit("simulation", 1, lambda gateway: gateway.simulate({}, {}, 10))

        assert blocker.args == ["simulation", 1, {"ok": True}]
        assert gateways[0].entered and gateways[0].exited

    def test_failed_request(self, qtbot):
        worker = EngineWorker(lambda: FakeGateway(EngineNetworkError("down")))

        with qtbot.waitSignal(worker.request_failed, timeout=5000) as blocker:
            worker.submit("simulation", 4, lambda gateway: gateway.simulate({}, {}, 10))

        kind, sequence, error = blocker.args
        assert (kind, sequence) == ("simulation", 4)
        assert isinstance(error, EngineNetworkError)
