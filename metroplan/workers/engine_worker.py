"""
Engine worker for running gateway requests off the UI thread.

Each request runs in its own daemon thread with a private asyncio event
loop, so an unresponsive engine never freezes the editor. Results come back
to the UI thread through queued Qt signals. Requests are not serialized:
two overlapping requests run concurrently and may finish in either order.
"""

import asyncio
import logging
import threading
import time
from typing import Any, Awaitable, Callable

from PySide6.QtCore import QObject, Signal

from ..core.interfaces.i_engine_gateway import IEngineGateway

logger = logging.getLogger(__name__)

GatewayFactory = Callable[[], Any]  # returns an async context manager yielding IEngineGateway
GatewayOperation = Callable[[IEngineGateway], Awaitable[Any]]


class EngineWorker(QObject):
    """Runs engine gateway coroutines in background threads."""

    # Signals
    request_completed = Signal(str, int, object)  # kind, sequence, result
    request_failed = Signal(str, int, object)  # kind, sequence, exception

    def __init__(self, gateway_factory: GatewayFactory, parent=None):
        """
        Initialize the worker.

        Args:
            gateway_factory: Callable creating a fresh gateway context manager per request
        """
        super().__init__(parent)
        self._gateway_factory = gateway_factory

    def submit(self, kind: str, sequence: int, operation: GatewayOperation) -> None:
        """
        Run a gateway operation in the background.

        Args:
            kind: Request kind, echoed back in the result signal
            sequence: Issue sequence number, echoed back in the result signal
            operation: Coroutine function taking the gateway
        """
        def run_async():
            loop = asyncio.new_event_loop()
            asyncio.set_event_loop(loop)
            start_time = time.time()
            try:
                result = loop.run_until_complete(self._run(operation))
            except Exception as e:
                logger.error(f"Engine request {kind}#{sequence} failed: {e}")
                self.request_failed.emit(kind, sequence, e)
            else:
                logger.debug(f"Engine request {kind}#{sequence} completed in "
                             f"{time.time() - start_time:.3f}s")
                self.request_completed.emit(kind, sequence, result)
            finally:
                loop.close()

        thread = threading.Thread(target=run_async, name=f"engine-{kind}-{sequence}", daemon=True)
        thread.start()

    async def _run(self, operation: GatewayOperation) -> Any:
        async with self._gateway_factory() as gateway:
            return await operation(gateway)
