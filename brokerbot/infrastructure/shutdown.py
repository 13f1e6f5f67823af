"""
Graceful shutdown on SIGHUP/SIGINT/SIGTERM/SIGQUIT.

The first signal runs every registered hook concurrently and waits for all of
them; a failing hook is logged and does not stop the others. A second signal
while hooks are still running exits immediately.
"""

import asyncio
import inspect
import logging
import os
import signal
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)

GRACEFUL_SHUTDOWN_SIGNALS = (signal.SIGHUP, signal.SIGINT, signal.SIGTERM, signal.SIGQUIT)

ShutdownHook = Callable[[], Any]


class ShutdownManager:
    def __init__(self, force_exit: Callable[[int], Any] = os._exit) -> None:
        self._hooks: list[ShutdownHook] = []
        self._force_exit = force_exit
        self._started = False
        self._done = asyncio.Event()
        self._task: Optional[asyncio.Task] = None

    @property
    def shutting_down(self) -> bool:
        return self._started

    def add_handler(self, hook: ShutdownHook) -> None:
        """Register a sync or async callable to run on shutdown."""
        self._hooks.append(hook)

    def install(self, loop: Optional[asyncio.AbstractEventLoop] = None) -> None:
        loop = loop or asyncio.get_running_loop()
        for sig in GRACEFUL_SHUTDOWN_SIGNALS:
            loop.add_signal_handler(sig, self.handle_signal, sig)

    def handle_signal(self, sig: signal.Signals) -> None:
        if self._started:
            logger.warning("Received second shutdown signal %s, exiting immediately.", sig.name)
            self._force_exit(1)
            return
        self.trigger(f"signal {sig.name}")

    def trigger(self, reason: str) -> None:
        if self._started:
            return
        self._started = True
        logger.info("Caught %s, running %d shutdown handlers.", reason, len(self._hooks))
        self._task = asyncio.get_running_loop().create_task(self.run_hooks())

    async def run_hooks(self) -> None:
        await asyncio.gather(*(self._run_hook(hook) for hook in self._hooks))
        logger.info("Graceful shutdown complete.")
        self._done.set()

    async def wait(self) -> None:
        await self._done.wait()

    async def _run_hook(self, hook: ShutdownHook) -> None:
        try:
            if inspect.iscoroutinefunction(hook):
                await hook()
            else:
                result = await asyncio.to_thread(hook)
                if inspect.isawaitable(result):
                    await result
        except Exception:
            logger.exception("Shutdown hook %r failed", hook)
