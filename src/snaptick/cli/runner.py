# src/snaptick/cli/runner.py

from __future__ import annotations

import asyncio
import contextlib
import logging
import threading
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, TypeVar

from ..core.events import Event
from ..core.rollover import RolloverResult
from .bootstrap import App

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def _run_session(
    app: App,
    stop_event: asyncio.Event,
    started: threading.Event,
    holder: dict[str, object],
) -> None:
    """
    View-model session (async):

    start (hydrate + rollover) -> wait for stop -> dispose

    Shutdown model:
    - main thread sets stop_event via loop.call_soon_threadsafe(stop_event.set)
    """
    vm = app.viewmodel
    try:
        holder["rollover"] = await vm.start()
        started.set()
        await stop_event.wait()
    except asyncio.CancelledError:
        logger.info("View-model session cancelled.")
    except Exception:
        logger.exception("View-model session crashed.")
    finally:
        started.set()
        with contextlib.suppress(Exception):
            await vm.dispose()
        with contextlib.suppress(Exception):
            await app.scheduler.shutdown()
        logger.info("View-model session stopped.")


@dataclass
class ViewModelRunner:
    app: App
    thread: threading.Thread
    loop: asyncio.AbstractEventLoop
    stop_event: asyncio.Event
    rollover: RolloverResult | None

    def call(self, factory: Callable[[], Awaitable[T]], timeout: float | None = 30.0) -> T:
        """Run `factory()` on the view-model loop and wait for its result."""

        async def _go() -> T:
            return await factory()

        fut = asyncio.run_coroutine_threadsafe(_go(), self.loop)
        return fut.result(timeout)

    def dispatch(self, event: Event, timeout: float | None = 30.0) -> Any:
        """
        Send one event and wait for its background job.

        Validation errors are raised here; job failures are not (they are in
        viewmodel.failures) and yield None.
        """
        vm = self.app.viewmodel

        async def _apply() -> Any:
            job = vm.on_event(event)
            if job is None:
                return None
            await asyncio.wait([job])
            if job.cancelled() or job.exception() is not None:
                return None
            return job.result()

        return self.call(_apply, timeout=timeout)

    def stop(self) -> None:
        try:
            self.loop.call_soon_threadsafe(self.stop_event.set)
        except RuntimeError:
            logger.debug("Failed to signal view-model stop.", exc_info=True)

    def join(self, timeout: float | None = None) -> None:
        self.thread.join(timeout=timeout)


def start_viewmodel_in_background(app: App) -> ViewModelRunner | None:
    """
    Start the view-model loop in a background thread (so console REPL can run in parallel).

    Why a thread:
    - console REPL is blocking (input()).
    - the view-model is async and wants its own event loop.
    """
    ready = threading.Event()
    started = threading.Event()
    holder: dict[str, object] = {}

    def runner() -> None:
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        stop_event = asyncio.Event()

        holder["loop"] = loop
        holder["stop_event"] = stop_event
        ready.set()

        try:
            loop.run_until_complete(_run_session(app, stop_event, started, holder))
        finally:
            with contextlib.suppress(Exception):
                loop.run_until_complete(loop.shutdown_default_executor())
            with contextlib.suppress(Exception):
                loop.close()

    t = threading.Thread(target=runner, name="snaptick-viewmodel", daemon=True)
    t.start()

    ready.wait(timeout=5.0)
    loop = holder.get("loop")
    stop_event = holder.get("stop_event")

    if not isinstance(loop, asyncio.AbstractEventLoop) or not isinstance(stop_event, asyncio.Event):
        logger.error("View-model thread did not initialize properly.")
        return None

    started.wait(timeout=30.0)
    rollover = holder.get("rollover")

    logger.info("View-model background thread started.")
    return ViewModelRunner(
        app=app,
        thread=t,
        loop=loop,
        stop_event=stop_event,
        rollover=rollover if isinstance(rollover, RolloverResult) else None,
    )
