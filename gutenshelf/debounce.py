"""
Delay-and-collapse helper for handlers fed by bursts of events.

A ``Debouncer`` wraps a callback and a delay in milliseconds. Every call
cancels the pending one and schedules a fresh call, so the callback only
runs once the calls stop arriving for ``delay_ms``. The arguments of the
last call win; nothing is returned to the caller.

Inside a running asyncio loop the call is scheduled with
``loop.call_later`` and coroutine callbacks become tasks on that loop.
Outside of a loop a ``threading.Timer`` is used instead.
"""

from __future__ import annotations

import asyncio
import functools
import inspect
import logging
import threading
from typing import Any, Callable, Optional, Set, Union


logger = logging.getLogger(__name__)

_Handle = Union[asyncio.TimerHandle, threading.Timer]


class Debouncer:
    """Run ``func`` once after ``delay_ms`` of silence."""

    def __init__(self, func: Callable[..., Any], delay_ms: int) -> None:
        if delay_ms < 0:
            raise ValueError("delay_ms must be >= 0")
        self.func = func
        self.delay_ms = delay_ms
        self._handle: Optional[_Handle] = None
        # bumped on every call/cancel so a timer that already left its
        # queue can tell it has been superseded
        self._generation = 0
        self._lock = threading.Lock()
        # running coroutine callbacks, held until done
        self._tasks: Set[asyncio.Future] = set()
        functools.update_wrapper(self, func)

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def __call__(self, *args: Any, **kwargs: Any) -> None:
        delay = self.delay_ms / 1000
        with self._lock:
            self._cancel_locked()
            generation = self._generation
            try:
                loop = asyncio.get_running_loop()
            except RuntimeError:
                loop = None
            if loop is not None:
                self._handle = loop.call_later(
                    delay, self._fire, generation, args, kwargs, loop
                )
            else:
                timer = threading.Timer(
                    delay, self._fire, args=(generation, args, kwargs, None)
                )
                timer.daemon = True
                self._handle = timer
                timer.start()

    def __get__(self, instance: Any, owner: Any = None):
        # Bind like a plain function so decorated methods receive ``self``
        if instance is None:
            return self
        return functools.partial(self.__call__, instance)

    def cancel(self) -> None:
        """Drop the pending call and cancel callbacks still running on a loop."""
        with self._lock:
            self._cancel_locked()
            tasks = list(self._tasks)
        try:
            current = asyncio.get_running_loop()
        except RuntimeError:
            current = None
        for task in tasks:
            task_loop = task.get_loop()
            if task_loop is current:
                task.cancel()
            elif not task_loop.is_closed():
                task_loop.call_soon_threadsafe(task.cancel)

    def _cancel_locked(self) -> None:
        self._generation += 1
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _fire(
        self,
        generation: int,
        args: tuple,
        kwargs: dict,
        loop: Optional[asyncio.AbstractEventLoop],
    ) -> None:
        with self._lock:
            if generation != self._generation:
                return
            self._handle = None
        try:
            result = self.func(*args, **kwargs)
            if inspect.isawaitable(result) and loop is None:
                asyncio.run(_await(result))
        except Exception as exc:
            logger.error("Debounced call failed: %s", exc, exc_info=exc)
            return
        if inspect.isawaitable(result) and loop is not None:
            task = asyncio.ensure_future(result, loop=loop)
            with self._lock:
                self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)
            task.add_done_callback(_log_task_failure)


async def _await(awaitable: Any) -> None:
    await awaitable


def _log_task_failure(task: asyncio.Future) -> None:
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.error("Debounced call failed: %s", exc, exc_info=exc)


def debounce(delay_ms: int) -> Callable[[Callable[..., Any]], Debouncer]:
    """Decorator form of :class:`Debouncer`.

    >>> @debounce(500)
    ... def on_input(text): ...
    """

    def decorator(func: Callable[..., Any]) -> Debouncer:
        return Debouncer(func, delay_ms)

    return decorator
