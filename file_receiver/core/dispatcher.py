"""Single-threaded execution context for host-model calls."""

from __future__ import annotations

import asyncio
import functools
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, Optional, TypeVar

T = TypeVar("T")


class HostDispatcher:
    """Serialises every call into the host project model onto one thread.

    The host toolkit only accepts automation calls from a single affinity
    context. Request handlers ``await dispatcher.run(...)`` and get control
    back as soon as the call returns, so the context is never held across
    filesystem work.
    """

    def __init__(self, name: str = "host-ui") -> None:
        self._name = name
        self._lock = threading.Lock()
        self._executor: Optional[ThreadPoolExecutor] = None
        self._thread_ident: Optional[int] = None

    def _get_executor(self) -> ThreadPoolExecutor:
        with self._lock:
            if self._executor is None:
                self._executor = ThreadPoolExecutor(
                    max_workers=1,
                    thread_name_prefix=self._name,
                    initializer=self._remember_thread,
                )
            return self._executor

    def _remember_thread(self) -> None:
        self._thread_ident = threading.get_ident()

    def on_host_thread(self) -> bool:
        return self._thread_ident is not None and threading.get_ident() == self._thread_ident

    async def run(self, fn: Callable[..., T], *args: Any, **kwargs: Any) -> T:
        if self.on_host_thread():
            return fn(*args, **kwargs)
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self._get_executor(), functools.partial(fn, *args, **kwargs))

    def shutdown(self) -> None:
        with self._lock:
            executor, self._executor = self._executor, None
            self._thread_ident = None
        if executor is not None:
            executor.shutdown(wait=True)
