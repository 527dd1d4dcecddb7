from __future__ import annotations

import threading
from typing import Any, Callable, Optional


class Debouncer:
    """Trailing-edge debounce.

    ``call()`` schedules ``func`` to run ``delay`` seconds after the most
    recent call; every new call resets the timer and replaces the arguments.
    ``timer_factory`` defaults to ``threading.Timer`` and only needs
    ``start()``/``cancel()``, so tests can drive it by hand.
    """

    def __init__(
        self,
        delay: float,
        func: Callable[..., Any],
        *,
        timer_factory: Callable[[float, Callable[[], None]], Any] | None = None,
    ):
        self._delay = float(delay)
        self._func = func
        self._timer_factory = timer_factory or threading.Timer
        self._lock = threading.Lock()
        self._timer: Optional[Any] = None
        self._args: tuple = ()
        self._kwargs: dict = {}
        self._generation = 0

    @property
    def pending(self) -> bool:
        with self._lock:
            return self._timer is not None

    def call(self, *args, **kwargs) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._args, self._kwargs = args, kwargs
            self._generation += 1
            generation = self._generation
            timer = self._timer_factory(self._delay, lambda: self._fire(generation))
            if isinstance(timer, threading.Timer):
                timer.daemon = True
            self._timer = timer
        timer.start()

    def flush(self) -> bool:
        """Run the pending call now. Returns False when nothing was pending."""
        with self._lock:
            if self._timer is None:
                return False
            self._timer.cancel()
            self._timer = None
            args, kwargs = self._args, self._kwargs
        self._func(*args, **kwargs)
        return True

    def cancel(self) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._timer = None

    def _fire(self, generation: int) -> None:
        with self._lock:
            # a newer call() superseded this timer
            if self._timer is None or generation != self._generation:
                return
            self._timer = None
            args, kwargs = self._args, self._kwargs
        self._func(*args, **kwargs)
