#!/usr/bin/env python3
"""
Trailing debounce for serving-count changes.
Rapid successive requests collapse into one scaling call made after the
caller has been quiet for the debounce window. Only the latest request runs.
"""

import threading
from typing import Any, Callable, Dict, Optional, Tuple

import structlog

from .config import config
from .recipe_scaler import RecipeScaler, ScaledRecipe

logger = structlog.get_logger(__name__)


class Debouncer:
    """Delays a callback until calls stop arriving for `delay` seconds."""

    def __init__(self, delay: float, callback: Callable[..., Any]):
        if delay < 0:
            raise ValueError(f"Debounce delay must not be negative, got {delay}")
        self.delay = delay
        self.callback = callback
        self._lock = threading.Lock()
        self._timer: Optional[threading.Timer] = None
        self._pending_call: Optional[Tuple[tuple, Dict[str, Any]]] = None
        self._generation = 0

    @property
    def pending(self) -> bool:
        with self._lock:
            return self._pending_call is not None

    def call(self, *args, **kwargs):
        """Schedule the callback, replacing any call still waiting."""
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._generation += 1
            self._pending_call = (args, kwargs)
            self._timer = threading.Timer(self.delay, self._fire, args=(self._generation,))
            self._timer.daemon = True
            self._timer.start()

    def cancel(self) -> bool:
        """Drop the waiting call. Returns True if one was dropped."""
        with self._lock:
            return self._take() is not None

    def flush(self) -> bool:
        """Run the waiting call now on the current thread. Returns True if one ran."""
        with self._lock:
            pending = self._take()
        if pending is None:
            return False
        args, kwargs = pending
        self.callback(*args, **kwargs)
        return True

    def _take(self) -> Optional[Tuple[tuple, Dict[str, Any]]]:
        """Detach the waiting call and its timer; caller holds the lock."""
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        pending, self._pending_call = self._pending_call, None
        self._generation += 1
        return pending

    def _fire(self, generation: int):
        with self._lock:
            # A newer call, cancel or flush has superseded this timer
            if generation != self._generation:
                return
            pending = self._take()
        if pending is None:
            return
        args, kwargs = pending
        try:
            self.callback(*args, **kwargs)
        except Exception:
            logger.exception("Debounced callback failed")


class DebouncedRecipeScaler:
    """Debounced front end to RecipeScaler.scale_recipe for interactive callers."""

    def __init__(self, scaler: Optional[RecipeScaler] = None,
                 on_result: Optional[Callable[[ScaledRecipe], Any]] = None,
                 on_error: Optional[Callable[[Exception], Any]] = None,
                 delay: Optional[float] = None):
        """
        Initialize debounced scaler.

        Args:
            scaler: Scaler doing the work
            on_result: Receives each ScaledRecipe produced
            on_error: Receives validation errors instead of them being raised
            delay: Debounce window in seconds
        """
        self.scaler = scaler or RecipeScaler()
        self.on_result = on_result
        self.on_error = on_error
        self.last_result: Optional[ScaledRecipe] = None
        self._debouncer = Debouncer(config.DEBOUNCE_SECONDS if delay is None else delay, self._run)

    @property
    def pending(self) -> bool:
        return self._debouncer.pending

    def request(self, recipe: Any, target_servings: int):
        """Ask for a rescale; supersedes any request still waiting."""
        self._debouncer.call(recipe, target_servings)

    def cancel(self) -> bool:
        return self._debouncer.cancel()

    def flush(self) -> bool:
        return self._debouncer.flush()

    def _run(self, recipe: Any, target_servings: int):
        try:
            result = self.scaler.scale_recipe(recipe, target_servings)
        except Exception as e:
            if self.on_error is None:
                raise
            self.on_error(e)
            return

        self.last_result = result
        if self.on_result is not None:
            self.on_result(result)
