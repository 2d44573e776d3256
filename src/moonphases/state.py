"""Shared orbital angle with a single-writer export guard and render-completion signal."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

logger = logging.getLogger(__name__)

AngleListener = Callable[[float], None]


class ExportInProgressError(Exception):
    """The angle is owned by a running export."""


class AngleState:
    """Owner of the orbital angle shared by the controls and the export pipeline.

    While an export holds the guard (``begin_export``), only the holder's
    token may write; every other ``set`` raises ExportInProgressError.

    Renderers subscribe to angle changes and call ``mark_drawn`` once they
    have drawn an angle. ``drawn`` hands out a future for that signal, so a
    capture can wait for the views to catch up instead of sleeping.
    """

    def __init__(self, angle: float = 0.0) -> None:
        self._angle = angle
        self._owner: object | None = None
        self._listeners: list[AngleListener] = []
        self._waiters: list[tuple[float, asyncio.Future[float]]] = []

    @property
    def export_in_progress(self) -> bool:
        return self._owner is not None

    def get(self) -> float:
        return self._angle

    def set(self, angle: float, *, token: object | None = None) -> None:
        """Write the angle and notify listeners.

        Raises:
            ExportInProgressError: If an export holds the guard and token is
                not its token.
        """
        if self._owner is not None and token is not self._owner:
            raise ExportInProgressError("angle is locked by a running export")
        self._angle = angle
        for listener in list(self._listeners):
            listener(angle)

    def subscribe(self, listener: AngleListener) -> Callable[[], None]:
        """Register a change listener. Returns a function that removes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def begin_export(self) -> object:
        """Take the single-writer guard and return the writer token.

        Raises:
            ExportInProgressError: If another export already holds it.
        """
        if self._owner is not None:
            raise ExportInProgressError("an export is already running")
        self._owner = object()
        return self._owner

    def end_export(self, token: object) -> None:
        if token is self._owner:
            self._owner = None

    def drawn(self, angle: float) -> asyncio.Future[float]:
        """Future resolved when a renderer reports that angle as drawn.

        Must be called from a running event loop, before the angle is set.
        """
        future: asyncio.Future[float] = asyncio.get_running_loop().create_future()
        self._waiters.append((angle, future))
        return future

    def mark_drawn(self, angle: float) -> None:
        """Resolve every pending ``drawn`` future for angle."""
        pending = []
        for wanted, future in self._waiters:
            if future.done():
                continue
            if wanted == angle:
                future.set_result(angle)
            else:
                pending.append((wanted, future))
        self._waiters = pending

    def fail_drawn(self, angle: float, error: BaseException) -> None:
        """Reject pending ``drawn`` futures for angle with error."""
        pending = []
        for wanted, future in self._waiters:
            if future.done():
                continue
            if wanted == angle:
                future.set_exception(error)
            else:
                pending.append((wanted, future))
        self._waiters = pending

    def cancel_drawn(self) -> None:
        """Drop all pending ``drawn`` futures."""
        for _, future in self._waiters:
            if not future.done():
                future.cancel()
        self._waiters = []
        logger.debug("Cancelled pending render-completion waiters")
