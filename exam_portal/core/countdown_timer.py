"""Whole-second countdown used to time a test attempt."""

from __future__ import annotations

from collections.abc import Callable, Iterator
import logging

logger = logging.getLogger(__name__)


class CountdownTimer:
    """Counts down from ``duration_minutes * 60`` to zero, one tick per second.

    The timer does not own a clock: the caller drives it with :meth:`tick`.
    ``on_expire`` fires exactly once per configuration, on the tick that
    reaches zero. Calling :meth:`configure` again re-arms it against the new
    duration. A non-positive duration leaves the timer idle.
    """

    def __init__(
        self,
        duration_minutes: int = 0,
        on_expire: Callable[[], None] | None = None,
    ) -> None:
        self._on_expire = on_expire
        self._total_seconds: int = 0
        self._remaining_seconds: int = 0
        self._expired: bool = False
        self._stopped: bool = False
        self.configure(duration_minutes)

    def configure(self, duration_minutes: int) -> None:
        """Restart the countdown for a new duration, cancelling any expiry state."""
        self._expired = False
        self._stopped = False
        if duration_minutes <= 0:
            self._total_seconds = 0
            self._remaining_seconds = 0
            return
        self._total_seconds = duration_minutes * 60
        self._remaining_seconds = self._total_seconds
        logger.debug("Countdown armed for %d seconds", self._total_seconds)

    def tick(self) -> int:
        """Advance one second and return the remaining time."""
        if not self.is_active:
            return self._remaining_seconds
        self._remaining_seconds -= 1
        if self._remaining_seconds <= 0:
            self._remaining_seconds = 0
            self._expired = True
            logger.info("Countdown expired")
            if self._on_expire is not None:
                self._on_expire()
        return self._remaining_seconds

    def stop(self) -> None:
        """Freeze the countdown; later ticks do nothing and expiry never fires."""
        self._stopped = True

    def countdown(self) -> Iterator[int]:
        """Yield the remaining seconds, ticking between values, down to zero.

        The generator reads the live counter on every step, so reconfiguring
        the timer mid-iteration restarts the sequence from the new total.
        """
        if self._total_seconds <= 0:
            return
        yield self._remaining_seconds
        while self.is_active:
            yield self.tick()

    @property
    def total_seconds(self) -> int:
        return self._total_seconds

    @property
    def remaining_seconds(self) -> int:
        return self._remaining_seconds

    @property
    def is_expired(self) -> bool:
        return self._expired

    @property
    def is_active(self) -> bool:
        return self._total_seconds > 0 and not self._expired and not self._stopped

    @property
    def formatted(self) -> str:
        minutes, seconds = divmod(self._remaining_seconds, 60)
        return f"{minutes:02d}:{seconds:02d}"

    @property
    def percentage(self) -> float:
        if self._total_seconds <= 0:
            return 0.0
        return (self._remaining_seconds / self._total_seconds) * 100
