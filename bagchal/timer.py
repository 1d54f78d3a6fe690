from __future__ import annotations

import asyncio
import logging
from typing import Callable, Optional

from bagchal.core import Side

logger = logging.getLogger(__name__)

LOW_TIME_THRESHOLD = 5
DEFAULT_SYNC_INTERVAL = 5
TIMER_CHOICES = (15, 30, 60, 0)  # 0 means unlimited


class TurnTimer:
    """Per-turn countdown.

    ``tick()`` advances one second; ``run()`` drives ticks from the event loop.
    The host is the only source of truth for the remaining time: every
    ``sync_interval`` ticks it reports its value through ``on_sync`` and the
    other peers overwrite theirs with ``apply_sync``.
    """

    def __init__(
        self,
        seconds: int = 30,
        *,
        enabled: bool = False,
        is_host: bool = False,
        on_time_up: Optional[Callable[[], None]] = None,
        on_sync: Optional[Callable[[int], None]] = None,
        sync_interval: int = DEFAULT_SYNC_INTERVAL,
    ) -> None:
        self.seconds = seconds
        self.enabled = enabled
        self.is_host = is_host
        self.on_time_up = on_time_up
        self.on_sync = on_sync
        self.sync_interval = sync_interval
        self.time_left = seconds
        self.connected = False
        self.game_over = False
        self._turn: Optional[Side] = None
        self._ticks_since_sync = 0

    @property
    def active(self) -> bool:
        return self.enabled and self.seconds > 0 and self.connected and not self.game_over

    @property
    def is_low(self) -> bool:
        return self.enabled and 0 < self.time_left <= LOW_TIME_THRESHOLD

    def configure(self, *, seconds: int, enabled: bool) -> None:
        self.seconds = seconds
        self.enabled = enabled
        self.reset()

    def reset(self) -> None:
        self.time_left = self.seconds
        self._ticks_since_sync = 0

    def turn_changed(self, turn: Side) -> None:
        if turn != self._turn:
            self._turn = turn
            self.reset()

    def apply_sync(self, value: int) -> None:
        if self.is_host:
            return
        self.time_left = int(value)

    def tick(self) -> None:
        if not self.active:
            return
        if self.time_left <= 1:
            self.time_left = self.seconds
            if self.on_time_up is not None:
                self.on_time_up()
        else:
            self.time_left -= 1

        if self.is_host:
            self._ticks_since_sync += 1
            if self._ticks_since_sync >= self.sync_interval:
                self._ticks_since_sync = 0
                if self.on_sync is not None:
                    self.on_sync(self.time_left)

    async def run(self, interval: float = 1.0) -> None:
        logger.debug("Turn timer started (%ss per turn)", self.seconds)
        while True:
            await asyncio.sleep(interval)
            self.tick()
