"""Sensor sampling and the relay-driven acid pump."""

from __future__ import annotations

import time
from collections.abc import Callable

from phdoser.state import Cooldown, Phase


def read_adc(read: Callable[[], int], min_adc: int, max_adc: int) -> int:
    """Sample ``read`` until a value falls within ``[min_adc, max_adc]``."""
    while True:
        value = read()
        if min_adc <= value <= max_adc:
            return value


class Pump:
    """A pump behind a relay; ``relay(True)`` switches it on."""

    def __init__(
        self,
        relay: Callable[[bool], None],
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._relay = relay
        self._sleep = sleep
        self.ready = False
        self.running = False
        self.runtime_ms = 0
        self.cooldown = Cooldown(0)

    def start(self, now: int) -> None:
        """Switch the relay on and mark the start of a run."""
        self.cooldown.restart(now)
        self._relay(True)

    def stop(self) -> None:
        """Switch the relay off."""
        self._relay(False)
        self.running = False

    def update(self, now: int, phase: Phase, multiplier: float) -> None:
        """Start a pending dose while lowering, or stop once the run is over."""
        if self.ready and not self.running and phase == Phase.LOWERING:
            if self.cooldown.ready(now):
                self.ready = False
                self.running = True
                self.start(now)
        elif self.cooldown.elapsed(now) >= self.runtime_ms * multiplier:
            self.stop()

    def run_for(self, ms: int) -> None:
        """Run the pump for ``ms`` milliseconds, blocking meanwhile."""
        if ms < 0:
            raise ValueError("pump time must not be negative")
        self._relay(True)
        self._sleep(ms / 1000)
        self._relay(False)