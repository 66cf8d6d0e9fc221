"""
Pacing Controller

Turns the 0-100 scan/apply speed settings into concrete delays, runs the
post-application cooldown and, in stealth mode, adds human-looking scrolls
and pauses. All waiting goes through an injectable sleep so the engine can be
driven with zero real time in tests.
"""

import asyncio
import logging
import random
from enum import Enum
from typing import Awaitable, Callable, Optional

from core.errors import InteractionError

logger = logging.getLogger(__name__)

SleepFn = Callable[[float], Awaitable[None]]

# (minimum speed, multiplier), checked top-down
SPEED_TABLE = (
    (95, 0.02),
    (75, 0.15),
    (50, 0.4),
    (25, 0.8),
)
SLOWEST_MULTIPLIER = 1.5


class PaceMode(str, Enum):
    SCAN = "scan"
    APPLY = "apply"


FLOOR_MS = {
    PaceMode.SCAN: 100,
    PaceMode.APPLY: 50,
}


def speed_multiplier(speed: int) -> float:
    """Delay multiplier for a 0-100 speed setting (higher speed, shorter delay)."""
    for threshold, multiplier in SPEED_TABLE:
        if speed >= threshold:
            return multiplier
    return SLOWEST_MULTIPLIER


class PacingController:
    """
    Human-like pacing for one session.

    Args:
        scan_speed: 0-100 speed applied to browsing delays
        apply_speed: 0-100 speed applied to form-filling delays
        cooldown_delay: Seconds to wait after each application attempt
        stealth_mode: Enable random scrolls and reading pauses
        reporter: Optional progress reporter for cooldown status events
        sleep: Awaitable sleep taking seconds (default asyncio.sleep)
        rng: Random source (default the random module)
    """

    def __init__(
        self,
        scan_speed: int = 50,
        apply_speed: int = 50,
        cooldown_delay: float = 5.0,
        stealth_mode: bool = False,
        reporter=None,
        sleep: Optional[SleepFn] = None,
        rng: Optional[random.Random] = None,
    ):
        self.scan_speed = scan_speed
        self.apply_speed = apply_speed
        self.cooldown_delay = max(0.0, cooldown_delay)
        self.stealth_mode = stealth_mode
        self.reporter = reporter
        self._sleep = sleep or asyncio.sleep
        self._rng = rng or random

    @classmethod
    def from_settings(cls, settings, reporter=None, sleep: Optional[SleepFn] = None,
                      rng: Optional[random.Random] = None) -> "PacingController":
        return cls(
            scan_speed=settings.scan_speed,
            apply_speed=settings.apply_speed,
            cooldown_delay=settings.cooldown_delay,
            stealth_mode=settings.stealth_mode,
            reporter=reporter,
            sleep=sleep,
            rng=rng,
        )

    def effective_delay_ms(self, base_ms: float, mode: PaceMode = PaceMode.SCAN) -> float:
        speed = self.scan_speed if mode == PaceMode.SCAN else self.apply_speed
        return max(base_ms * speed_multiplier(speed), FLOOR_MS[mode])

    async def sleep(self, base_ms: float, mode: PaceMode = PaceMode.SCAN) -> float:
        """Sleep for the paced version of base_ms; returns the milliseconds slept."""
        delay_ms = self.effective_delay_ms(base_ms, mode)
        await self._sleep(delay_ms / 1000)
        return delay_ms

    async def scan_delay(self, base_ms: float) -> float:
        return await self.sleep(base_ms, PaceMode.SCAN)

    async def apply_delay(self, base_ms: float) -> float:
        return await self.sleep(base_ms, PaceMode.APPLY)

    async def cooldown(self):
        """Wait cooldown_delay seconds between applications (0 disables it)."""
        if self.cooldown_delay <= 0:
            return
        if self.reporter:
            self.reporter.status_update(f"Cooling down for {self.cooldown_delay:g}s...")
        await self._sleep(self.cooldown_delay)

    # ============== Stealth ==============

    async def stealth_scroll(self, page):
        """Scroll a random 100-400px, then a short scan-paced pause."""
        if not self.stealth_mode:
            return
        pixels = self._rng.randint(100, 400)
        try:
            await page.scroll_by(pixels)
        except InteractionError as e:
            logger.debug(f"Stealth scroll failed: {e}")
            return
        await self.scan_delay(300 + self._rng.random() * 500)

    async def stealth_pause(self):
        """Random 0.5-2.5s pause."""
        if not self.stealth_mode:
            return
        await self._sleep(self._rng.uniform(0.5, 2.5))

    async def stealth_reading_delay(self):
        """Random 2-6s pause, as if reading the posting."""
        if not self.stealth_mode:
            return
        await self._sleep(self._rng.uniform(2.0, 6.0))
