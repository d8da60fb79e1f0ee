from __future__ import annotations

import time
from abc import ABC, abstractmethod


class Clock(ABC):
    @abstractmethod
    def now(self) -> float:
        """Seconds since the epoch."""


class RealClock(Clock):
    def now(self) -> float:
        return time.time()


__all__ = ["Clock", "RealClock"]
