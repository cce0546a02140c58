"""
Linear parameter automation for the live graph.

Each automated parameter carries at most one pending linear ramp. Issuing a
new ramp replaces the pending one, starting from wherever the parameter is
at that moment, so the latest request always wins.
"""

from dataclasses import dataclass
from typing import Optional

import numpy as np
from numpy.typing import NDArray


@dataclass(frozen=True)
class LinearRamp:
    """A scheduled linear transition."""
    start_value: float
    end_value: float
    start_time: float
    duration: float

    @property
    def end_time(self) -> float:
        return self.start_time + self.duration

    def value_at(self, t: float) -> float:
        if self.duration <= 0 or t >= self.end_time:
            return self.end_value
        if t <= self.start_time:
            return self.start_value
        progress = (t - self.start_time) / self.duration
        return self.start_value + (self.end_value - self.start_value) * progress

    def values(self, times: NDArray[np.float64]) -> NDArray[np.float64]:
        if self.duration <= 0:
            return np.full(times.shape, self.end_value)
        progress = np.clip((times - self.start_time) / self.duration, 0.0, 1.0)
        return self.start_value + (self.end_value - self.start_value) * progress


class AutomatedParam:
    """
    A scalar audio parameter with ramp scheduling.

    Times are seconds on the audio clock of the owning graph.
    """

    def __init__(self, value: float = 0.0):
        self._value = float(value)
        self.ramp: Optional[LinearRamp] = None

    def value_at(self, t: float) -> float:
        """Parameter value at clock time ``t``."""
        if self.ramp is None:
            return self._value
        return self.ramp.value_at(t)

    def values(self, t0: float, num_frames: int, sample_rate: int) -> NDArray[np.float64]:
        """Per-sample values for a block starting at ``t0``."""
        if self.ramp is None:
            return np.full(num_frames, self._value)
        times = t0 + np.arange(num_frames, dtype=np.float64) / sample_rate
        return self.ramp.values(times)

    def target(self) -> float:
        """Value the parameter settles at once any pending ramp completes."""
        return self.ramp.end_value if self.ramp is not None else self._value

    def cancel_scheduled_values(self, now: float) -> None:
        """Drop the pending ramp, holding the value reached at ``now``."""
        self._value = self.value_at(now)
        self.ramp = None

    def linear_ramp_to(self, value: float, now: float, duration: float) -> LinearRamp:
        """
        Schedule a linear ramp from the current value to ``value``.

        Args:
            value: Target value
            now: Current clock time in seconds
            duration: Ramp length in seconds

        Returns:
            The scheduled ramp
        """
        self.cancel_scheduled_values(now)
        self.ramp = LinearRamp(
            start_value=self._value,
            end_value=float(value),
            start_time=now,
            duration=duration,
        )
        return self.ramp

    def settle(self, now: float) -> None:
        """Collapse a finished ramp into a plain value."""
        if self.ramp is not None and now >= self.ramp.end_time:
            self._value = self.ramp.end_value
            self.ramp = None
