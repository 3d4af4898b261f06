"""
Provides the "current" time to the scheduler and matching engine.

In normal operation it returns the real wall-clock time. When a simulation
timestamp is configured (SIMULATION_DATETIME) it returns that fixed value
instead, which lets tests and manual runs fast-forward time.
"""

from datetime import date, datetime
from typing import Optional, Union

from ..config import SIMULATION_DATETIME


class Clock:
    def __init__(self, simulation_datetime: Optional[Union[str, datetime]] = None):
        if isinstance(simulation_datetime, str):
            simulation_datetime = datetime.fromisoformat(simulation_datetime)
        self._fixed = simulation_datetime

    @property
    def is_simulated(self) -> bool:
        return self._fixed is not None

    def now(self) -> datetime:
        if self._fixed is not None:
            return self._fixed
        return datetime.now()

    def today(self) -> date:
        return self.now().date()


def get_clock() -> Clock:
    """Clock honouring the SIMULATION_DATETIME setting"""
    return Clock(SIMULATION_DATETIME)
