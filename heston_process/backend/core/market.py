"""
Market Collaborators: Contracts and Flat Test Doubles

═══════════════════════════════════════════════════════════════════════════════
WHAT THE HESTON PROCESS NEEDS FROM THE MARKET
═══════════════════════════════════════════════════════════════════════════════

1. SPOT OBSERVABLE:
   value() → S_0 > 0, read live on every initial_values() call.

2. FORWARD-RATE SOURCE (one risk-free, one dividend/funding):
   forward_rate(t₁, t₂) → f(t₁, t₂), continuously compounded
   reference_date(), day_counter() → anchor of the time axis

3. TIME AXIS:
   t = day_counter().year_fraction(reference_date(), date)

   The same convention must have produced the t₀, Δt passed to evolve().

Real curves and quotes come from QuantLib through quantlib_adapter.
The flat objects below cover the constant-rate case used by the demo
and the tests.

═══════════════════════════════════════════════════════════════════════════════
"""

import datetime as dt
from abc import ABC, abstractmethod
from typing import Optional, Protocol


class SpotObservable(Protocol):
    def value(self) -> float: ...


class ForwardRateSource(Protocol):
    def forward_rate(self, t1: float, t2: float) -> float: ...

    def reference_date(self) -> dt.date: ...

    def day_counter(self) -> 'DayCounter': ...


# ═══════════════════════════════════════════════════════════════════════════════
# DAY COUNTERS
# ═══════════════════════════════════════════════════════════════════════════════

class DayCounter(ABC):
    """Day-count convention: year_fraction(d1, d2)."""

    def day_count(self, d1: dt.date, d2: dt.date) -> int:
        return (d2 - d1).days

    @abstractmethod
    def year_fraction(self, d1: dt.date, d2: dt.date) -> float:
        pass

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class Actual365Fixed(DayCounter):
    def year_fraction(self, d1: dt.date, d2: dt.date) -> float:
        return self.day_count(d1, d2) / 365.0


class Actual360(DayCounter):
    def year_fraction(self, d1: dt.date, d2: dt.date) -> float:
        return self.day_count(d1, d2) / 360.0


# ═══════════════════════════════════════════════════════════════════════════════
# QUOTE AND CURVE
# ═══════════════════════════════════════════════════════════════════════════════

class SimpleQuote:
    """
    Mutable market quote. The process holds it by reference, so a
    set_value() is visible on the next initial_values() call.
    """

    def __init__(self, value: Optional[float] = None):
        self._value = value

    def value(self) -> float:
        if self._value is None:
            raise ValueError("invalid SimpleQuote")
        return self._value

    def set_value(self, value: Optional[float]) -> float:
        """Set a new value and return the change (0.0 if previously unset)."""
        previous = self._value
        self._value = value
        if previous is None or value is None:
            return 0.0
        return value - previous

    def __repr__(self) -> str:
        return f"SimpleQuote({self._value!r})"


class FlatForward:
    """Constant continuously-compounded forward rate."""

    def __init__(self, reference_date: dt.date, rate: float,
                 day_counter: Optional[DayCounter] = None):
        self._reference_date = reference_date
        self._day_counter = day_counter or Actual365Fixed()
        self.rate = float(rate)

    def reference_date(self) -> dt.date:
        return self._reference_date

    def day_counter(self) -> DayCounter:
        return self._day_counter

    def forward_rate(self, t1: float, t2: float) -> float:
        if t2 < t1:
            raise ValueError(f"t2 ({t2}) must not precede t1 ({t1})")
        return self.rate

    def __repr__(self) -> str:
        return f"FlatForward({self._reference_date.isoformat()}, {self.rate})"
