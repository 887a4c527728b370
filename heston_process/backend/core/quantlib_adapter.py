"""
QuantLib handles as HestonProcess collaborators.

This is the route for real term structures (interpolated zero curves,
bootstrapped curves, live quotes). Requires the optional `QuantLib` package (pip install heston-process[quantlib]).

    import QuantLib as ql
    curve = QuantLibCurve(ql.YieldTermStructureHandle(ql.FlatForward(...)))
    spot = QuantLibQuote(ql.QuoteHandle(ql.SimpleQuote(100.0)))
"""

import datetime as dt

import QuantLib as ql

from heston_process.backend.core.market import DayCounter


def to_ql_date(date: dt.date) -> ql.Date:
    return ql.Date(date.day, date.month, date.year)


def from_ql_date(date: ql.Date) -> dt.date:
    return dt.date(date.year(), date.month(), date.dayOfMonth())


class QuantLibDayCounter(DayCounter):
    def __init__(self, day_counter: ql.DayCounter):
        self._dc = day_counter

    def day_count(self, d1: dt.date, d2: dt.date) -> int:
        return self._dc.dayCount(to_ql_date(d1), to_ql_date(d2))

    def year_fraction(self, d1: dt.date, d2: dt.date) -> float:
        return self._dc.yearFraction(to_ql_date(d1), to_ql_date(d2))


class QuantLibCurve:
    """ForwardRateSource backed by a ql.YieldTermStructureHandle."""

    def __init__(self, handle):
        self.handle = handle

    def forward_rate(self, t1: float, t2: float) -> float:
        return self.handle.forwardRate(t1, t2, ql.Continuous).rate()

    def reference_date(self) -> dt.date:
        return from_ql_date(self.handle.referenceDate())

    def day_counter(self) -> QuantLibDayCounter:
        return QuantLibDayCounter(self.handle.dayCounter())


class QuantLibQuote:
    """SpotObservable backed by a ql.QuoteHandle."""

    def __init__(self, handle):
        self.handle = handle

    def value(self) -> float:
        return self.handle.value()
