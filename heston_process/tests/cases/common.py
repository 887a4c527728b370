import datetime as dt
import re
import warnings
from typing import Dict, Tuple

import numpy as np

from heston_process.backend.core.parameters import (
    DiscretizationMode,
    HestonParams,
    get_default_params,
    get_feller_params,
)
from heston_process.backend.core.market import (
    Actual360,
    Actual365Fixed,
    DayCounter,
    FlatForward,
    SimpleQuote,
)
from heston_process.backend.core.distributions import (
    CumulativeNormalDistribution,
    InverseNonCentralChiSquare,
)
from heston_process.backend.processes.base import EulerDiscretization, StochasticProcess
from heston_process.backend.processes.heston import (
    DIFFUSION_VOL_FLOOR,
    MACHINE_EPSILON,
    HestonProcess,
)

try:
    import QuantLib as ql
    QUANTLIB_AVAILABLE = True
except Exception:
    QUANTLIB_AVAILABLE = False


CaseResult = Tuple[bool, str, Dict]

REFERENCE_DATE = dt.date(2026, 1, 2)

ALL_MODES = list(DiscretizationMode)


def make_process(mode=DiscretizationMode.PARTIAL_TRUNCATION, r=0.0, q=0.0,
                 spot=100.0, **overrides) -> HestonProcess:
    """
    HestonProcess on flat curves with the reference parameters
    (κ=1, θ=0.04, σ=0.4, ρ=-0.5, V₀=0.04) unless overridden.
    """
    constants = get_default_params().to_dict()
    constants.pop('discretization')
    constants.update(overrides)
    extra = {k: constants.pop(k) for k in ('normal_cdf', 'inverse_chi2', 'max_evaluations')
             if k in constants}
    with warnings.catch_warnings():
        warnings.simplefilter('ignore', UserWarning)
        return HestonProcess(
            FlatForward(REFERENCE_DATE, r),
            FlatForward(REFERENCE_DATE, q),
            SimpleQuote(spot),
            discretization=mode,
            **constants,
            **extra,
        )


def raises(exc_type, pattern: str, func, *args, **kwargs) -> bool:
    """True when func(*args, **kwargs) raises exc_type with a message matching pattern."""
    try:
        func(*args, **kwargs)
    except exc_type as e:
        return re.search(pattern, str(e)) is not None
    return False


def warning_messages(func, *args, **kwargs):
    """Messages of the UserWarnings emitted by func(*args, **kwargs)."""
    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter('always')
        func(*args, **kwargs)
    return [str(w.message) for w in caught if issubclass(w.category, UserWarning)]


def is_close(actual, expected, rel: float = 1e-12, abs_: float = 0.0) -> bool:
    return bool(np.allclose(actual, expected, rtol=rel, atol=abs_))


class ExpiringCurve(FlatForward):
    """Flat curve that has no data past max_time, like a finite term structure."""

    def __init__(self, reference_date, rate, max_time):
        super().__init__(reference_date, rate)
        self.max_time = max_time

    def forward_rate(self, t1: float, t2: float) -> float:
        if t2 > self.max_time:
            raise ValueError(f"time ({t2}) is past max curve time ({self.max_time})")
        return super().forward_rate(t1, t2)


class RecordingInverseChi2:
    """
    Stand-in for InverseNonCentralChiSquare that records its inputs and
    returns a fixed quantile.
    """

    def __init__(self, quantile=1.0):
        self.quantile = quantile
        self.calls = []

    def __call__(self, df, ncp, max_evaluations):
        def inverse(p):
            self.calls.append({'df': df, 'ncp': ncp,
                               'max_evaluations': max_evaluations, 'p': p})
            return self.quantile
        return inverse


class CountingInverseChi2(InverseNonCentralChiSquare):
    """InverseNonCentralChiSquare that counts its CDF evaluations."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.cdf_calls = 0

    def cdf(self, x: float) -> float:
        self.cdf_calls += 1
        return super().cdf(x)


def standard_normal_draws(n: int, seed: int = 42) -> np.ndarray:
    rng = np.random.default_rng(seed)
    return rng.standard_normal((2, n))
