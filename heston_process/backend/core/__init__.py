"""
Core Module for Heston Process

- Parameters: Heston constants and discretization modes
- Market: collaborator contracts, day counters, flat curve and quote
- Distributions: normal CDF and inverse noncentral chi-squared
"""

from .parameters import (
    DiscretizationMode,
    HestonParams,
    get_default_params,
    get_feller_params,
)
from .market import (
    DayCounter,
    Actual365Fixed,
    Actual360,
    SimpleQuote,
    FlatForward,
)
from .distributions import (
    CumulativeNormalDistribution,
    InverseNonCentralChiSquare,
)

__all__ = [
    'DiscretizationMode',
    'HestonParams',
    'get_default_params',
    'get_feller_params',
    'DayCounter',
    'Actual365Fixed',
    'Actual360',
    'SimpleQuote',
    'FlatForward',
    'CumulativeNormalDistribution',
    'InverseNonCentralChiSquare',
]
