"""
═══════════════════════════════════════════════════════════════════════════════
HESTON PROCESS - Discretized Stochastic Volatility Dynamics
═══════════════════════════════════════════════════════════════════════════════

Time evolution of the Heston (1993) process (S, V) over one step, under four
discretization schemes.

Mathematical Model:
    dS = (r(t)-q(t))S dt + √V S dW_S
    dV = κ(θ-V)dt + σ√V dW_V
    Corr(dW_S, dW_V) = ρ

Schemes:
    PARTIAL_TRUNCATION  - √V⁺ in diffusion, raw V in drift
    FULL_TRUNCATION     - V⁺ everywhere
    REFLECTION          - |V| everywhere
    EXACT_VARIANCE      - noncentral χ² variance, decorrelated log-price

Modules:
    backend.core        - Parameters, market collaborators, distributions
    backend.processes   - Generic process interface and HestonProcess
    tests               - Validation tests

Usage:
    import datetime as dt
    from heston_process import HestonProcess, FlatForward, SimpleQuote

    today = dt.date(2026, 1, 1)
    process = HestonProcess(
        FlatForward(today, 0.05), FlatForward(today, 0.02), SimpleQuote(100.0),
        v0=0.04, kappa=1.0, theta=0.04, sigma=0.4, rho=-0.5,
        discretization='full_truncation',
    )
    x1 = process.evolve(0.0, process.initial_values(), 1/252, [0.3, -1.1])

═══════════════════════════════════════════════════════════════════════════════
"""

__version__ = '1.0.0'
__author__ = 'Heston Process'

from heston_process.backend.core.parameters import (
    DiscretizationMode,
    HestonParams,
    get_default_params,
)
from heston_process.backend.core.market import (
    Actual360,
    Actual365Fixed,
    FlatForward,
    SimpleQuote,
)
from heston_process.backend.processes.heston import HestonProcess
