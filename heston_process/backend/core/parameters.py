"""
Heston Process Parameters and Discretization Modes

═══════════════════════════════════════════════════════════════════════════════
MATHEMATICAL FOUNDATION - HESTON STOCHASTIC VOLATILITY PROCESS
═══════════════════════════════════════════════════════════════════════════════

The Heston process is a two-dimensional diffusion (S_t, V_t):

1. ASSET PRICE SDE:
   dS_t = (r(t) - q(t))S_t dt + √V_t S_t dW_S^t

   - r(t): instantaneous forward rate of the risk-free curve
   - q(t): instantaneous forward rate of the dividend/funding curve

2. VARIANCE SDE (CIR Process):
   dV_t = κ(θ - V_t)dt + σ√V_t dW_V^t

   - κ (kappa): mean reversion speed (κ > 0 expected)
   - θ (theta): long-run variance level
   - σ (sigma): volatility of variance
   - V_0 (v0):  initial variance (V_0 ≥ 0 by convention)

3. CORRELATION STRUCTURE:
   E[dW_S^t · dW_V^t] = ρ dt,   ρ ∈ [-1, 1]

4. FELLER CONDITION:
   2κθ > σ²  →  V_t stays strictly positive

   The discretization schemes below exist precisely because a finite step
   can push V below zero even when the condition holds.

5. DISCRETIZATION MODES:
   ═══════════════════════════════════════════════════════════════════════════

   PARTIAL_TRUNCATION  √V⁺ in the diffusion, raw V in the drift
   FULL_TRUNCATION     V⁺ everywhere (Lord, Koekkoek & van Dijk 2006)
   REFLECTION          |V| everywhere
   EXACT_VARIANCE      noncentral χ² sampling of V (Broadie-Kaya / Lewis)

═══════════════════════════════════════════════════════════════════════════════
"""

import warnings
import numpy as np
from dataclasses import dataclass, field, asdict, replace
from enum import Enum
from typing import Dict, Union, Any


class DiscretizationMode(Enum):
    """Closed set of time-stepping schemes understood by HestonProcess."""

    PARTIAL_TRUNCATION = 'partial_truncation'
    FULL_TRUNCATION = 'full_truncation'
    REFLECTION = 'reflection'
    EXACT_VARIANCE = 'exact_variance'

    @classmethod
    def parse(cls, value: Union['DiscretizationMode', str]) -> 'DiscretizationMode':
        """
        Accept a member, its value ('full_truncation') or its name
        ('FULL_TRUNCATION', 'FullTruncation').
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            key = value.strip().replace('-', '_')
            for mode in cls:
                if key.lower() == mode.value:
                    return mode
                if key.lower().replace('_', '') == mode.value.replace('_', ''):
                    return mode
        raise ValueError(f"Unknown discretization mode: {value!r}")


@dataclass(frozen=True)
class HestonParams:
    """
    Immutable container for the five Heston constants plus the scheme.

    Only the correlation bound and the scheme are checked; positivity of
    v0 and kappa is a convention of the model, not enforced here.
    """

    v0: float     # V(0): initial variance
                  # Initial volatility = √v0

    kappa: float  # κ: speed of mean reversion in variance
                  # Units: 1/time

    theta: float  # θ: long-run variance level
                  # Annualized volatility ≈ √θ

    sigma: float  # σ: volatility of variance (vol-of-vol)

    rho: float    # ρ: correlation between price and variance Brownians
                  # ρ < 0 creates the leverage effect

    discretization: DiscretizationMode = DiscretizationMode.FULL_TRUNCATION

    feller_ratio: float = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        # Frozen dataclass: go through object.__setattr__ for normalised fields
        object.__setattr__(self, 'discretization',
                           DiscretizationMode.parse(self.discretization))

        if not -1.0 <= self.rho <= 1.0:
            raise ValueError(f"ρ must be in [-1, 1], got {self.rho}")

        # ═══════════════════════════════════════════════════════════════════
        # FELLER CONDITION CHECK
        # ═══════════════════════════════════════════════════════════════════
        #
        # F = 2κθ/σ². F ≤ 1 means V_t reaches zero with positive probability
        # and the truncation/reflection rules in the schemes will be active.
        # ═══════════════════════════════════════════════════════════════════

        if self.sigma != 0.0:
            ratio = 2.0 * self.kappa * self.theta / (self.sigma ** 2)
        else:
            ratio = float('inf')
        object.__setattr__(self, 'feller_ratio', ratio)

        if not self.feller_satisfied:
            warnings.warn(
                f"Feller condition violated: 2κθ/σ² = {ratio:.4f} ≤ 1. "
                f"Variance paths can reach zero; scheme "
                f"'{self.discretization.value}' will clamp or reflect it.",
                UserWarning,
                stacklevel=3,
            )

    @property
    def feller_satisfied(self) -> bool:
        return self.feller_ratio > 1.0

    def expected_variance(self, t: float) -> float:
        """
        E[V_t | V_0] = θ + (V_0 - θ)e^{-κt}
        """
        return self.theta + (self.v0 - self.theta) * np.exp(-self.kappa * t)

    def to_dict(self) -> Dict[str, Any]:
        """Convert parameters to a plain dictionary for serialization."""
        d = asdict(self)
        d.pop('feller_ratio', None)
        d['discretization'] = self.discretization.value
        return d

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> 'HestonParams':
        """Create HestonParams from a dictionary (inverse of to_dict)."""
        return cls(
            v0=float(d['v0']),
            kappa=float(d['kappa']),
            theta=float(d['theta']),
            sigma=float(d['sigma']),
            rho=float(d['rho']),
            discretization=d.get('discretization',
                                 DiscretizationMode.FULL_TRUNCATION),
        )

    def with_discretization(self, mode: Union[DiscretizationMode, str]) -> 'HestonParams':
        """
        Same constants, different scheme. The constants were checked when
        self was built, so the Feller diagnostic is not repeated.
        """
        with warnings.catch_warnings():
            warnings.simplefilter('ignore', UserWarning)
            return replace(self, discretization=DiscretizationMode.parse(mode))


# ═══════════════════════════════════════════════════════════════════════════════
# TYPICAL PARAMETER SETS FOR TESTING
# ═══════════════════════════════════════════════════════════════════════════════

def get_default_params(discretization: Union[DiscretizationMode, str] =
                       DiscretizationMode.PARTIAL_TRUNCATION) -> HestonParams:
    """
    Reference scenario used across the test-suite.

    κ=1, θ=0.04, σ=0.4, ρ=-0.5, V₀=0.04: 20% volatility sitting at its
    long-run level, Feller ratio exactly 0.5.
    """
    with warnings.catch_warnings():
        warnings.simplefilter('ignore', UserWarning)
        return HestonParams(
            v0=0.04,
            kappa=1.0,
            theta=0.04,
            sigma=0.4,
            rho=-0.5,
            discretization=discretization,
        )


def get_feller_params(discretization: Union[DiscretizationMode, str] =
                      DiscretizationMode.FULL_TRUNCATION) -> HestonParams:
    """
    Equity-like parameters satisfying the Feller condition (2κθ/σ² ≈ 1.78).
    """
    return HestonParams(
        v0=0.04,
        kappa=2.0,    # Moderate mean reversion
        theta=0.04,   # 20% long-term volatility
        sigma=0.3,    # Moderate vol-of-vol
        rho=-0.7,     # Strong negative correlation (equity-like)
        discretization=discretization,
    )
