"""
Heston Process: SDE Coefficients and One-Step Evolution

═══════════════════════════════════════════════════════════════════════════════
STATE, COEFFICIENTS AND SCHEMES
═══════════════════════════════════════════════════════════════════════════════

State x = (S, V): asset level and instantaneous variance.

1. DRIFT (continuous time):
   ═══════════════════════════════════════════════════════════════════════════

   μ_S = r(t,t) - q(t,t) - ½·vol²
   μ_V = κ(θ - X)

   vol = √V            if V > 0
       = -√(-V)        if V ≤ 0 and REFLECTION (signed, squared downstream)
       = 0             otherwise

   X = V (PARTIAL_TRUNCATION), vol² otherwise

2. DIFFUSION (lower-triangular root of the covariance):
   ═══════════════════════════════════════════════════════════════════════════

   Correlation |1 ρ; ρ 1| has Cholesky factor |1 0; ρ √(1-ρ²)|.
   Scaled row-wise by vol and σ·vol:

   | vol          0            |
   | ρσ·vol       √(1-ρ²)σ·vol |

   Here the non-positive floor for vol is 1e-8, not 0, so the correlation
   structure survives at V ≤ 0.

3. ONE STEP OF LENGTH Δt (Lord, Koekkoek & van Dijk 2006):
   ═══════════════════════════════════════════════════════════════════════════

   μ  = r(t₀,t₀+Δt) - q(t₀,t₀+Δt) - ½·vol²
   S₁ = S₀·exp(μΔt + vol·dw₀·√Δt)

   PARTIAL_TRUNCATION  vol = √V⁺,  ν = κ(θ - V₀)
                       V₁ = V₀ + νΔt + σ·vol·√Δt(ρdw₀ + √(1-ρ²)dw₁)
   FULL_TRUNCATION     vol = √V⁺,  ν = κ(θ - vol²),  V₁ as above
   REFLECTION          vol = √|V|, ν = κ(θ - vol²)
                       V₁ = vol² + νΔt + σ·vol·√Δt(ρdw₀ + √(1-ρ²)dw₁)

4. EXACT VARIANCE (Broadie-Kaya sampling, Lewis decorrelation):
   ═══════════════════════════════════════════════════════════════════════════

   V₁ = σ²(1-e^{-κΔt})/(4κ) · F⁻¹_{d,λ}(Φ(dw₁))

   With y = ln S - (ρ/σ)V, Itô gives a y-dynamics free of dW_V:

   Δy = (μ - (ρ/σ)κ(θ - vol²))Δt + vol·√(1-ρ²)·dw₀·√Δt
   S₁ = S₀·exp(Δy + (ρ/σ)(V₁ - V₀))

═══════════════════════════════════════════════════════════════════════════════
"""

import warnings
from typing import Callable, Dict, Optional, Tuple

import numpy as np

from heston_process.backend.core.distributions import (
    CumulativeNormalDistribution,
    InverseNonCentralChiSquare,
)
from heston_process.backend.core.parameters import DiscretizationMode, HestonParams
from heston_process.backend.processes.base import EulerDiscretization, StochasticProcess


# Machine epsilon, keeps Φ(dw₁) strictly inside the quantile's domain
MACHINE_EPSILON = np.finfo(float).eps

# Volatility floor in diffusion() for V ≤ 0
DIFFUSION_VOL_FLOOR = 1e-8


# (process, t0, S, V, dt, dw0, dw1) -> (S1, V1)
SchemeFn = Callable[..., Tuple]

_SCHEMES: Dict[DiscretizationMode, SchemeFn] = {}


def _scheme(mode: DiscretizationMode):
    def register(fn: SchemeFn) -> SchemeFn:
        _SCHEMES[mode] = fn
        return fn
    return register


def _truncated_vol(v):
    """√V⁺"""
    return np.sqrt(np.where(v > 0.0, v, 0.0))


def _correlated_shock(rho: float, dw0, dw1):
    return rho * dw0 + np.sqrt(1.0 - rho * rho) * dw1


# ═══════════════════════════════════════════════════════════════════════════════
# SCHEMES
# ═══════════════════════════════════════════════════════════════════════════════

@_scheme(DiscretizationMode.PARTIAL_TRUNCATION)
def _partial_truncation(process, t0, s, v, dt, dw0, dw1):
    p = process.p
    sdt = np.sqrt(dt)
    vol = _truncated_vol(v)
    mu = process.period_rate(t0, dt) - 0.5 * vol * vol
    nu = p.kappa * (p.theta - v)

    s1 = s * np.exp(mu * dt + vol * dw0 * sdt)
    v1 = v + nu * dt + p.sigma * vol * sdt * _correlated_shock(p.rho, dw0, dw1)
    return s1, v1


@_scheme(DiscretizationMode.FULL_TRUNCATION)
def _full_truncation(process, t0, s, v, dt, dw0, dw1):
    p = process.p
    sdt = np.sqrt(dt)
    vol = _truncated_vol(v)
    mu = process.period_rate(t0, dt) - 0.5 * vol * vol
    nu = p.kappa * (p.theta - vol * vol)

    s1 = s * np.exp(mu * dt + vol * dw0 * sdt)
    v1 = v + nu * dt + p.sigma * vol * sdt * _correlated_shock(p.rho, dw0, dw1)
    return s1, v1


@_scheme(DiscretizationMode.REFLECTION)
def _reflection(process, t0, s, v, dt, dw0, dw1):
    p = process.p
    sdt = np.sqrt(dt)
    vol = np.sqrt(np.abs(v))
    mu = process.period_rate(t0, dt) - 0.5 * vol * vol
    nu = p.kappa * (p.theta - vol * vol)

    s1 = s * np.exp(mu * dt + vol * dw0 * sdt)
    # Starts from |V₀| = vol², not from the signed V₀
    v1 = vol * vol + nu * dt + p.sigma * vol * sdt * _correlated_shock(p.rho, dw0, dw1)
    return s1, v1


@_scheme(DiscretizationMode.EXACT_VARIANCE)
def _exact_variance(process, t0, s, v, dt, dw0, dw1):
    if dt == 0.0:
        # Zero-length transition; the χ² scaling below is 0/0
        return s, v

    p = process.p
    sdt = np.sqrt(dt)
    sqrhov = np.sqrt(1.0 - p.rho * p.rho)
    vol = _truncated_vol(v)
    mu = process.period_rate(t0, dt) - 0.5 * vol * vol

    sigma2 = p.sigma * p.sigma
    ekdt = np.exp(-p.kappa * dt)
    df = 4.0 * p.theta * p.kappa / sigma2
    ncp = 4.0 * p.kappa * ekdt / (sigma2 * (1.0 - ekdt)) * v

    prob = process.normal_cdf(dw1)
    prob = np.where(prob < 0.0, 0.0,
                    np.where(prob >= 1.0, 1.0 - MACHINE_EPSILON, prob))

    v1 = sigma2 * (1.0 - ekdt) / (4.0 * p.kappa) * process.chi2_quantile(df, ncp, prob)

    dy = ((mu - p.rho / p.sigma * p.kappa * (p.theta - vol * vol)) * dt
          + vol * sqrhov * dw0 * sdt)
    s1 = s * np.exp(dy + p.rho / p.sigma * (v1 - v))
    return s1, v1


# ═══════════════════════════════════════════════════════════════════════════════
# PROCESS
# ═══════════════════════════════════════════════════════════════════════════════

class HestonProcess(StochasticProcess):
    """
    Two-factor Heston process driven by forward-rate curves and a spot quote.

    The curves and the quote are held by reference and read on every call;
    nothing derived from them is cached.

    Args:
        risk_free_rate: ForwardRateSource for r (also defines the time axis)
        dividend_yield: ForwardRateSource for q
        s0: SpotObservable for the asset level
        v0, kappa, theta, sigma, rho: Heston constants
        discretization: DiscretizationMode (or its name) used by evolve()
        normal_cdf: Φ used by EXACT_VARIANCE (default: standard normal CDF)
        inverse_chi2: factory (df, ncp, max_evaluations) → quantile callable
        max_evaluations: CDF evaluation budget of the χ² quantile search
    """

    def __init__(self, risk_free_rate, dividend_yield, s0,
                 v0: float, kappa: float, theta: float, sigma: float, rho: float,
                 discretization=DiscretizationMode.FULL_TRUNCATION,
                 *,
                 normal_cdf: Optional[Callable] = None,
                 inverse_chi2: Callable = InverseNonCentralChiSquare,
                 max_evaluations: int = 100):
        super().__init__(EulerDiscretization())
        self._risk_free_rate = risk_free_rate
        self._dividend_yield = dividend_yield
        self._s0 = s0
        self.p = HestonParams(v0=v0, kappa=kappa, theta=theta, sigma=sigma,
                              rho=rho, discretization=discretization)
        self.normal_cdf = normal_cdf or CumulativeNormalDistribution()
        self.inverse_chi2 = inverse_chi2
        self.max_evaluations = max_evaluations

    @classmethod
    def from_params(cls, risk_free_rate, dividend_yield, s0, params: HestonParams,
                    **kwargs) -> 'HestonProcess':
        """Build from an existing HestonParams; its Feller diagnostic has already run."""
        with warnings.catch_warnings():
            warnings.simplefilter('ignore', UserWarning)
            return cls(risk_free_rate, dividend_yield, s0,
                       params.v0, params.kappa, params.theta, params.sigma, params.rho,
                       params.discretization, **kwargs)

    # ═══════════════════════════════════════════════════════════════════════
    # Accessors
    # ═══════════════════════════════════════════════════════════════════════

    @property
    def params(self) -> HestonParams:
        return self.p

    @property
    def discretization_mode(self) -> DiscretizationMode:
        return self.p.discretization

    def s0(self):
        return self._s0

    spot = s0

    def dividend_yield(self):
        return self._dividend_yield

    def risk_free_rate(self):
        return self._risk_free_rate

    def v0(self) -> float:
        return self.p.v0

    def kappa(self) -> float:
        return self.p.kappa

    def theta(self) -> float:
        return self.p.theta

    def sigma(self) -> float:
        return self.p.sigma

    def rho(self) -> float:
        return self.p.rho

    def time(self, date) -> float:
        """Year fraction from the risk-free curve's reference date to date."""
        curve = self._risk_free_rate
        return curve.day_counter().year_fraction(curve.reference_date(), date)

    # ═══════════════════════════════════════════════════════════════════════
    # SDE coefficients
    # ═══════════════════════════════════════════════════════════════════════

    def size(self) -> int:
        return 2

    def initial_values(self) -> np.ndarray:
        return np.array([self._s0.value(), self.p.v0], dtype=float)

    def period_rate(self, t0: float, dt: float) -> float:
        """r(t₀, t₀+Δt) - q(t₀, t₀+Δt), continuously compounded."""
        t1 = t0 + dt
        return (self._risk_free_rate.forward_rate(t0, t1)
                - self._dividend_yield.forward_rate(t0, t1))

    def _signed_vol(self, v, floor: float):
        reflected = -np.sqrt(np.abs(v)) \
            if self.p.discretization is DiscretizationMode.REFLECTION else floor
        return np.where(v > 0.0, np.sqrt(np.abs(v)), reflected)

    def drift(self, t: float, x) -> np.ndarray:
        v = np.asarray(x, dtype=float)[1]
        vol = self._signed_vol(v, 0.0)

        asset = self.period_rate(t, 0.0) - 0.5 * vol * vol
        if self.p.discretization is DiscretizationMode.PARTIAL_TRUNCATION:
            variance = self.p.kappa * (self.p.theta - v)
        else:
            variance = self.p.kappa * (self.p.theta - vol * vol)
        return np.array([asset, variance], dtype=float)

    def diffusion(self, t: float, x) -> np.ndarray:
        v = np.asarray(x, dtype=float)[1]
        vol = self._signed_vol(v, DIFFUSION_VOL_FLOOR)
        sigma2 = self.p.sigma * vol
        sqrhov = np.sqrt(1.0 - self.p.rho * self.p.rho)

        return np.array([[vol, np.zeros_like(vol)],
                         [self.p.rho * sigma2, sqrhov * sigma2]], dtype=float)

    def apply(self, x0, dx) -> np.ndarray:
        """Asset composes multiplicatively (log increment), variance additively."""
        x0 = np.asarray(x0, dtype=float)
        dx = np.asarray(dx, dtype=float)
        return np.array([x0[0] * np.exp(dx[0]), x0[1] + dx[1]], dtype=float)

    # ═══════════════════════════════════════════════════════════════════════
    # Evolution
    # ═══════════════════════════════════════════════════════════════════════

    def chi2_quantile(self, df: float, ncp, prob):
        """F⁻¹_{df,ncp}(prob), element-wise when ncp/prob are arrays."""
        if np.ndim(ncp) == 0 and np.ndim(prob) == 0:
            return self.inverse_chi2(df, float(ncp), self.max_evaluations)(float(prob))

        def one(n, q):
            return self.inverse_chi2(df, n, self.max_evaluations)(q)

        return np.vectorize(one, otypes=[float])(ncp, prob)

    def evolve(self, t0: float, x0, dt: float, dw) -> np.ndarray:
        """
        Advance the state by one step of length dt.

        Args:
            t0: Start time (year fraction on the risk-free curve's axis)
            x0: State (S, V); components may be arrays of equal length
            dt: Step length
            dw: Two independent standard normals (dw₀, dw₁)

        Returns:
            New state array (S₁, V₁)
        """
        scheme = _SCHEMES.get(self.p.discretization)
        if scheme is None:
            raise ValueError("unknown discretization schema")

        s, v = np.asarray(x0, dtype=float)
        dw0, dw1 = np.asarray(dw, dtype=float)
        s1, v1 = scheme(self, t0, s, v, dt, dw0, dw1)
        return np.array([s1, v1], dtype=float)

    def __repr__(self) -> str:
        return (
            f"HestonProcess(v0={self.p.v0}, kappa={self.p.kappa}, "
            f"theta={self.p.theta}, sigma={self.p.sigma}, rho={self.p.rho}, "
            f"discretization={self.p.discretization.value})"
        )
