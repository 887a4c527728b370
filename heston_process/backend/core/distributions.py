"""
Distributions used by the exact-variance scheme

═══════════════════════════════════════════════════════════════════════════════
TRANSITION LAW OF THE CIR VARIANCE
═══════════════════════════════════════════════════════════════════════════════

Conditional on V_t, the variance after a step Δt is a scaled noncentral χ²:

   V_{t+Δt} = c · X,     X ~ χ'²(d, λ)

   c = σ²(1 - e^{-κΔt}) / (4κ)
   d = 4κθ / σ²                              (degrees of freedom)
   λ = 4κ e^{-κΔt} V_t / (σ²(1 - e^{-κΔt}))   (noncentrality)

Sampling by inversion: U = Φ(Z) with Z ~ N(0,1), then X = F⁻¹_{d,λ}(U).

F⁻¹ has no closed form. It is found by root search on F(x) - U:

   1. Start from the mean d + λ
   2. Double the upper bound until F(upper) ≥ U
   3. Halve the lower bound until F(lower) ≤ U
   4. Brent's method on [lower, upper]

Every CDF evaluation, in the bracketing and inside brentq, counts against
one budget (100 by default); a call never evaluates F more often than that.
When the budget runs out the quantile saturates rather than failing:

   - during bracketing: the bound reached
   - with no room left for a Brent iteration: the bracket midpoint
   - during Brent: the last iterate

Saturation is what keeps U → 1 finite.

═══════════════════════════════════════════════════════════════════════════════
"""

import numpy as np
from scipy.optimize import brentq
from scipy.stats import ncx2, norm


class CumulativeNormalDistribution:
    """Φ((x - average)/sigma)"""

    def __init__(self, average: float = 0.0, sigma: float = 1.0):
        if sigma <= 0.0:
            raise ValueError(f"sigma must be greater than 0.0 ({sigma} not allowed)")
        self.average = average
        self.sigma = sigma

    def __call__(self, x):
        return norm.cdf(x, loc=self.average, scale=self.sigma)


class InverseNonCentralChiSquare:
    """
    Quantile function of the noncentral χ² distribution.

    Args:
        df: Degrees of freedom d > 0
        ncp: Noncentrality λ ≥ 0
        max_evaluations: Budget of CDF evaluations (bracketing + Brent, end points included)
        accuracy: Absolute x-tolerance handed to brentq
    """

    def __init__(self, df: float, ncp: float, max_evaluations: int = 100,
                 accuracy: float = 1e-8):
        if max_evaluations < 1:
            raise ValueError("max_evaluations must be positive")
        self.df = df
        self.ncp = ncp
        self.max_evaluations = max_evaluations
        self.accuracy = accuracy

    def cdf(self, x: float) -> float:
        return float(ncx2.cdf(x, self.df, self.ncp))

    def __call__(self, p: float) -> float:
        if p <= 0.0:
            return 0.0

        evaluations = 0

        def f(x):
            nonlocal evaluations
            evaluations += 1
            return self.cdf(x) - p

        # ═══════════════════════════════════════════════════════════════════
        # BRACKET THE ROOT
        # ═══════════════════════════════════════════════════════════════════

        guess = self.df + self.ncp
        if not guess > 0.0:
            guess = 1.0

        upper = guess
        f_upper = f(upper)
        while f_upper < 0.0:
            if evaluations >= self.max_evaluations:
                return upper
            upper *= 2.0
            f_upper = f(upper)
        if f_upper == 0.0:
            return upper

        lower = upper * 0.5
        if upper == guess:
            # Otherwise lower is the previous upper, already below p
            if evaluations >= self.max_evaluations:
                return upper
            f_lower = f(lower)
            while f_lower > 0.0:
                if evaluations >= self.max_evaluations:
                    return lower
                lower *= 0.5
                f_lower = f(lower)
            if f_lower == 0.0:
                return lower

        # ═══════════════════════════════════════════════════════════════════
        # BRENT
        # ═══════════════════════════════════════════════════════════════════
        #
        # brentq re-evaluates both end points, then spends one evaluation
        # per iteration. Without room for an iteration the bracket midpoint
        # is the best estimate.
        # ═══════════════════════════════════════════════════════════════════

        iterations = self.max_evaluations - evaluations - 2
        if iterations < 1:
            return 0.5 * (lower + upper)

        # disp=False: the last iterate is returned when iterations run out
        return brentq(f, lower, upper, xtol=self.accuracy,
                      maxiter=iterations, disp=False)

    def quantile(self, p):
        """Vectorised form of __call__ for arrays of probabilities."""
        if np.ndim(p) == 0:
            return self(float(p))
        return np.vectorize(self.__call__, otypes=[float])(p)
