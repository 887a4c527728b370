"""
Generic Multi-Dimensional Stochastic Process

═══════════════════════════════════════════════════════════════════════════════
dx_t = μ(t, x_t) dt + σ(t, x_t) · dW_t
═══════════════════════════════════════════════════════════════════════════════

A process exposes its raw SDE coefficients:

   drift(t, x)      → μ,  shape (size,)
   diffusion(t, x)  → σ,  shape (size, factors)

and a discretization turns them into one-step moments over [t₀, t₀+Δt].
The Euler discretization uses:

   E[x_{t₀+Δt}]   ≈ apply(x₀, μ·Δt)
   StdDev         ≈ σ·√Δt
   Cov            ≈ σσᵀ·Δt

The default evolve() is then

   x₁ = apply(E[x₁], StdDev · dw),   dw ~ N(0, I_factors)

Processes with a better update (log-normal asset, clamped variance,
exact sampling) override apply() and evolve().

═══════════════════════════════════════════════════════════════════════════════
"""

from abc import ABC, abstractmethod

import numpy as np


class EulerDiscretization:
    """First-order moments from the SDE coefficients."""

    def drift(self, process: 'StochasticProcess', t0: float, x0, dt: float) -> np.ndarray:
        return process.drift(t0, x0) * dt

    def diffusion(self, process: 'StochasticProcess', t0: float, x0, dt: float) -> np.ndarray:
        return process.diffusion(t0, x0) * np.sqrt(dt)

    def covariance(self, process: 'StochasticProcess', t0: float, x0, dt: float) -> np.ndarray:
        sigma = process.diffusion(t0, x0)
        return sigma @ sigma.T * dt


class StochasticProcess(ABC):
    """
    Base class: subclasses provide size, initial_values, drift and
    diffusion; moments and a default evolve come from the discretization.
    """

    def __init__(self, discretization=None):
        self.discretization = discretization or EulerDiscretization()

    @abstractmethod
    def size(self) -> int:
        """Dimension of the state vector."""

    def factors(self) -> int:
        """Number of independent Brownian drivers."""
        return self.size()

    @abstractmethod
    def initial_values(self) -> np.ndarray:
        pass

    @abstractmethod
    def drift(self, t: float, x) -> np.ndarray:
        pass

    @abstractmethod
    def diffusion(self, t: float, x) -> np.ndarray:
        pass

    def expectation(self, t0: float, x0, dt: float) -> np.ndarray:
        return self.apply(x0, self.discretization.drift(self, t0, x0, dt))

    def std_deviation(self, t0: float, x0, dt: float) -> np.ndarray:
        return self.discretization.diffusion(self, t0, x0, dt)

    def covariance(self, t0: float, x0, dt: float) -> np.ndarray:
        return self.discretization.covariance(self, t0, x0, dt)

    def apply(self, x0, dx) -> np.ndarray:
        return np.asarray(x0, dtype=float) + np.asarray(dx, dtype=float)

    def evolve(self, t0: float, x0, dt: float, dw) -> np.ndarray:
        return self.apply(self.expectation(t0, x0, dt),
                          self.std_deviation(t0, x0, dt) @ np.asarray(dw, dtype=float))
