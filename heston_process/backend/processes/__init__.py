"""
Stochastic Processes

- StochasticProcess / EulerDiscretization: generic SDE interface
- HestonProcess: drift, diffusion and one-step evolution of (S, V)
"""

from .base import EulerDiscretization, StochasticProcess
from .heston import HestonProcess

__all__ = [
    'EulerDiscretization',
    'StochasticProcess',
    'HestonProcess',
]
