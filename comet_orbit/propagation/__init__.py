"""
Comet Propagation Package
=========================

Provides the RK4 integrator and the trajectory generator built on it.
"""

from .integrator import rk4_step, propagate_state
from .propagator import TrajectoryGenerator, auto_day_range

__all__ = ['rk4_step', 'propagate_state', 'TrajectoryGenerator', 'auto_day_range']
