"""
Orbital curve math.

Sphere and consolidated-torus invariants, tick-to-reserves conversions and
the Newton-Raphson swap-step solver.
"""
from .fixed_point import (
    Q128,
    WAD,
    mul_div,
    mul_div_rounding_up,
    to_int_floor,
    to_int_ceil,
)
from .orbital_math import OrbitalMath, SwapStep

__all__ = [
    "Q128",
    "WAD",
    "mul_div",
    "mul_div_rounding_up",
    "to_int_floor",
    "to_int_ceil",
    "OrbitalMath",
    "SwapStep",
]
