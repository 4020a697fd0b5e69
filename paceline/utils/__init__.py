"""Geodesic, unit and time helpers."""

from .geo import haversine_distance, calculate_bearing, calculate_gradient
from .units import UnitConverter, round_half_up

__all__ = ['haversine_distance', 'calculate_bearing', 'calculate_gradient', 'UnitConverter', 'round_half_up']
