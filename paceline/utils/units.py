"""
Unit conversion utilities for PaceLine.
Engine arithmetic runs in miles and feet; metric values are presentation only.
"""

import math
from typing import Optional


class UnitConverter:
    """Handles unit conversions between metric and imperial systems."""
    
    KM_TO_MILES = 0.621371
    MILES_TO_KM = 1.60934
    METERS_TO_FEET = 3.28084
    FEET_TO_METERS = 0.3048
    MILES_TO_FEET = 5280
    MPS_TO_MPH = 2.237
    
    @staticmethod
    def km_to_miles(km: Optional[float]) -> Optional[float]:
        """Convert kilometers to miles."""
        return km * UnitConverter.KM_TO_MILES if km is not None else None
    
    @staticmethod
    def miles_to_km(miles: Optional[float]) -> Optional[float]:
        """Convert miles to kilometers."""
        return miles * UnitConverter.MILES_TO_KM if miles is not None else None
    
    @staticmethod
    def meters_to_feet(meters: Optional[float]) -> Optional[float]:
        """Convert meters to feet."""
        return meters * UnitConverter.METERS_TO_FEET if meters is not None else None
    
    @staticmethod
    def feet_to_meters(feet: Optional[float]) -> Optional[float]:
        """Convert feet to meters."""
        return feet * UnitConverter.FEET_TO_METERS if feet is not None else None
    
    @staticmethod
    def miles_to_feet(miles: float) -> float:
        return miles * UnitConverter.MILES_TO_FEET
    
    @staticmethod
    def mps_to_mph(mps: float) -> float:
        """Convert meters per second to miles per hour."""
        return mps * UnitConverter.MPS_TO_MPH
    
    @staticmethod
    def format_distance(distance_miles: Optional[float], metric: bool = False) -> str:
        """Format a distance held in miles."""
        if distance_miles is None:
            return "N/A"
        if metric:
            return f"{UnitConverter.miles_to_km(distance_miles):.1f} km"
        return f"{distance_miles:.1f} mi"
    
    @staticmethod
    def format_elevation(elevation_ft: Optional[float], metric: bool = False) -> str:
        """Format an elevation held in feet."""
        if elevation_ft is None:
            return "N/A"
        if metric:
            return f"{round(UnitConverter.feet_to_meters(elevation_ft)):,} m"
        return f"{round(elevation_ft):,} ft"
    
    @staticmethod
    def format_speed(speed_mph: Optional[float], metric: bool = False) -> str:
        """Format a speed held in mph."""
        if speed_mph is None:
            return "N/A"
        if metric:
            return f"{speed_mph * UnitConverter.MILES_TO_KM:.1f} km/h"
        return f"{speed_mph:.1f} mph"


def round_half_up(value: float, ndigits: int = 0) -> float:
    """Round halves toward positive infinity, independent of float banking rules."""
    factor = 10 ** ndigits
    return math.floor(value * factor + 0.5) / factor
