"""
Geodesic helpers on a spherical Earth.
"""

from math import radians, cos, sin, atan2, degrees, sqrt

from ..exceptions import ValidationError

EARTH_RADIUS_KM = 6371


def validate_coordinates(lat: float, lon: float) -> None:
    """Raise ValidationError for coordinates outside the valid lat/lon ranges."""
    if not -90 <= lat <= 90:
        raise ValidationError(f"Latitude {lat} outside [-90, 90]")
    if not -180 <= lon <= 180:
        raise ValidationError(f"Longitude {lon} outside [-180, 180]")


def haversine_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """
    Calculate the great circle distance between two points on earth in kilometers.
    """
    dlat = radians(lat2 - lat1)
    dlon = radians(lon2 - lon1)
    
    a = sin(dlat / 2) * sin(dlat / 2) + \
        cos(radians(lat1)) * cos(radians(lat2)) * sin(dlon / 2) * sin(dlon / 2)
    c = 2 * atan2(sqrt(a), sqrt(1 - a))
    
    return EARTH_RADIUS_KM * c


def calculate_bearing(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """
    Calculate the initial compass bearing from point 1 to point 2 in degrees (0-360).
    """
    lat1, lon1, lat2, lon2 = map(radians, [lat1, lon1, lat2, lon2])
    
    dlon = lon2 - lon1
    y = sin(dlon) * cos(lat2)
    x = cos(lat1) * sin(lat2) - sin(lat1) * cos(lat2) * cos(dlon)
    
    bearing = degrees(atan2(y, x))
    return (bearing + 360) % 360


def calculate_gradient(distance_m: float, elevation_change_m: float) -> float:
    """
    Calculate gradient as a percentage.
    """
    if distance_m == 0:
        return 0
    return (elevation_change_m / distance_m) * 100
