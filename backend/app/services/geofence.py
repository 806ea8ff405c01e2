"""
Géorepérage du campus : distance orthodromique (haversine) au centre du campus.

Fonctions pures. Les coordonnées sont validées en amont (schéma Location) :
aucune valeur NaN ou hors plage n'arrive ici.
"""

import math

EARTH_RADIUS_METERS = 6_371_000.0


def haversine_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Distance en mètres entre deux points GPS (rayon terrestre moyen)."""
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    delta_phi = math.radians(lat2 - lat1)
    delta_lambda = math.radians(lon2 - lon1)

    a = (
        math.sin(delta_phi / 2) ** 2
        + math.cos(phi1) * math.cos(phi2) * math.sin(delta_lambda / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_METERS * c


class GeofenceValidator:
    """Cercle de rayon `radius_meters` autour du centre du campus."""

    def __init__(self, center_latitude: float, center_longitude: float, radius_meters: float = 500.0):
        self.center_latitude = center_latitude
        self.center_longitude = center_longitude
        self.radius_meters = radius_meters

    def distance_from_center(self, latitude: float, longitude: float) -> float:
        return haversine_distance(self.center_latitude, self.center_longitude, latitude, longitude)

    def is_within_campus(self, latitude: float, longitude: float) -> bool:
        return self.distance_from_center(latitude, longitude) <= self.radius_meters
