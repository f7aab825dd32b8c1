"""WGS84 geodetic helpers: LLA -> ECEF -> local East-North-Up (ROS-free)."""

from __future__ import annotations

import math
from typing import Final, Tuple

from .vehicle import SatelliteFix

Vector3 = Tuple[float, float, float]

WGS84_A: Final = 6378137.0
WGS84_F: Final = 1.0 / 298.257223563
WGS84_E_SQ: Final = WGS84_F * (2.0 - WGS84_F)

_LATITUDE_EPS: Final = 1e-14
_MAX_ITERATIONS: Final = 20


def _prime_vertical_radius(sin_lat: float) -> float:
    return WGS84_A / math.sqrt(1.0 - WGS84_E_SQ * sin_lat * sin_lat)


def geodetic_to_ecef(fix: SatelliteFix) -> Vector3:
    """Convert a latitude/longitude/altitude fix to Earth-centered coordinates."""

    lat = math.radians(fix.latitude)
    lon = math.radians(fix.longitude)
    sin_lat = math.sin(lat)
    cos_lat = math.cos(lat)
    n = _prime_vertical_radius(sin_lat)

    x = (fix.altitude + n) * cos_lat * math.cos(lon)
    y = (fix.altitude + n) * cos_lat * math.sin(lon)
    z = (fix.altitude + (1.0 - WGS84_E_SQ) * n) * sin_lat
    return (x, y, z)


def ecef_to_enu(ecef: Vector3, reference: SatelliteFix) -> Vector3:
    """Rotate an ECEF point into the tangent plane anchored at ``reference``."""

    lat = math.radians(reference.latitude)
    lon = math.radians(reference.longitude)
    sin_lat, cos_lat = math.sin(lat), math.cos(lat)
    sin_lon, cos_lon = math.sin(lon), math.cos(lon)

    x0, y0, z0 = geodetic_to_ecef(reference)
    xd = ecef[0] - x0
    yd = ecef[1] - y0
    zd = ecef[2] - z0

    east = -sin_lon * xd + cos_lon * yd
    north = -cos_lon * sin_lat * xd - sin_lat * sin_lon * yd + cos_lat * zd
    up = cos_lat * cos_lon * xd + cos_lat * sin_lon * yd + sin_lat * zd
    return (east, north, up)


def geodetic_to_enu(fix: SatelliteFix, reference: SatelliteFix) -> Vector3:
    return ecef_to_enu(geodetic_to_ecef(fix), reference)


def enu_to_ecef(enu: Vector3, reference: SatelliteFix) -> Vector3:
    """Inverse of :func:`ecef_to_enu` (transposed rotation plus reference origin)."""

    lat = math.radians(reference.latitude)
    lon = math.radians(reference.longitude)
    sin_lat, cos_lat = math.sin(lat), math.cos(lat)
    sin_lon, cos_lon = math.sin(lon), math.cos(lon)
    east, north, up = enu

    xd = -sin_lon * east - sin_lat * cos_lon * north + cos_lat * cos_lon * up
    yd = cos_lon * east - sin_lat * sin_lon * north + cos_lat * sin_lon * up
    zd = cos_lat * north + sin_lat * up

    x0, y0, z0 = geodetic_to_ecef(reference)
    return (x0 + xd, y0 + yd, z0 + zd)


def ecef_to_geodetic(ecef: Vector3) -> SatelliteFix:
    """Iterative ECEF -> latitude/longitude/altitude on the WGS84 ellipsoid."""

    x, y, z = ecef
    lon = math.atan2(y, x)
    p = math.hypot(x, y)
    if p < 1e-9:
        # On the polar axis latitude is +/-90 and altitude is measured along z.
        lat = math.copysign(math.pi / 2.0, z)
        b = WGS84_A * (1.0 - WGS84_F)
        return SatelliteFix(math.degrees(lat), math.degrees(lon), abs(z) - b)

    lat = math.atan2(z, p * (1.0 - WGS84_E_SQ))
    alt = 0.0
    for _ in range(_MAX_ITERATIONS):
        sin_lat = math.sin(lat)
        n = _prime_vertical_radius(sin_lat)
        alt = p / math.cos(lat) - n
        next_lat = math.atan2(z, p * (1.0 - WGS84_E_SQ * n / (n + alt)))
        converged = abs(next_lat - lat) < _LATITUDE_EPS
        lat = next_lat
        if converged:
            break
    n = _prime_vertical_radius(math.sin(lat))
    alt = p / math.cos(lat) - n
    return SatelliteFix(math.degrees(lat), math.degrees(lon), alt)


def enu_to_geodetic(enu: Vector3, reference: SatelliteFix) -> SatelliteFix:
    return ecef_to_geodetic(enu_to_ecef(enu, reference))


__all__ = [
    "WGS84_A",
    "WGS84_E_SQ",
    "geodetic_to_ecef",
    "ecef_to_enu",
    "geodetic_to_enu",
    "enu_to_ecef",
    "ecef_to_geodetic",
    "enu_to_geodetic",
]
