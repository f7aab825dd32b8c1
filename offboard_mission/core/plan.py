"""Mission configuration: parameters, waypoints and YAML mission files."""

from __future__ import annotations

import math
import pathlib
from dataclasses import dataclass, fields
from typing import Any, Dict, Mapping, Optional, Sequence, Tuple, Union

import yaml

from .home import HomeFrame
from .vehicle import MAV_STATE_STANDBY, SatelliteFix


class MissionConfigError(RuntimeError):
    """Raised when mission parameters or the mission file are invalid."""


@dataclass(frozen=True)
class Waypoint:
    x: float
    y: float
    z: float

    @property
    def position(self) -> Tuple[float, float, float]:
        return (self.x, self.y, self.z)


@dataclass(frozen=True)
class GeoWaypoint:
    """Waypoint given as a satellite position; resolved once the home frame exists."""

    latitude: float
    longitude: float
    altitude: float

    def as_fix(self) -> SatelliteFix:
        return SatelliteFix(self.latitude, self.longitude, self.altitude)


AnyWaypoint = Union[Waypoint, GeoWaypoint]


@dataclass(frozen=True)
class MissionConfig:
    waypoints: Tuple[AnyWaypoint, ...] = ()
    simulation_mode: bool = False
    delivery_mode: bool = False
    return_home_mode: bool = False
    waypoint_tolerance_m: float = 0.5
    landing_tolerance_m: float = 0.3
    takeoff_altitude_m: float = 5.0
    delivery_altitude_m: float = 1.0
    takeoff_hover_s: float = 5.0
    hover_s: float = 5.0
    unpack_s: float = 5.0
    cruise_speed_mps: float = 1.0
    approach_speed_mps: float = 0.3
    approach_radius_m: float = 3.0
    landing_speed_mps: float = 0.5
    return_speed_mps: float = 1.0
    yaw_rate_rad: float = 0.1
    yaw_hold_threshold_rad: float = 0.2
    calibration_samples: int = 100
    stream_setpoints: int = 50
    control_rate_hz: float = 10.0
    offboard_mode: str = "OFFBOARD"
    land_mode: str = "AUTO.LAND"
    landed_system_status: int = MAV_STATE_STANDBY
    publish_odom_snapshot: bool = False


_POSITIVE_FIELDS = (
    "waypoint_tolerance_m",
    "landing_tolerance_m",
    "cruise_speed_mps",
    "approach_speed_mps",
    "landing_speed_mps",
    "return_speed_mps",
    "yaw_rate_rad",
    "yaw_hold_threshold_rad",
    "control_rate_hz",
)
_NON_NEGATIVE_FIELDS = (
    "takeoff_hover_s",
    "hover_s",
    "unpack_s",
    "approach_radius_m",
)
_WAYPOINT_ARRAYS = ("waypoints_x", "waypoints_y", "waypoints_z")


def mission_from_params(params: Mapping[str, Any]) -> MissionConfig:
    """Build and validate a :class:`MissionConfig` from a flat parameter mapping.

    Waypoints come either from a ``waypoints`` list or from the parallel
    ``waypoints_x``/``waypoints_y``/``waypoints_z`` arrays used by ROS params.
    Unknown keys are ignored so node-level parameters can share the mapping.
    """

    values: Dict[str, Any] = {}
    for item in fields(MissionConfig):
        if item.name == "waypoints" or item.name not in params:
            continue
        values[item.name] = _coerce(params, item.name, item.default)

    if params.get("waypoints") is not None:
        values["waypoints"] = _parse_waypoint_list(params["waypoints"])
    else:
        values["waypoints"] = _parse_waypoint_arrays(params)

    config = MissionConfig(**values)
    validate_config(config)
    return config


def validate_config(config: MissionConfig) -> None:
    if not config.waypoints:
        raise MissionConfigError("Mission requires at least one waypoint")
    for name in _POSITIVE_FIELDS:
        value = getattr(config, name)
        if not math.isfinite(value) or value <= 0.0:
            raise MissionConfigError(f"Mission parameter '{name}' must be positive, got {value!r}")
    for name in _NON_NEGATIVE_FIELDS:
        value = getattr(config, name)
        if not math.isfinite(value) or value < 0.0:
            raise MissionConfigError(f"Mission parameter '{name}' must be >= 0, got {value!r}")
    if config.calibration_samples <= 0:
        raise MissionConfigError("Mission parameter 'calibration_samples' must be positive")
    if config.stream_setpoints < 0:
        raise MissionConfigError("Mission parameter 'stream_setpoints' must be >= 0")
    if not config.offboard_mode or not config.land_mode:
        raise MissionConfigError("Mode names 'offboard_mode' and 'land_mode' cannot be empty")


def load_mission(path: pathlib.Path, overrides: Optional[Mapping[str, Any]] = None) -> MissionConfig:
    """Load a YAML mission file; its keys take precedence over ``overrides``."""

    try:
        data = yaml.safe_load(path.read_text()) or {}
    except FileNotFoundError as exc:
        raise MissionConfigError(f"Mission file not found: {path}") from exc
    except yaml.YAMLError as exc:
        raise MissionConfigError(f"Mission file {path} is not valid YAML: {exc}") from exc
    if not isinstance(data, dict):
        raise MissionConfigError("Mission file must contain a mapping")
    version = data.get("api_version", 1)
    if version != 1:
        raise MissionConfigError("Mission 'api_version' must be 1")

    merged: Dict[str, Any] = dict(overrides or {})
    if "waypoints" in data:
        for key in _WAYPOINT_ARRAYS:
            merged.pop(key, None)
    merged.update({k: v for k, v in data.items() if k != "api_version"})
    return mission_from_params(merged)


def resolve_waypoints(waypoints: Sequence[AnyWaypoint], home: HomeFrame) -> Tuple[Waypoint, ...]:
    """Convert geodetic waypoints into the odometry frame through the home frame."""

    resolved = []
    for wp in waypoints:
        if isinstance(wp, GeoWaypoint):
            x, y, z = home.to_local(wp.as_fix())
            resolved.append(Waypoint(x, y, z))
        else:
            resolved.append(wp)
    return tuple(resolved)


# ---------------------------------------------------------------------------
# Parsing helpers
# ---------------------------------------------------------------------------

def _coerce(container: Mapping[str, Any], key: str, default: Any) -> Any:
    value = container[key]
    try:
        if isinstance(default, bool):
            if isinstance(value, str):
                return value.strip().lower() in ("1", "true", "yes", "on")
            return bool(value)
        if isinstance(default, int):
            return int(value)
        if isinstance(default, float):
            return float(value)
        return str(value)
    except (TypeError, ValueError) as exc:
        raise MissionConfigError(f"Mission parameter '{key}' has invalid value {value!r}") from exc


def _parse_waypoint_arrays(params: Mapping[str, Any]) -> Tuple[Waypoint, ...]:
    arrays = [params.get(key) or [] for key in _WAYPOINT_ARRAYS]
    lengths = {len(values) for values in arrays}
    if len(lengths) != 1:
        raise MissionConfigError(
            "Waypoint arrays waypoints_x/y/z must have the same length, got "
            + "/".join(str(len(values)) for values in arrays)
        )
    waypoints = []
    for idx, (x, y, z) in enumerate(zip(*arrays)):
        waypoints.append(_local_waypoint((x, y, z), idx))
    return tuple(waypoints)


def _parse_waypoint_list(raw: Any) -> Tuple[AnyWaypoint, ...]:
    if not isinstance(raw, (list, tuple)):
        raise MissionConfigError("Mission 'waypoints' must be a list")
    waypoints = []
    for idx, entry in enumerate(raw):
        if isinstance(entry, dict):
            if "latitude" in entry or "longitude" in entry:
                waypoints.append(_geo_waypoint(entry, idx))
            else:
                waypoints.append(_local_waypoint((entry.get("x"), entry.get("y"), entry.get("z")), idx))
        elif isinstance(entry, (list, tuple)) and len(entry) == 3:
            waypoints.append(_local_waypoint(entry, idx))
        else:
            raise MissionConfigError(f"Waypoint #{idx} must be [x, y, z] or a mapping, got: {entry!r}")
    return tuple(waypoints)


def _local_waypoint(values: Sequence[Any], idx: int) -> Waypoint:
    try:
        x, y, z = (float(v) for v in values)
    except (TypeError, ValueError) as exc:
        raise MissionConfigError(f"Waypoint #{idx} contains non numeric values: {list(values)!r}") from exc
    if not all(math.isfinite(v) for v in (x, y, z)):
        raise MissionConfigError(f"Waypoint #{idx} contains non finite values")
    return Waypoint(x, y, z)


def _geo_waypoint(entry: Mapping[str, Any], idx: int) -> GeoWaypoint:
    try:
        lat = float(entry["latitude"])
        lon = float(entry["longitude"])
        alt = float(entry.get("altitude", 0.0))
    except (KeyError, TypeError, ValueError) as exc:
        raise MissionConfigError(f"Waypoint #{idx} needs numeric latitude/longitude/altitude") from exc
    if not -90.0 <= lat <= 90.0 or not -180.0 <= lon <= 180.0:
        raise MissionConfigError(f"Waypoint #{idx} latitude/longitude out of range: ({lat}, {lon})")
    return GeoWaypoint(lat, lon, alt)


__all__ = [
    "MissionConfigError",
    "Waypoint",
    "GeoWaypoint",
    "MissionConfig",
    "mission_from_params",
    "validate_config",
    "load_mission",
    "resolve_waypoints",
]
