"""Core mission logic (ROS-agnostic)."""

from .controller import MissionController
from .fsm import MissionPhase
from .home import CalibrationError, HomeFrame, HomeFrameCalibrator
from .plan import (
    GeoWaypoint,
    MissionConfig,
    MissionConfigError,
    Waypoint,
    load_mission,
    mission_from_params,
)
from .vehicle import Odometry, SatelliteFix, TelemetryCache, TelemetrySnapshot, VehicleState

__all__ = [
    "MissionController",
    "MissionPhase",
    "MissionConfig",
    "MissionConfigError",
    "Waypoint",
    "GeoWaypoint",
    "load_mission",
    "mission_from_params",
    "CalibrationError",
    "HomeFrame",
    "HomeFrameCalibrator",
    "Odometry",
    "SatelliteFix",
    "TelemetryCache",
    "TelemetrySnapshot",
    "VehicleState",
]
