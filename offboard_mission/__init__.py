"""Offboard mission package exposing the ROS node and core logic."""

from .core import (
    MissionConfig,
    MissionConfigError,
    MissionController,
    MissionPhase,
    Waypoint,
    load_mission,
    mission_from_params,
)

__all__ = [
    "MissionController",
    "MissionConfig",
    "MissionConfigError",
    "MissionPhase",
    "Waypoint",
    "load_mission",
    "mission_from_params",
]
