"""Immutable telemetry values and the cache the control loop polls (ROS-free)."""

from __future__ import annotations

import threading
from dataclasses import dataclass, replace
from typing import Optional, Tuple

# MAVLink MAV_STATE values reported in mavros_msgs/State.system_status
MAV_STATE_STANDBY = 3


@dataclass(frozen=True)
class VehicleState:
    connected: bool = False
    armed: bool = False
    mode: str = ""
    system_status: int = 0


@dataclass(frozen=True)
class Odometry:
    """Local-frame pose (ENU, meters) with heading in radians."""

    x: float
    y: float
    z: float
    yaw: float = 0.0

    @property
    def position(self) -> Tuple[float, float, float]:
        return (self.x, self.y, self.z)


@dataclass(frozen=True)
class SatelliteFix:
    latitude: float  # deg
    longitude: float  # deg
    altitude: float  # m, ellipsoidal


@dataclass(frozen=True)
class TelemetrySnapshot:
    state: VehicleState = VehicleState()
    odometry: Optional[Odometry] = None
    fix: Optional[SatelliteFix] = None

    @property
    def fix_received(self) -> bool:
        return self.fix is not None

    def in_mode(self, mode: str) -> bool:
        return self.state.mode == mode


class TelemetryCache:
    """Last-value-wins store; each update swaps one frozen snapshot under a lock.

    Writers run on transport threads, the control loop calls :meth:`snapshot`
    once per tick and works on that value for the whole tick.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._snapshot = TelemetrySnapshot()

    def update_state(self, state: VehicleState) -> None:
        with self._lock:
            self._snapshot = replace(self._snapshot, state=state)

    def update_odometry(self, odometry: Odometry) -> None:
        with self._lock:
            self._snapshot = replace(self._snapshot, odometry=odometry)

    def update_fix(self, fix: SatelliteFix) -> None:
        with self._lock:
            self._snapshot = replace(self._snapshot, fix=fix)

    def snapshot(self) -> TelemetrySnapshot:
        with self._lock:
            return self._snapshot


__all__ = [
    "MAV_STATE_STANDBY",
    "VehicleState",
    "Odometry",
    "SatelliteFix",
    "TelemetrySnapshot",
    "TelemetryCache",
]
