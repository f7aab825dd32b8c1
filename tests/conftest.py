"""Shared fakes: a simulated clock, a scripted MAVROS link and a kinematic vehicle."""

from __future__ import annotations

import math
import sys
from dataclasses import replace
from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.append(str(PROJECT_ROOT))

from offboard_mission.core.controller import MissionController
from offboard_mission.core.plan import MissionConfig, Waypoint
from offboard_mission.core.vehicle import (
    MAV_STATE_STANDBY,
    Odometry,
    SatelliteFix,
    TelemetryCache,
    VehicleState,
)

MAV_STATE_ACTIVE = 4
HOME_FIX = SatelliteFix(47.397742, 8.545594, 535.3)
DT = 0.1


class FakeLogger:
    def __init__(self) -> None:
        self.records: List[Tuple[str, str]] = []

    def info(self, msg: str) -> None:
        self.records.append(("info", msg))

    def warn(self, msg: str) -> None:
        self.records.append(("warn", msg))

    def error(self, msg: str) -> None:
        self.records.append(("error", msg))

    def debug(self, msg: str) -> None:
        self.records.append(("debug", msg))

    def messages(self, level: Optional[str] = None) -> List[str]:
        return [msg for lvl, msg in self.records if level is None or lvl == level]


class FakeVehicle:
    """Moves halfway to the commanded setpoint every tick once armed in offboard mode."""

    def __init__(self, cache: TelemetryCache, *, ground_z: float = 0.0) -> None:
        self.cache = cache
        self.ground_z = ground_z
        self.position = [0.0, 0.0, ground_z]
        self.yaw = 0.0
        self.state = VehicleState(system_status=MAV_STATE_STANDBY)
        self.fix_available = False
        self._publish()

    def update_state(self, **changes) -> None:
        self.state = replace(self.state, **changes)
        self._publish()

    def step(self, setpoint: Optional[Tuple[Tuple[float, float, float], float]]) -> None:
        flying = self.state.armed and self.state.mode == "OFFBOARD"
        if flying and setpoint is not None:
            target, yaw = setpoint
            for axis in range(3):
                self.position[axis] += 0.5 * (target[axis] - self.position[axis])
            self.position[2] = max(self.position[2], self.ground_z)
            # odometry reports heading in (-pi, pi]
            self.yaw = math.atan2(math.sin(yaw), math.cos(yaw))
        if self.state.armed:
            on_ground = self.position[2] <= self.ground_z + 0.05
            status = MAV_STATE_STANDBY if on_ground and self.ground_z > 0.0 else MAV_STATE_ACTIVE
            if status != self.state.system_status:
                self.state = replace(self.state, system_status=status)
        self._publish()

    def _publish(self) -> None:
        self.cache.update_state(self.state)
        self.cache.update_odometry(Odometry(*self.position, yaw=self.yaw))
        if self.fix_available:
            self.cache.update_fix(HOME_FIX)


class FakeLink:
    """Records setpoints and answers service requests from scripted results (default: accept).

    A scripted None stands for a call still awaiting its response.
    """

    def __init__(self, vehicle: FakeVehicle) -> None:
        self.vehicle = vehicle
        self.setpoints: List[Tuple[Tuple[float, float, float], float]] = []
        self.arm_results: List[Optional[bool]] = []
        self.mode_results: Dict[str, List[Optional[bool]]] = {}
        self.arm_calls = 0
        self.mode_calls: Dict[str, int] = {}
        self.snapshots = 0

    def publish_setpoint(self, position, yaw: float) -> None:
        self.setpoints.append(((float(position[0]), float(position[1]), float(position[2])), float(yaw)))

    def request_arm(self, value: bool) -> Optional[bool]:
        self.arm_calls += 1
        accepted = self.arm_results.pop(0) if self.arm_results else True
        if accepted:
            self.vehicle.update_state(armed=value, system_status=MAV_STATE_ACTIVE)
        return accepted

    def request_mode(self, mode: str) -> Optional[bool]:
        self.mode_calls[mode] = self.mode_calls.get(mode, 0) + 1
        scripted = self.mode_results.get(mode) or []
        accepted = scripted.pop(0) if scripted else True
        if accepted:
            if mode == "AUTO.LAND":
                self.vehicle.update_state(mode=mode, armed=False, system_status=MAV_STATE_STANDBY)
            else:
                self.vehicle.update_state(mode=mode)
        return accepted

    def publish_odometry_snapshot(self) -> None:
        self.snapshots += 1


class FakeRuntime:
    def __init__(self, cache: TelemetryCache, link: FakeLink) -> None:
        self._logger = FakeLogger()
        self._cache = cache
        self._link = link
        self.time_s = 0.0
        self.states: List[str] = []

    @property
    def logger(self) -> FakeLogger:
        return self._logger

    def now(self) -> float:
        return self.time_s

    def publish_state(self, name: str) -> None:
        self.states.append(name)

    @property
    def telemetry(self) -> TelemetryCache:
        return self._cache

    @property
    def link(self) -> FakeLink:
        return self._link


class MissionHarness:
    """Closed loop: controller tick, vehicle step, clock advance."""

    def __init__(
        self,
        config: MissionConfig,
        *,
        connect_at: int = 2,
        fix_at: int = 4,
        ground_z: float = 0.0,
    ) -> None:
        self.cache = TelemetryCache()
        self.vehicle = FakeVehicle(self.cache, ground_z=ground_z)
        self.link = FakeLink(self.vehicle)
        self.runtime = FakeRuntime(self.cache, self.link)
        self.controller = MissionController(self.runtime, config)
        self.connect_at = connect_at
        self.fix_at = fix_at
        self.ticks = 0
        # (phase, waypoint index, published setpoint) per tick
        self.history: List[Tuple[str, int, Optional[Tuple[Tuple[float, float, float], float]]]] = []
        # (phase, waypoint index, vehicle position after the step) per tick
        self.track: List[Tuple[str, int, Tuple[float, float, float]]] = []

    @property
    def logger(self) -> FakeLogger:
        return self.runtime.logger

    def step(self) -> None:
        if self.ticks == self.connect_at:
            self.vehicle.update_state(connected=True)
        if self.ticks == self.fix_at:
            self.vehicle.fix_available = True
            self.vehicle.cache.update_fix(HOME_FIX)

        phase = self.controller.phase.value
        index = self.controller.context.current_index
        published = len(self.link.setpoints)
        self.controller.tick()
        setpoint = self.link.setpoints[-1] if len(self.link.setpoints) > published else None
        self.history.append((phase, index, setpoint))

        self.vehicle.step(self.link.setpoints[-1] if self.link.setpoints else None)
        self.track.append((phase, index, tuple(self.vehicle.position)))
        self.runtime.time_s += DT
        self.ticks += 1

    def run(self, max_ticks: int = 5000, on_tick: Optional[Callable[["MissionHarness"], None]] = None) -> None:
        while not self.controller.finished and self.ticks < max_ticks:
            if on_tick is not None:
                on_tick(self)
            self.step()

    def setpoints_in(self, phase: str, index: Optional[int] = None):
        return [
            sp for ph, idx, sp in self.history
            if ph == phase and sp is not None and (index is None or idx == index)
        ]

    def positions_in(self, phase: str, index: Optional[int] = None):
        return [pos for ph, idx, pos in self.track if ph == phase and (index is None or idx == index)]


def make_config(**overrides) -> MissionConfig:
    values = dict(
        waypoints=(Waypoint(10.0, 0.0, 5.0), Waypoint(10.0, 10.0, 5.0)),
        simulation_mode=True,
        waypoint_tolerance_m=0.5,
        cruise_speed_mps=1.0,
        yaw_rate_rad=0.1,
        calibration_samples=5,
        stream_setpoints=3,
        takeoff_hover_s=1.0,
        hover_s=1.0,
        unpack_s=1.0,
    )
    values.update(overrides)
    return MissionConfig(**values)


@pytest.fixture
def config() -> MissionConfig:
    return make_config()


@pytest.fixture
def harness(config) -> MissionHarness:
    return MissionHarness(config)
