"""Finite state machine driving the offboard waypoint mission (ROS-free)."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Protocol, Sequence, Tuple

from .home import HomeFrame, HomeFrameCalibrator
from .motion import (
    approach_speed,
    distance,
    offset_position,
    position_reached,
    velocity_vector,
    yaw_error,
    yaw_step,
    yaw_target,
)
from .plan import MissionConfig, Waypoint, resolve_waypoints
from .vehicle import TelemetrySnapshot

Vector3 = Tuple[float, float, float]


class MissionPhase(str, Enum):
    AWAIT_CONNECTION = "AWAIT_CONNECTION"
    AWAIT_FIX = "AWAIT_FIX"
    CALIBRATING = "CALIBRATING"
    STREAM_INIT = "STREAM_INIT"
    AWAIT_ARM_OFFBOARD = "AWAIT_ARM_OFFBOARD"
    TAKEOFF = "TAKEOFF"
    HOVER = "HOVER"
    ENROUTE = "ENROUTE"
    DELIVERY = "DELIVERY"
    FINAL_HOVER = "FINAL_HOVER"
    PRE_RETURN_DELIVERY = "PRE_RETURN_DELIVERY"
    RETURN_HOME = "RETURN_HOME"
    LANDING = "LANDING"
    MISSION_COMPLETE = "MISSION_COMPLETE"


class LoggerLike(Protocol):
    def info(self, msg: str) -> None: ...

    def warn(self, msg: str) -> None: ...

    def error(self, msg: str) -> None: ...

    def debug(self, msg: str) -> None: ...


class VehicleLinkProto(Protocol):
    def publish_setpoint(self, position: Sequence[float], yaw: float) -> None: ...

    # None while the request is still awaiting a response.
    def request_arm(self, value: bool) -> Optional[bool]: ...

    def request_mode(self, mode: str) -> Optional[bool]: ...

    def publish_odometry_snapshot(self) -> None: ...


class TelemetryProto(Protocol):
    def snapshot(self) -> TelemetrySnapshot: ...


class MissionRuntime(Protocol):
    @property
    def logger(self) -> LoggerLike: ...

    def now(self) -> float: ...  # seconds

    def publish_state(self, name: str) -> None: ...

    @property
    def telemetry(self) -> TelemetryProto: ...

    @property
    def link(self) -> VehicleLinkProto: ...


@dataclass
class DeliveryTask:
    stop: Vector3
    resume: type["State"]


@dataclass
class MissionContext:
    runtime: MissionRuntime
    config: MissionConfig

    def __post_init__(self) -> None:
        self.telemetry = self.runtime.telemetry
        self.link = self.runtime.link
        self.snapshot = TelemetrySnapshot()
        self.calibrator = HomeFrameCalibrator(self.config.calibration_samples)
        self.route: Tuple[Waypoint, ...] = ()
        self.current_index = 0
        self.hover_deadline: Optional[float] = None
        self.hover_target: Optional[Tuple[Vector3, float]] = None
        self.hold_position: Optional[Vector3] = None
        self.last_aligned_position: Optional[Vector3] = None
        self.stream_setpoint: Optional[Tuple[Vector3, float]] = None
        self.landing_target: Optional[Tuple[Vector3, float]] = None
        self.delivery: Optional[DeliveryTask] = None
        self.last_setpoint: Optional[Tuple[Vector3, float]] = None
        self._home_frame: Optional[HomeFrame] = None
        self._operation_start: Optional[float] = None
        self._operation_end: Optional[float] = None
        self._last_log: Dict[str, float] = {}

    # ------------------------------------------------------------------
    # Convenience helpers

    @property
    def logger(self) -> LoggerLike:
        return self.runtime.logger

    def now(self) -> float:
        return self.runtime.now()

    def refresh(self) -> None:
        self.snapshot = self.telemetry.snapshot()

    def current_position(self) -> Vector3:
        odom = self.snapshot.odometry
        if odom is None:
            raise RuntimeError("No odometry received yet")
        return odom.position

    def current_yaw(self) -> float:
        odom = self.snapshot.odometry
        return odom.yaw if odom is not None else 0.0

    def vehicle_landed(self) -> bool:
        return self.snapshot.state.system_status == self.config.landed_system_status

    def log_throttled(self, key: str, message: str, period_s: float = 1.0, level: str = "info") -> None:
        now = self.now()
        last = self._last_log.get(key)
        if last is None or (now - last) >= period_s:
            getattr(self.logger, level)(message)
            self._last_log[key] = now

    # Home frame --------------------------------------------------------

    @property
    def home_frame(self) -> HomeFrame:
        if self._home_frame is None:
            raise RuntimeError("Home frame read before calibration completed")
        return self._home_frame

    @property
    def home_ready(self) -> bool:
        return self._home_frame is not None

    def set_home_frame(self, frame: HomeFrame) -> None:
        self._home_frame = frame
        self.route = resolve_waypoints(self.config.waypoints, frame)

    # Waypoints ---------------------------------------------------------

    @property
    def current_waypoint(self) -> Waypoint:
        return self.route[self.current_index]

    @property
    def final_waypoint(self) -> Waypoint:
        return self.route[-1]

    def is_final_waypoint(self) -> bool:
        return self.current_index >= len(self.route) - 1

    def advance_waypoint(self) -> None:
        if not self.is_final_waypoint():
            self.current_index += 1

    # Hover helpers -----------------------------------------------------

    def schedule_hover(self, position: Sequence[float], yaw: float, duration_s: float) -> None:
        self.hover_target = ((float(position[0]), float(position[1]), float(position[2])), yaw)
        self.hover_deadline = self.now() + duration_s
        self.logger.info(
            "Hovering at [%.1f, %.1f, %.1f] for %.1f (s)"
            % (position[0], position[1], position[2], duration_s)
        )

    def hover_elapsed(self) -> bool:
        return self.hover_deadline is not None and self.now() >= self.hover_deadline

    def publish_hover(self) -> None:
        if self.hover_target is not None:
            self.publish(*self.hover_target)

    # Delivery ----------------------------------------------------------

    def begin_delivery(self, stop: Sequence[float], resume: type["State"]) -> None:
        self.delivery = DeliveryTask((float(stop[0]), float(stop[1]), float(stop[2])), resume)

    def finish_delivery(self) -> type["State"]:
        if self.delivery is None:
            raise RuntimeError("No delivery in progress")
        resume = self.delivery.resume
        self.delivery = None
        return resume

    # Operation time ----------------------------------------------------

    def start_operation_timer(self) -> None:
        if self._operation_start is None:
            self._operation_start = self.now()

    def stop_operation_timer(self) -> None:
        self._operation_end = self.now()

    @property
    def operation_time_s(self) -> Optional[float]:
        if self._operation_start is None or self._operation_end is None:
            return None
        return max(0.0, self._operation_end - self._operation_start)

    # Setpoints ---------------------------------------------------------

    def publish(self, position: Sequence[float], yaw: float) -> None:
        target = (float(position[0]), float(position[1]), float(position[2]))
        self.last_setpoint = (target, yaw)
        self.link.publish_setpoint(target, yaw)

    def drive_toward(self, target: Sequence[float], speed: float, yaw: float, tolerance: float) -> None:
        """Publish a look-ahead setpoint toward ``target``; hold the target once inside tolerance."""

        current = self.current_position()
        if position_reached(tolerance, current, target):
            self.publish(target, yaw)
            return
        self.publish(offset_position(current, velocity_vector(speed, current, target)), yaw)

    def publish_state(self, name: str) -> None:
        self.runtime.publish_state(name)


class State(ABC):
    """Lifecycle interface for FSM states. Keep persistent data in MissionContext."""

    phase: MissionPhase

    def enter(self, ctx: MissionContext) -> None:  # pragma: no cover - default noop
        pass

    def body(self, ctx: MissionContext) -> None:  # pragma: no cover - default noop
        pass

    @abstractmethod
    def tick(self, ctx: MissionContext) -> Optional[type["State"]]:
        """Return the next state class or None to remain."""
        raise NotImplementedError

    def exit(self, ctx: MissionContext) -> None:  # pragma: no cover - default noop
        pass


class AwaitConnectionState(State):
    phase = MissionPhase.AWAIT_CONNECTION

    def enter(self, ctx: MissionContext) -> None:
        ctx.logger.info("Waiting for FCU connection")

    def tick(self, ctx: MissionContext) -> Optional[type[State]]:
        if ctx.snapshot.state.connected:
            ctx.logger.info("FCU connected")
            return AwaitFixState
        ctx.log_throttled("connection", "Still waiting for FCU connection...", 5.0)
        return None


class AwaitFixState(State):
    phase = MissionPhase.AWAIT_FIX

    def enter(self, ctx: MissionContext) -> None:
        ctx.logger.info("Waiting for GPS signal")

    def tick(self, ctx: MissionContext) -> Optional[type[State]]:
        if not ctx.snapshot.fix_received:
            ctx.log_throttled("fix", "Still waiting for GPS signal...", 5.0)
            return None
        ctx.logger.info("GPS position received")
        ctx.start_operation_timer()
        if ctx.config.simulation_mode:
            ctx.logger.warn(
                "simulation_mode is enabled: the node will ARM and switch to %s by itself. "
                "Shut it down now if this is a real vehicle." % ctx.config.offboard_mode
            )
        else:
            ctx.logger.info(
                "simulation_mode is disabled: waiting for ARM and %s mode from the RC transmitter"
                % ctx.config.offboard_mode
            )
        return CalibratingState


class CalibratingState(State):
    phase = MissionPhase.CALIBRATING

    def enter(self, ctx: MissionContext) -> None:
        ctx.logger.info("Waiting for stable state (%d samples)" % ctx.calibrator.window)

    def tick(self, ctx: MissionContext) -> Optional[type[State]]:
        odom = ctx.snapshot.odometry
        fix = ctx.snapshot.fix
        if odom is None or fix is None:
            ctx.log_throttled("calibration", "Calibration waiting for odometry...")
            return None
        ctx.calibrator.sample(odom, fix)
        if not ctx.calibrator.complete:
            return None

        frame = ctx.calibrator.finalize()
        ctx.set_home_frame(frame)
        home = frame.home_pose
        ctx.logger.info(
            "Got HOME position: [%.1f, %.1f, %.1f, yaw %.2f] offset=(%.2f, %.2f, %.2f)"
            % (home.x, home.y, home.z, home.yaw, *frame.frame_offset)
        )
        ctx.logger.info(
            "HOME fix: latitude %.8f longitude %.8f altitude %.3f"
            % (frame.home_fix.latitude, frame.home_fix.longitude, frame.home_fix.altitude)
        )
        for idx, wp in enumerate(ctx.route):
            ctx.logger.info("Target (%d): [%.1f, %.1f, %.1f]" % (idx + 1, wp.x, wp.y, wp.z))
        return StreamInitState


class StreamInitState(State):
    phase = MissionPhase.STREAM_INIT

    def __init__(self) -> None:
        self.counter = 0

    def enter(self, ctx: MissionContext) -> None:
        home = ctx.home_frame.home_pose
        ctx.stream_setpoint = ((home.x, home.y, ctx.config.takeoff_altitude_m), home.yaw)
        ctx.logger.info("Setting OFFBOARD stream")

    def body(self, ctx: MissionContext) -> None:
        assert ctx.stream_setpoint is not None
        ctx.publish(*ctx.stream_setpoint)

    def tick(self, ctx: MissionContext) -> Optional[type[State]]:
        self.counter += 1
        if self.counter >= ctx.config.stream_setpoints:
            ctx.logger.info("OFFBOARD stream is set")
            return AwaitArmOffboardState
        return None


class AwaitArmOffboardState(State):
    phase = MissionPhase.AWAIT_ARM_OFFBOARD

    def __init__(self) -> None:
        self._arm_attempts = 0
        self._mode_attempts = 0
        self._arm_acked = False
        self._mode_acked = False

    def enter(self, ctx: MissionContext) -> None:
        if ctx.config.simulation_mode:
            ctx.logger.info("Ready to takeoff")
        else:
            ctx.logger.info("Waiting switching (ARM and %s mode) from RC" % ctx.config.offboard_mode)

    def body(self, ctx: MissionContext) -> None:
        assert ctx.stream_setpoint is not None
        ctx.publish(*ctx.stream_setpoint)

    def tick(self, ctx: MissionContext) -> Optional[type[State]]:
        state = ctx.snapshot.state
        offboard = ctx.config.offboard_mode
        if state.armed and ctx.snapshot.in_mode(offboard):
            ctx.logger.info("Vehicle armed and in %s mode" % offboard)
            if ctx.config.publish_odom_snapshot:
                ctx.link.publish_odometry_snapshot()
            return TakeoffState
        if not ctx.config.simulation_mode:
            ctx.log_throttled(
                "arm_wait",
                "Waiting for operator: armed=%s mode=%s" % (state.armed, state.mode or "?"),
                2.0,
            )
            return None

        if not state.armed:
            self._arm_attempts += 1
            accepted = ctx.link.request_arm(True)
            self._report(ctx, "Arming", accepted, self._arm_attempts, "_arm_acked")
        if state.mode != offboard:
            self._mode_attempts += 1
            accepted = ctx.link.request_mode(offboard)
            self._report(ctx, "%s mode switch" % offboard, accepted, self._mode_attempts, "_mode_acked")
        return None

    def _report(self, ctx: MissionContext, label: str, accepted: Optional[bool], attempt: int, flag: str) -> None:
        if accepted is None:
            ctx.logger.debug("%s pending (attempt %d)" % (label, attempt))
            return
        if accepted:
            if not getattr(self, flag):
                ctx.logger.info("%s accepted (attempt %d)" % (label, attempt))
                setattr(self, flag, True)
            return
        ctx.logger.debug("%s rejected, retrying (attempt %d)" % (label, attempt))
        ctx.log_throttled(label, "%s rejected, retrying (attempt %d)" % (label, attempt), level="warn")


class TakeoffState(State):
    phase = MissionPhase.TAKEOFF

    def __init__(self) -> None:
        self._target: Vector3 = (0.0, 0.0, 0.0)
        self._yaw = 0.0

    def enter(self, ctx: MissionContext) -> None:
        x, y, _ = ctx.current_position()
        self._target = (x, y, ctx.config.takeoff_altitude_m)
        self._yaw = ctx.home_frame.home_pose.yaw
        ctx.logger.info("Takeoff to [%.1f, %.1f, %.1f]" % self._target)

    def body(self, ctx: MissionContext) -> None:
        ctx.drive_toward(self._target, ctx.config.cruise_speed_mps, self._yaw, ctx.config.waypoint_tolerance_m)

    def tick(self, ctx: MissionContext) -> Optional[type[State]]:
        if position_reached(ctx.config.waypoint_tolerance_m, ctx.current_position(), self._target):
            ctx.logger.info("Takeoff altitude reached")
            ctx.schedule_hover(self._target, self._yaw, ctx.config.takeoff_hover_s)
            return HoverState
        return None


class HoverState(State):
    phase = MissionPhase.HOVER

    def body(self, ctx: MissionContext) -> None:
        ctx.publish_hover()

    def tick(self, ctx: MissionContext) -> Optional[type[State]]:
        if ctx.hover_elapsed():
            ctx.logger.info("Flight with ENU setpoint and yaw angle")
            return EnrouteState
        return None


class EnrouteState(State):
    """Fly to the current waypoint, rotating in place while the heading error is large."""

    phase = MissionPhase.ENROUTE

    def enter(self, ctx: MissionContext) -> None:
        wp = ctx.current_waypoint
        ctx.logger.info(
            "Target %d/%d: [%.1f, %.1f, %.1f]"
            % (ctx.current_index + 1, len(ctx.route), wp.x, wp.y, wp.z)
        )
        ctx.hold_position = None
        ctx.last_aligned_position = ctx.current_position()

    def body(self, ctx: MissionContext) -> None:
        cfg = ctx.config
        current = ctx.current_position()
        yaw = ctx.current_yaw()
        target = ctx.current_waypoint.position
        if position_reached(cfg.waypoint_tolerance_m, current, target):
            ctx.publish(target, yaw)
            return

        dist = distance(current, target)
        speed = approach_speed(dist, cfg.cruise_speed_mps, cfg.approach_speed_mps, cfg.approach_radius_m)
        velocity = velocity_vector(speed, current, target)
        bearing = yaw_target(current, target)
        command_yaw = yaw_step(yaw, bearing, cfg.yaw_rate_rad)

        if yaw_error(yaw, bearing) < cfg.yaw_hold_threshold_rad:
            ctx.hold_position = None
            ctx.last_aligned_position = current
            ctx.publish(offset_position(current, velocity), command_yaw)
        else:
            if ctx.hold_position is None:
                ctx.hold_position = ctx.last_aligned_position or current
                ctx.logger.info(
                    "Rotating in place toward %.2f rad (yaw %.2f rad)" % (bearing, yaw)
                )
            ctx.publish(ctx.hold_position, command_yaw)
        ctx.log_throttled("distance", "Distance to target: %.1f (m)" % dist)

    def tick(self, ctx: MissionContext) -> Optional[type[State]]:
        current = ctx.current_position()
        wp = ctx.current_waypoint
        if not position_reached(ctx.config.waypoint_tolerance_m, current, wp.position):
            return None

        ctx.logger.info("Reached position: [%.1f, %.1f, %.1f]" % current)
        if ctx.is_final_waypoint():
            return FinalHoverState
        ctx.advance_waypoint()
        if ctx.config.delivery_mode:
            ctx.begin_delivery(wp.position, EnrouteState)
            return DeliveryState
        return EnrouteState


class FinalHoverState(State):
    phase = MissionPhase.FINAL_HOVER

    def enter(self, ctx: MissionContext) -> None:
        ctx.logger.info("Reached Final position: [%.1f, %.1f, %.1f]" % ctx.current_position())
        ctx.schedule_hover(ctx.current_position(), ctx.current_yaw(), ctx.config.hover_s)

    def body(self, ctx: MissionContext) -> None:
        ctx.publish_hover()

    def tick(self, ctx: MissionContext) -> Optional[type[State]]:
        if not ctx.hover_elapsed():
            return None
        if ctx.config.return_home_mode:
            return PreReturnDeliveryState
        assert ctx.hover_target is not None
        final = ctx.final_waypoint
        ctx.landing_target = ((final.x, final.y, 0.0), ctx.hover_target[1])
        return LandingState


class PreReturnDeliveryState(State):
    phase = MissionPhase.PRE_RETURN_DELIVERY

    def body(self, ctx: MissionContext) -> None:
        ctx.publish_hover()

    def tick(self, ctx: MissionContext) -> Optional[type[State]]:
        if ctx.config.delivery_mode:
            ctx.begin_delivery(ctx.final_waypoint.position, ReturnHomeState)
            return DeliveryState
        return ReturnHomeState


class ReturnHomeState(State):
    phase = MissionPhase.RETURN_HOME

    def __init__(self) -> None:
        self._target: Vector3 = (0.0, 0.0, 0.0)
        self._yaw = 0.0
        self._hovering = False

    def enter(self, ctx: MissionContext) -> None:
        home = ctx.home_frame.home_pose
        self._target = (home.x, home.y, ctx.final_waypoint.z)
        self._yaw = ctx.current_yaw()
        ctx.logger.info("Returning home [%.1f, %.1f, %.1f]" % self._target)

    def body(self, ctx: MissionContext) -> None:
        if self._hovering:
            ctx.publish_hover()
            return
        ctx.drive_toward(self._target, ctx.config.return_speed_mps, self._yaw, ctx.config.waypoint_tolerance_m)

    def tick(self, ctx: MissionContext) -> Optional[type[State]]:
        if not self._hovering:
            if position_reached(ctx.config.waypoint_tolerance_m, ctx.current_position(), self._target):
                ctx.logger.info("Return-home reached")
                ctx.schedule_hover(self._target, self._yaw, ctx.config.hover_s)
                self._hovering = True
            return None
        if ctx.hover_elapsed():
            home = ctx.home_frame.home_pose
            ctx.landing_target = (home.position, self._yaw)
            return LandingState
        return None


class DeliveryState(State):
    """Descend over the stop, wait for unpacking, climb back, then resume the caller."""

    phase = MissionPhase.DELIVERY

    DESCEND = "descend"
    UNPACK = "unpack"
    CLIMB = "climb"
    SETTLE = "settle"

    def __init__(self) -> None:
        self._stage = self.DESCEND
        self._stop: Vector3 = (0.0, 0.0, 0.0)
        self._drop: Vector3 = (0.0, 0.0, 0.0)
        self._yaw = 0.0

    def enter(self, ctx: MissionContext) -> None:
        if ctx.delivery is None:
            raise RuntimeError("DeliveryState entered without a delivery task")
        self._stop = ctx.delivery.stop
        self._drop = (self._stop[0], self._stop[1], ctx.config.delivery_altitude_m)
        self._yaw = ctx.current_yaw()
        ctx.logger.info("Land for unpacking at [%.1f, %.1f, %.1f]" % self._drop)

    def body(self, ctx: MissionContext) -> None:
        cfg = ctx.config
        if self._stage == self.DESCEND:
            ctx.drive_toward(self._drop, cfg.cruise_speed_mps, self._yaw, cfg.landing_tolerance_m)
        elif self._stage == self.CLIMB:
            ctx.drive_toward(self._stop, cfg.cruise_speed_mps, self._yaw, cfg.waypoint_tolerance_m)
        else:
            ctx.publish_hover()

    def tick(self, ctx: MissionContext) -> Optional[type[State]]:
        cfg = ctx.config
        if self._stage == self.DESCEND:
            landed = ctx.vehicle_landed()
            if landed or position_reached(cfg.landing_tolerance_m, ctx.current_position(), self._drop):
                point = ctx.current_position() if landed else self._drop
                ctx.schedule_hover(point, self._yaw, cfg.unpack_s)
                self._stage = self.UNPACK
        elif self._stage == self.UNPACK:
            if ctx.hover_elapsed():
                ctx.logger.info("Done! Return setpoint [%.1f, %.1f, %.1f]" % self._stop)
                self._stage = self.CLIMB
        elif self._stage == self.CLIMB:
            if position_reached(cfg.waypoint_tolerance_m, ctx.current_position(), self._stop):
                ctx.schedule_hover(self._stop, self._yaw, cfg.hover_s)
                self._stage = self.SETTLE
        elif ctx.hover_elapsed():
            return ctx.finish_delivery()
        return None


class LandingState(State):
    phase = MissionPhase.LANDING

    def __init__(self) -> None:
        self._target: Vector3 = (0.0, 0.0, 0.0)
        self._yaw = 0.0
        self._land_requested = False
        self._attempts = 0

    def enter(self, ctx: MissionContext) -> None:
        if ctx.landing_target is None:
            raise RuntimeError("LandingState entered without a landing target")
        self._target, self._yaw = ctx.landing_target
        ctx.logger.info("Landing at [%.1f, %.1f, %.1f]" % self._target)

    def body(self, ctx: MissionContext) -> None:
        ctx.drive_toward(self._target, ctx.config.landing_speed_mps, self._yaw, ctx.config.landing_tolerance_m)

    def tick(self, ctx: MissionContext) -> Optional[type[State]]:
        if not self._land_requested:
            if ctx.vehicle_landed():
                ctx.logger.info("Land detected")
                self._land_requested = True
            elif position_reached(ctx.config.landing_tolerance_m, ctx.current_position(), self._target):
                ctx.logger.info("Landing target reached")
                self._land_requested = True
            else:
                return None

        self._attempts += 1
        accepted = ctx.link.request_mode(ctx.config.land_mode)
        if accepted:
            ctx.logger.info("LANDED (%s accepted after %d attempt(s))" % (ctx.config.land_mode, self._attempts))
            ctx.stop_operation_timer()
            return MissionCompleteState
        if accepted is None:
            ctx.logger.debug("%s pending (attempt %d)" % (ctx.config.land_mode, self._attempts))
            return None
        ctx.logger.debug("%s rejected, retrying (attempt %d)" % (ctx.config.land_mode, self._attempts))
        ctx.log_throttled("land_mode", "%s request rejected, retrying (attempt %d)" % (ctx.config.land_mode, self._attempts), level="warn")
        return None


class MissionCompleteState(State):
    phase = MissionPhase.MISSION_COMPLETE

    def enter(self, ctx: MissionContext) -> None:
        elapsed = ctx.operation_time_s
        if elapsed is not None:
            ctx.logger.info("Operation time %.1f (s)" % elapsed)

    def tick(self, ctx: MissionContext) -> Optional[type[State]]:
        return None


class MissionStateMachine:
    def __init__(self, ctx: MissionContext) -> None:
        self._ctx = ctx
        self._state: State = AwaitConnectionState()
        self._state.enter(ctx)
        ctx.publish_state(self._state.phase.value)

    @property
    def phase(self) -> MissionPhase:
        return self._state.phase

    @property
    def finished(self) -> bool:
        return isinstance(self._state, MissionCompleteState)

    def tick(self) -> None:
        if self.finished:
            return
        ctx = self._ctx
        ctx.refresh()
        self._state.body(ctx)
        next_state_cls = self._state.tick(ctx)
        if next_state_cls is not None:
            self._transition(next_state_cls)

    def _transition(self, state_cls: type[State]) -> None:
        self._state.exit(self._ctx)
        self._state = state_cls()
        self._ctx.logger.info("FSM state -> %s" % state_cls.phase.value)
        self._state.enter(self._ctx)
        self._ctx.publish_state(self._state.phase.value)


__all__ = [
    "MissionPhase",
    "MissionRuntime",
    "MissionContext",
    "MissionStateMachine",
    "State",
    "LoggerLike",
    "VehicleLinkProto",
    "TelemetryProto",
]
