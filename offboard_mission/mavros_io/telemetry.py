"""Telemetry adapter filling the mission telemetry cache from MAVROS topics."""

from __future__ import annotations

import threading
from typing import Optional

from mavros_msgs.msg import State
from nav_msgs.msg import Odometry as OdometryMsg
from sensor_msgs.msg import NavSatFix, NavSatStatus

from ..core.motion import yaw_from_quaternion
from ..core.vehicle import Odometry, SatelliteFix, TelemetryCache, TelemetrySnapshot, VehicleState
from .qos import TELEMETRY_QOS
from .topics import DEFAULT_MAVROS_NAMESPACE, mavros_topic


class MavrosTelemetry:
    """Subscribes to vehicle state, local odometry and satellite fix."""

    def __init__(
        self,
        node,
        cache: Optional[TelemetryCache] = None,
        *,
        namespace: str = DEFAULT_MAVROS_NAMESPACE,
        offboard_mode: str = "OFFBOARD",
    ) -> None:
        self._node = node
        self._cache = cache if cache is not None else TelemetryCache()
        self._offboard_mode = offboard_mode
        self._previous_state: Optional[VehicleState] = None
        self._no_fix_logged = False

        # Raw odometry kept for the odom_error snapshot
        self._raw_lock = threading.Lock()
        self._last_odometry_msg: Optional[OdometryMsg] = None

        node.create_subscription(
            State,
            mavros_topic("state", namespace),
            self._on_state,
            TELEMETRY_QOS,
        )
        node.create_subscription(
            OdometryMsg,
            mavros_topic("local_position/odom", namespace),
            self._on_odometry,
            TELEMETRY_QOS,
        )
        node.create_subscription(
            NavSatFix,
            mavros_topic("global_position/global", namespace),
            self._on_fix,
            TELEMETRY_QOS,
        )

    # ----------------------------------------------------------------------
    # Callbacks
    # ----------------------------------------------------------------------

    def _on_state(self, msg: State) -> None:
        state = VehicleState(
            connected=bool(msg.connected),
            armed=bool(msg.armed),
            mode=str(msg.mode),
            system_status=int(msg.system_status),
        )
        previous = self._previous_state
        self._previous_state = state
        self._cache.update_state(state)

        if previous is None or previous.connected != state.connected:
            if state.connected:
                self._node.get_logger().info("FCU link up (ACK)")
            elif previous is not None:
                self._node.get_logger().warn("FCU link lost")
        if previous is None or previous.mode != state.mode:
            if state.mode == self._offboard_mode:
                self._node.get_logger().info("%s mode active (ACK)" % self._offboard_mode)
        if previous is None or previous.armed != state.armed:
            if state.armed:
                self._node.get_logger().info("ARMED (ACK)")

    def _on_odometry(self, msg: OdometryMsg) -> None:
        pose = msg.pose.pose
        q = pose.orientation
        self._cache.update_odometry(
            Odometry(
                float(pose.position.x),
                float(pose.position.y),
                float(pose.position.z),
                yaw_from_quaternion(q.x, q.y, q.z, q.w),
            )
        )
        with self._raw_lock:
            self._last_odometry_msg = msg

    def _on_fix(self, msg: NavSatFix) -> None:
        if msg.status.status == NavSatStatus.STATUS_NO_FIX:
            if not self._no_fix_logged:
                self._node.get_logger().warn("NavSatFix without a position fix; ignoring")
                self._no_fix_logged = True
            return
        self._cache.update_fix(SatelliteFix(float(msg.latitude), float(msg.longitude), float(msg.altitude)))

    # ----------------------------------------------------------------------
    # Accessors
    # ----------------------------------------------------------------------

    @property
    def cache(self) -> TelemetryCache:
        return self._cache

    def snapshot(self) -> TelemetrySnapshot:
        return self._cache.snapshot()

    def last_odometry_msg(self) -> Optional[OdometryMsg]:
        with self._raw_lock:
            return self._last_odometry_msg


__all__ = ["MavrosTelemetry"]
