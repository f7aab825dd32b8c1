"""Utilities to publish MAVROS setpoints and request arming/mode changes."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable, Optional, Sequence

from geometry_msgs.msg import PoseStamped
from mavros_msgs.srv import CommandBool, SetMode
from nav_msgs.msg import Odometry as OdometryMsg

from ..core.motion import quaternion_from_yaw
from .qos import CONTROL_QOS, LATCHED_QOS
from .topics import DEFAULT_MAVROS_NAMESPACE, mavros_topic

if TYPE_CHECKING:
    from .telemetry import MavrosTelemetry


class ServiceRequester:
    """Non-blocking service call: at most one request in flight per service.

    ``request`` answers None while a call is in flight or the service is not
    up yet, and the result of the finished call on the next invocation; a
    new call is sent otherwise.
    """

    def __init__(self, node, srv_type, name: str, accepted: Callable[[Any], bool]) -> None:
        self._node = node
        self._name = name
        self._client = node.create_client(srv_type, name)
        self._srv_type = srv_type
        self._accepted = accepted
        self._future = None
        self._pending_key: Optional[Any] = None
        self._unavailable_logged = False

    def request(self, key: Any, fill: Callable[[Any], None]) -> Optional[bool]:
        future = self._future
        if future is not None:
            if not future.done():
                return None
            self._future = None
            if self._pending_key == key:
                return self._result(future)

        if not self._client.service_is_ready():
            if not self._unavailable_logged:
                self._node.get_logger().warn("Service %s not available yet" % self._name)
                self._unavailable_logged = True
            return None
        self._unavailable_logged = False

        request = self._srv_type.Request()
        fill(request)
        self._pending_key = key
        self._future = self._client.call_async(request)
        return None

    def _result(self, future) -> bool:
        try:
            response = future.result()
        except Exception as exc:  # noqa: BLE001
            self._node.get_logger().warn("Service %s call failed: %s" % (self._name, exc))
            return False
        if response is None:
            return False
        return bool(self._accepted(response))


class MavrosLink:
    """Wraps the publishers and service clients used to drive the vehicle in offboard mode."""

    def __init__(
        self,
        node,
        telemetry: "MavrosTelemetry",
        *,
        namespace: str = DEFAULT_MAVROS_NAMESPACE,
        frame_id: str = "map",
    ) -> None:
        self._node = node
        self._telemetry = telemetry
        self._frame_id = frame_id
        self._setpoint_pub = node.create_publisher(
            PoseStamped,
            mavros_topic("setpoint_position/local", namespace),
            CONTROL_QOS,
        )
        self._odom_error_pub = node.create_publisher(OdometryMsg, "odom_error", LATCHED_QOS)
        self._arming = ServiceRequester(
            node, CommandBool, mavros_topic("cmd/arming", namespace), lambda resp: resp.success
        )
        self._set_mode = ServiceRequester(
            node, SetMode, mavros_topic("set_mode", namespace), lambda resp: resp.mode_sent
        )

    def publish_setpoint(self, position: Sequence[float], yaw: float) -> None:
        if len(position) < 3:
            raise ValueError("Setpoint requires [x, y, z] in the local frame")
        msg = PoseStamped()
        msg.header.stamp = self._node.get_clock().now().to_msg()
        msg.header.frame_id = self._frame_id
        msg.pose.position.x = float(position[0])
        msg.pose.position.y = float(position[1])
        msg.pose.position.z = float(position[2])
        qx, qy, qz, qw = quaternion_from_yaw(yaw)
        msg.pose.orientation.x = qx
        msg.pose.orientation.y = qy
        msg.pose.orientation.z = qz
        msg.pose.orientation.w = qw
        self._setpoint_pub.publish(msg)

    def request_arm(self, value: bool) -> Optional[bool]:
        def fill(request) -> None:
            request.value = bool(value)

        return self._arming.request(bool(value), fill)

    def request_mode(self, mode: str) -> Optional[bool]:
        def fill(request) -> None:
            request.base_mode = 0
            request.custom_mode = mode

        return self._set_mode.request(mode, fill)

    def publish_odometry_snapshot(self) -> None:
        msg = self._telemetry.last_odometry_msg()
        if msg is None:
            self._node.get_logger().warn("No odometry received yet; odom_error snapshot skipped")
            return
        self._odom_error_pub.publish(msg)
        self._node.get_logger().info("Published odometry snapshot on odom_error")


__all__ = ["MavrosLink", "ServiceRequester"]
