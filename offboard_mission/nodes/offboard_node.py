#!/usr/bin/env python3
"""Offboard mission node that delegates execution to the core FSM."""

from __future__ import annotations

import pathlib
from dataclasses import fields
from typing import Any, Dict, Optional, Sequence

import rclpy
from rcl_interfaces.msg import ParameterDescriptor
from rclpy.executors import MultiThreadedExecutor
from rclpy.node import Node
from rclpy.parameter import Parameter
from std_msgs.msg import String

from ..core import MissionConfig, MissionConfigError, MissionController, load_mission, mission_from_params
from ..core.fsm import MissionRuntime
from ..mavros_io import EVENTS_QOS, MavrosLink, MavrosTelemetry
from ..mavros_io.topics import DEFAULT_MAVROS_NAMESPACE

WAYPOINT_ARRAY_PARAMS = ("waypoints_x", "waypoints_y", "waypoints_z")


class RosMissionRuntime(MissionRuntime):
    """Concrete MissionRuntime backed by rclpy."""

    def __init__(self, node: Node, telemetry: MavrosTelemetry, link: MavrosLink, *, state_topic: str) -> None:
        self._node = node
        self._telemetry = telemetry
        self._link = link
        self._state_pub = node.create_publisher(String, state_topic, EVENTS_QOS)

    @property
    def logger(self):
        return self._node.get_logger()

    def now(self) -> float:
        return self._node.get_clock().now().nanoseconds / 1e9

    def publish_state(self, name: str) -> None:
        msg = String()
        msg.data = name
        self._state_pub.publish(msg)

    @property
    def telemetry(self) -> MavrosTelemetry:
        return self._telemetry

    @property
    def link(self) -> MavrosLink:
        return self._link


class OffboardMissionNode(Node):
    """ROS2 node that reads the mission parameters and flies them through the core controller."""

    def __init__(self) -> None:
        super().__init__("offboard_mission")
        self._mavros_ns = (
            self.declare_parameter("mavros_namespace", DEFAULT_MAVROS_NAMESPACE)
            .get_parameter_value()
            .string_value.strip()
            .strip("/")
        )
        frame_id = self.declare_parameter("frame_id", "map").get_parameter_value().string_value
        state_topic = self.declare_parameter("state_topic", "mission_state").get_parameter_value().string_value
        mission_file_param = self.declare_parameter("mission_file", "").get_parameter_value().string_value

        config = self._load_config(mission_file_param)

        telemetry = MavrosTelemetry(self, namespace=self._mavros_ns, offboard_mode=config.offboard_mode)
        link = MavrosLink(self, telemetry, namespace=self._mavros_ns, frame_id=frame_id)
        runtime = RosMissionRuntime(self, telemetry, link, state_topic=state_topic)
        self.get_logger().info(f"MAVROS namespace: /{self._mavros_ns}")

        self._controller = MissionController(runtime, config)
        self._timer = self.create_timer(1.0 / config.control_rate_hz, self._on_timer)

    @property
    def finished(self) -> bool:
        return self._controller.finished

    @property
    def controller(self) -> MissionController:
        return self._controller

    def _on_timer(self) -> None:
        if self._controller.finished:
            return
        self._controller.tick()

    # ------------------------------------------------------------------
    # Parameter helpers

    def _load_config(self, mission_file: str) -> MissionConfig:
        params = self._declare_mission_parameters()
        try:
            if mission_file:
                mission_path = self._resolve_mission_path(mission_file)
                if mission_path is None:
                    raise RuntimeError(f"Parameter 'mission_file' does not point to a file: {mission_file}")
                self.get_logger().info(f"Loading mission from {mission_path}")
                return load_mission(mission_path, overrides=params)
            return mission_from_params(params)
        except MissionConfigError as exc:
            self.get_logger().error(f"Mission configuration error: {exc}")
            raise RuntimeError(f"Failed to load mission: {exc}") from exc

    def _declare_mission_parameters(self) -> Dict[str, Any]:
        dynamic = ParameterDescriptor(dynamic_typing=True)
        params: Dict[str, Any] = {}
        for item in fields(MissionConfig):
            if item.name == "waypoints":
                continue
            params[item.name] = self.declare_parameter(item.name, item.default, dynamic).value
        for name in WAYPOINT_ARRAY_PARAMS:
            param = self.declare_parameter(name, Parameter.Type.DOUBLE_ARRAY)
            params[name] = list(param.value) if param.value is not None else []
        return params

    def _resolve_mission_path(self, value: str) -> Optional[pathlib.Path]:
        path = pathlib.Path(value).expanduser()
        if not path.is_absolute():
            path = (pathlib.Path.cwd() / path).resolve()
        return path if path.is_file() else None


def main(args: Optional[Sequence[str]] = None) -> None:
    rclpy.init(args=args)

    runner: Optional[OffboardMissionNode] = None
    executor: Optional[MultiThreadedExecutor] = None
    try:
        runner = OffboardMissionNode()
        executor = MultiThreadedExecutor()
        executor.add_node(runner)

        while rclpy.ok() and not runner.finished:
            executor.spin_once(timeout_sec=0.1)

        if runner.finished:
            elapsed = runner.controller.operation_time_s
            if elapsed is not None:
                runner.get_logger().info("Mission complete; operation time %.1f (s)" % elapsed)
            else:
                runner.get_logger().info("Mission complete")
    except Exception as exc:  # noqa: BLE001
        if runner is not None:
            runner.get_logger().error(f"Offboard mission failed: {exc}")
        else:
            print(f"Offboard mission failed: {exc}")
        raise
    finally:
        if executor is not None:
            if runner is not None:
                try:
                    executor.remove_node(runner)
                except Exception:  # noqa: BLE001
                    pass
            executor.shutdown()
        if runner is not None:
            runner.destroy_node()
        try:
            if rclpy.ok():
                rclpy.shutdown()
        except Exception:  # noqa: BLE001
            pass


if __name__ == "__main__":
    main()
