"""Launch the offboard mission node with a shared params file."""

from __future__ import annotations

from pathlib import Path

import yaml
from ament_index_python.packages import get_package_share_directory
from launch import LaunchDescription
from launch.actions import DeclareLaunchArgument, OpaqueFunction
from launch.substitutions import LaunchConfiguration
from launch_ros.actions import Node

NODE_NAME = "offboard_mission"
MODE_ARGUMENTS = ("simulation_mode", "delivery_mode", "return_home_mode")


def _load_yaml(path: Path) -> dict:
    try:
        with path.open("r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle) or {}
    except (OSError, yaml.YAMLError):
        return {}
    return data if isinstance(data, dict) else {}


def _node_defaults(config: dict) -> dict:
    params = config.get(NODE_NAME, {}).get("ros__parameters", {})
    return params if isinstance(params, dict) else {}


def _as_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


def generate_launch_description() -> LaunchDescription:
    pkg_share = Path(get_package_share_directory("offboard_mission"))
    default_params = str(pkg_share / "param" / "offboard.yaml")

    declare_actions = [
        DeclareLaunchArgument(
            "params_file",
            default_value=default_params,
            description="YAML file with offboard_mission parameters",
        ),
        DeclareLaunchArgument(
            "mission_file",
            default_value="",
            description="Path to a mission YAML file (overrides params file waypoints)",
        ),
    ]
    for name in MODE_ARGUMENTS:
        declare_actions.append(
            DeclareLaunchArgument(
                name,
                default_value="",
                description=f"Override '{name}' (true/false); empty keeps the params file value",
            )
        )

    def _launch_setup(context, *args, **kwargs):
        params_path = Path(LaunchConfiguration("params_file").perform(context))
        mission_override = LaunchConfiguration("mission_file").perform(context)
        defaults = _node_defaults(_load_yaml(params_path))

        overrides = {}
        for name in MODE_ARGUMENTS:
            value = LaunchConfiguration(name).perform(context)
            if value:
                overrides[name] = _as_bool(value)
        mission_file = mission_override or defaults.get("mission_file") or ""
        if mission_file:
            overrides["mission_file"] = str(mission_file)

        return [
            Node(
                package="offboard_mission",
                executable="offboard_node",
                name=NODE_NAME,
                output="screen",
                emulate_tty=True,
                parameters=[str(params_path), overrides],
            )
        ]

    return LaunchDescription(declare_actions + [OpaqueFunction(function=_launch_setup)])
