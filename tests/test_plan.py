"""Tests for mission parameters, YAML mission files and waypoint resolution."""

from __future__ import annotations

import pytest

from conftest import PROJECT_ROOT
from offboard_mission.core.geodesy import enu_to_geodetic
from offboard_mission.core.home import HomeFrameCalibrator
from offboard_mission.core.plan import (
    GeoWaypoint,
    MissionConfig,
    MissionConfigError,
    Waypoint,
    load_mission,
    mission_from_params,
    resolve_waypoints,
    validate_config,
)
from offboard_mission.core.vehicle import Odometry, SatelliteFix

REFERENCE = SatelliteFix(47.397742, 8.545594, 535.3)


def _params(**overrides):
    params = {
        "waypoints_x": [10.0, 10.0],
        "waypoints_y": [0.0, 10.0],
        "waypoints_z": [5.0, 5.0],
    }
    params.update(overrides)
    return params


def test_params_build_waypoints_from_arrays() -> None:
    config = mission_from_params(_params(simulation_mode=True, cruise_speed_mps=2))

    assert config.waypoints == (Waypoint(10.0, 0.0, 5.0), Waypoint(10.0, 10.0, 5.0))
    assert config.simulation_mode is True
    assert config.cruise_speed_mps == 2.0
    assert isinstance(config.cruise_speed_mps, float)


def test_defaults_match_reference_controller() -> None:
    config = mission_from_params(_params())

    assert config.waypoint_tolerance_m == 0.5
    assert config.approach_speed_mps == 0.3
    assert config.approach_radius_m == 3.0
    assert config.yaw_rate_rad == 0.1
    assert config.yaw_hold_threshold_rad == 0.2
    assert config.calibration_samples == 100
    assert config.stream_setpoints == 50
    assert config.control_rate_hz == 10.0
    assert config.offboard_mode == "OFFBOARD"
    assert config.land_mode == "AUTO.LAND"
    assert config.landed_system_status == 3


def test_string_booleans_are_coerced() -> None:
    config = mission_from_params(_params(delivery_mode="true", return_home_mode="off"))

    assert config.delivery_mode is True
    assert config.return_home_mode is False


def test_unknown_keys_are_ignored() -> None:
    config = mission_from_params(_params(mavros_namespace="uav1/mavros"))

    assert len(config.waypoints) == 2


def test_mismatched_arrays_rejected() -> None:
    with pytest.raises(MissionConfigError, match="same length"):
        mission_from_params(_params(waypoints_z=[5.0]))


def test_empty_mission_rejected() -> None:
    with pytest.raises(MissionConfigError, match="at least one waypoint"):
        mission_from_params({})


@pytest.mark.parametrize(
    "name, value",
    [
        ("waypoint_tolerance_m", 0.0),
        ("cruise_speed_mps", -1.0),
        ("yaw_rate_rad", float("nan")),
        ("control_rate_hz", 0.0),
        ("hover_s", -0.5),
        ("calibration_samples", 0),
        ("stream_setpoints", -1),
        ("land_mode", ""),
    ],
)
def test_invalid_values_rejected(name, value) -> None:
    with pytest.raises(MissionConfigError):
        mission_from_params(_params(**{name: value}))


def test_non_numeric_value_rejected() -> None:
    with pytest.raises(MissionConfigError, match="cruise_speed_mps"):
        mission_from_params(_params(cruise_speed_mps="fast"))


def test_validate_config_requires_waypoints() -> None:
    with pytest.raises(MissionConfigError):
        validate_config(MissionConfig())


def test_load_mission_file_overrides_params(tmp_path) -> None:
    path = tmp_path / "mission.yaml"
    path.write_text(
        "api_version: 1\n"
        "delivery_mode: true\n"
        "hover_s: 2.5\n"
        "waypoints:\n"
        "  - [1.0, 2.0, 3.0]\n"
        "  - {x: 4.0, y: 5.0, z: 6.0}\n"
        "  - {latitude: 47.3978, longitude: 8.5461, altitude: 540.0}\n"
    )

    config = load_mission(path, overrides=_params(hover_s=9.0, simulation_mode=True))

    assert config.delivery_mode is True
    assert config.simulation_mode is True
    assert config.hover_s == 2.5
    assert config.waypoints == (
        Waypoint(1.0, 2.0, 3.0),
        Waypoint(4.0, 5.0, 6.0),
        GeoWaypoint(47.3978, 8.5461, 540.0),
    )


def test_load_mission_keeps_param_waypoints_without_list(tmp_path) -> None:
    path = tmp_path / "mission.yaml"
    path.write_text("api_version: 1\nreturn_home_mode: true\n")

    config = load_mission(path, overrides=_params())

    assert config.return_home_mode is True
    assert len(config.waypoints) == 2


def test_load_mission_errors(tmp_path) -> None:
    with pytest.raises(MissionConfigError, match="not found"):
        load_mission(tmp_path / "missing.yaml")

    bad_yaml = tmp_path / "bad.yaml"
    bad_yaml.write_text("waypoints: [1, 2\n")
    with pytest.raises(MissionConfigError, match="not valid YAML"):
        load_mission(bad_yaml)

    wrong_version = tmp_path / "v2.yaml"
    wrong_version.write_text("api_version: 2\nwaypoints: [[1, 2, 3]]\n")
    with pytest.raises(MissionConfigError, match="api_version"):
        load_mission(wrong_version)

    not_mapping = tmp_path / "list.yaml"
    not_mapping.write_text("- [1, 2, 3]\n")
    with pytest.raises(MissionConfigError, match="mapping"):
        load_mission(not_mapping)


@pytest.mark.parametrize(
    "entry",
    [
        [1.0, 2.0],
        {"x": 1.0, "y": "north", "z": 2.0},
        {"latitude": 95.0, "longitude": 8.0},
        {"latitude": 47.0},
        "1,2,3",
    ],
)
def test_malformed_waypoints_rejected(entry) -> None:
    with pytest.raises(MissionConfigError, match="Waypoint #0"):
        mission_from_params({"waypoints": [entry]})


def test_geodetic_waypoints_resolved_through_home_frame() -> None:
    calibrator = HomeFrameCalibrator(1)
    calibrator.sample(Odometry(1.0, 2.0, 0.0), REFERENCE)
    frame = calibrator.finalize()
    target = enu_to_geodetic((20.0, -5.0, 4.0), REFERENCE)

    resolved = resolve_waypoints(
        (Waypoint(1.0, 1.0, 1.0), GeoWaypoint(target.latitude, target.longitude, target.altitude)),
        frame,
    )

    assert resolved[0] == Waypoint(1.0, 1.0, 1.0)
    assert resolved[1].position == pytest.approx((21.0, -3.0, 4.0), abs=1e-6)


def test_shipped_delivery_mission_resolves_above_home() -> None:
    config = load_mission(PROJECT_ROOT / "offboard_mission" / "param" / "mission.delivery.yaml")
    calibrator = HomeFrameCalibrator(1)
    calibrator.sample(Odometry(0.0, 0.0, 0.0), REFERENCE)

    route = resolve_waypoints(config.waypoints, calibrator.finalize())

    assert len(route) == 3
    assert all(wp.z > 0.0 for wp in route)
    assert route[2].position == pytest.approx((38.2, 6.45, 5.0), abs=0.1)
