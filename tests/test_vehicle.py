"""Tests for the telemetry snapshot cache."""

from __future__ import annotations

import threading

from offboard_mission.core.vehicle import (
    MAV_STATE_STANDBY,
    Odometry,
    SatelliteFix,
    TelemetryCache,
    TelemetrySnapshot,
    VehicleState,
)


def test_initial_snapshot_is_empty() -> None:
    snapshot = TelemetryCache().snapshot()

    assert snapshot == TelemetrySnapshot()
    assert not snapshot.state.connected
    assert snapshot.odometry is None
    assert not snapshot.fix_received


def test_updates_replace_single_fields() -> None:
    cache = TelemetryCache()
    cache.update_state(VehicleState(connected=True, armed=True, mode="OFFBOARD", system_status=4))
    cache.update_odometry(Odometry(1.0, 2.0, 3.0, yaw=0.5))
    cache.update_fix(SatelliteFix(47.0, 8.0, 500.0))

    snapshot = cache.snapshot()
    assert snapshot.in_mode("OFFBOARD")
    assert snapshot.odometry.position == (1.0, 2.0, 3.0)
    assert snapshot.fix_received

    cache.update_state(VehicleState(connected=True, system_status=MAV_STATE_STANDBY))
    assert cache.snapshot().odometry == Odometry(1.0, 2.0, 3.0, yaw=0.5)
    assert cache.snapshot().state.system_status == MAV_STATE_STANDBY


def test_snapshot_is_not_affected_by_later_updates() -> None:
    cache = TelemetryCache()
    cache.update_odometry(Odometry(0.0, 0.0, 0.0))
    held = cache.snapshot()

    cache.update_odometry(Odometry(5.0, 5.0, 5.0))

    assert held.odometry == Odometry(0.0, 0.0, 0.0)
    assert cache.snapshot().odometry == Odometry(5.0, 5.0, 5.0)


def test_concurrent_writers_keep_every_field() -> None:
    cache = TelemetryCache()

    def write_odometry() -> None:
        for idx in range(2000):
            cache.update_odometry(Odometry(float(idx), 0.0, 0.0))

    def write_fix() -> None:
        for idx in range(2000):
            cache.update_fix(SatelliteFix(float(idx) * 1e-6, 0.0, 0.0))

    threads = [threading.Thread(target=write_odometry), threading.Thread(target=write_fix)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    snapshot = cache.snapshot()
    assert snapshot.odometry == Odometry(1999.0, 0.0, 0.0)
    assert snapshot.fix == SatelliteFix(1999 * 1e-6, 0.0, 0.0)
