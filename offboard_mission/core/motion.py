"""Velocity and heading commands toward a local-frame target (ROS-free)."""

from __future__ import annotations

import math
from typing import Final, Sequence, Tuple

Vector3 = Tuple[float, float, float]
Quaternion = Tuple[float, float, float, float]  # (x, y, z, w)

TWO_PI: Final = 2.0 * math.pi
APPROACH_RADIUS_M: Final = 3.0


def distance(a: Sequence[float], b: Sequence[float]) -> float:
    return math.sqrt((b[0] - a[0]) ** 2 + (b[1] - a[1]) ** 2 + (b[2] - a[2]) ** 2)


def position_reached(tolerance: float, current: Sequence[float], target: Sequence[float]) -> bool:
    """Strict check: a distance equal to the tolerance is not reached."""

    return distance(current, target) < tolerance


def velocity_vector(speed: float, current: Sequence[float], target: Sequence[float]) -> Vector3:
    """Unit vector from ``current`` to ``target`` scaled by ``speed``.

    The direction is undefined when both points coincide; callers test
    :func:`position_reached` first, so this raises instead of returning NaNs.
    """

    dx = target[0] - current[0]
    dy = target[1] - current[1]
    dz = target[2] - current[2]
    d = math.sqrt(dx * dx + dy * dy + dz * dz)
    if d == 0.0:
        raise ValueError("velocity_vector: current and target positions coincide")
    return (dx / d * speed, dy / d * speed, dz / d * speed)


def approach_speed(
    dist: float, cruise_speed: float, slow_speed: float, radius: float = APPROACH_RADIUS_M
) -> float:
    """Slow down inside the deceleration zone around the target."""

    return slow_speed if dist < radius else cruise_speed


def offset_position(current: Sequence[float], velocity: Sequence[float]) -> Vector3:
    """One-second look-ahead setpoint: current position advanced by the velocity."""

    return (current[0] + velocity[0], current[1] + velocity[1], current[2] + velocity[2])


# ---------------------------------------------------------------------------
# Heading
# ---------------------------------------------------------------------------

def yaw_target(current: Sequence[float], target: Sequence[float]) -> float:
    """Bearing from ``current`` to ``target`` in (-pi, pi], 0 along +x (east)."""

    dx = target[0] - current[0]
    dy = target[1] - current[1]
    # atan2(-0.0, -x) gives -pi and atan2(0.0, -0.0) gives pi; signed zeros collapse to +0.0.
    if dx == 0.0:
        dx = 0.0
    if dy == 0.0:
        dy = 0.0
    return math.atan2(dy, dx)


def wrap_yaw_target(current_yaw: float, target_yaw: float) -> float:
    """Shift the target by 2*pi so the rotation takes the short way round."""

    delta = current_yaw - target_yaw
    if delta >= math.pi:
        return target_yaw + TWO_PI
    if delta <= -math.pi:
        return target_yaw - TWO_PI
    return target_yaw


def yaw_step(current_yaw: float, target_yaw: float, rate_limit: float) -> float:
    """Next heading command: toward the wrapped target by at most ``rate_limit``."""

    target = wrap_yaw_target(current_yaw, target_yaw)
    if target <= current_yaw:
        if current_yaw - target > rate_limit:
            return current_yaw - rate_limit
        return target
    if target - current_yaw > rate_limit:
        return current_yaw + rate_limit
    return target


def yaw_error(current_yaw: float, target_yaw: float) -> float:
    return abs(current_yaw - wrap_yaw_target(current_yaw, target_yaw))


def yaw_from_quaternion(x: float, y: float, z: float, w: float) -> float:
    siny_cosp = 2.0 * (w * z + x * y)
    cosy_cosp = 1.0 - 2.0 * (y * y + z * z)
    return math.atan2(siny_cosp, cosy_cosp)


def quaternion_from_yaw(yaw: float) -> Quaternion:
    half = 0.5 * yaw
    return (0.0, 0.0, math.sin(half), math.cos(half))


__all__ = [
    "APPROACH_RADIUS_M",
    "distance",
    "position_reached",
    "velocity_vector",
    "approach_speed",
    "offset_position",
    "yaw_target",
    "wrap_yaw_target",
    "yaw_step",
    "yaw_error",
    "yaw_from_quaternion",
    "quaternion_from_yaw",
]
