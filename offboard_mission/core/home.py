"""Home-frame capture: averages the odometry/satellite offset at startup."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from .geodesy import geodetic_to_enu
from .vehicle import Odometry, SatelliteFix

Vector3 = Tuple[float, float, float]

DEFAULT_WINDOW = 100


class CalibrationError(RuntimeError):
    """Raised when the home frame is requested before any sample was taken."""


@dataclass(frozen=True)
class HomeFrame:
    home_pose: Odometry
    home_fix: SatelliteFix
    frame_offset: Vector3
    reference_fix: SatelliteFix
    samples: int

    def to_local(self, fix: SatelliteFix) -> Vector3:
        """Map a satellite fix into the vehicle's odometry frame."""

        east, north, up = geodetic_to_enu(fix, self.reference_fix)
        ox, oy, oz = self.frame_offset
        return (east + ox, north + oy, up + oz)


class HomeFrameCalibrator:
    """Running mean of ``odometry - enu(fix)`` over a fixed window of ticks.

    Offsets are measured against the first sampled fix, so satellite noise
    during the window averages out together with odometry noise.
    """

    def __init__(self, window: int = DEFAULT_WINDOW) -> None:
        if window <= 0:
            raise ValueError("Calibration window must be positive")
        self._window = int(window)
        self._count = 0
        self._mean = [0.0, 0.0, 0.0]
        self._reference: Optional[SatelliteFix] = None
        self._last_odometry: Optional[Odometry] = None
        self._last_fix: Optional[SatelliteFix] = None

    @property
    def window(self) -> int:
        return self._window

    @property
    def count(self) -> int:
        return self._count

    @property
    def complete(self) -> bool:
        return self._count >= self._window

    def sample(self, odometry: Odometry, fix: SatelliteFix) -> None:
        if self._reference is None:
            self._reference = fix
        local = geodetic_to_enu(fix, self._reference)
        self._count += 1
        for axis, (odom_value, local_value) in enumerate(zip(odometry.position, local)):
            offset = odom_value - local_value
            self._mean[axis] += (offset - self._mean[axis]) / self._count
        self._last_odometry = odometry
        self._last_fix = fix

    def finalize(self) -> HomeFrame:
        if self._count == 0 or self._last_odometry is None or self._last_fix is None:
            raise CalibrationError("Home frame requested before any odometry/fix sample")
        assert self._reference is not None
        return HomeFrame(
            home_pose=self._last_odometry,
            home_fix=self._last_fix,
            frame_offset=(self._mean[0], self._mean[1], self._mean[2]),
            reference_fix=self._reference,
            samples=self._count,
        )


__all__ = ["CalibrationError", "HomeFrame", "HomeFrameCalibrator"]
