"""ROS 2 adapters for MAVROS telemetry, setpoints and commands."""

from .qos import CONTROL_QOS, EVENTS_QOS, LATCHED_QOS, TELEMETRY_QOS
from .setpoints import MavrosLink
from .telemetry import MavrosTelemetry

__all__ = [
    "CONTROL_QOS",
    "EVENTS_QOS",
    "LATCHED_QOS",
    "TELEMETRY_QOS",
    "MavrosLink",
    "MavrosTelemetry",
]
