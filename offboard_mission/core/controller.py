"""Mission controller that wires a runtime with the mission FSM."""

from __future__ import annotations

from typing import Optional

from .fsm import MissionContext, MissionPhase, MissionRuntime, MissionStateMachine
from .plan import MissionConfig, MissionConfigError, validate_config


class MissionController:
    def __init__(self, runtime: MissionRuntime, config: MissionConfig) -> None:
        self._runtime = runtime
        try:
            validate_config(config)
        except MissionConfigError as exc:
            runtime.logger.error(f"Mission configuration error: {exc}")
            raise
        self._config = config

        runtime.logger.info(
            "Mission loaded: %d waypoint(s) simulation=%s delivery=%s return_home=%s"
            % (len(config.waypoints), config.simulation_mode, config.delivery_mode, config.return_home_mode)
        )
        self._context = MissionContext(runtime, config)
        self._state_machine = MissionStateMachine(self._context)

    @property
    def config(self) -> MissionConfig:
        return self._config

    @property
    def phase(self) -> MissionPhase:
        return self._state_machine.phase

    @property
    def finished(self) -> bool:
        return self._state_machine.finished

    @property
    def operation_time_s(self) -> Optional[float]:
        return self._context.operation_time_s

    @property
    def context(self) -> MissionContext:
        return self._context

    def tick(self) -> None:
        self._state_machine.tick()
