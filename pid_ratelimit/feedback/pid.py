# pid_ratelimit/feedback/pid.py
from typing import Callable, List, Optional

from pid_ratelimit.core.history import BoundedHistory


class PIDConfig:
    """Gains, setpoint and error window of a PIDController.

    Values are changed through the setters only. A change is picked up on
    the next update; past errors are never recomputed.
    """

    def __init__(self, kp: float = 0.2, ki: float = 0.1, kd: float = 0.05, setpoint: float = 0.0, error_window_size: int = 30):
        self._kp = kp
        self._ki = ki
        self._kd = kd
        self._setpoint = setpoint
        self._error_window_size = error_window_size
        self._listeners: List[Callable[["PIDConfig"], None]] = []

    @property
    def kp(self) -> float:
        return self._kp

    @property
    def ki(self) -> float:
        return self._ki

    @property
    def kd(self) -> float:
        return self._kd

    @property
    def setpoint(self) -> float:
        return self._setpoint

    @property
    def error_window_size(self) -> int:
        return self._error_window_size

    def set_gains(self, kp: Optional[float] = None, ki: Optional[float] = None, kd: Optional[float] = None):
        if kp is not None:
            self._kp = kp
        if ki is not None:
            self._ki = ki
        if kd is not None:
            self._kd = kd

    def set_setpoint(self, setpoint: float):
        self._setpoint = setpoint

    def set_error_window_size(self, size: int):
        self._error_window_size = size
        for listener in self._listeners:
            listener(self)

    def subscribe(self, listener: Callable[["PIDConfig"], None]):
        self._listeners.append(listener)

    def as_dict(self) -> dict:
        return {
            'kp': self._kp,
            'ki': self._ki,
            'kd': self._kd,
            'setpoint': self._setpoint,
            'error_window_size': self._error_window_size
        }


class PIDController:
    def __init__(self, kp: float = 0.2, ki: float = 0.1, kd: float = 0.05, error_window_size: int = 30, setpoint: float = 0.0, initial_output: float = 0.0):
        self._config = PIDConfig(kp=kp, ki=ki, kd=kd, setpoint=setpoint, error_window_size=error_window_size)
        self.initial_output = initial_output
        self._output = initial_output
        self._errors = BoundedHistory(error_window_size)
        self._config.subscribe(self._resize_errors)

    @property
    def config(self) -> PIDConfig:
        return self._config

    def _resize_errors(self, config: PIDConfig):
        self._errors.set_capacity(config.error_window_size)

    @property
    def output(self) -> float:
        return self._output

    @property
    def error_sum(self) -> float:
        return self._errors.sum()

    @property
    def errors(self) -> List[float]:
        return list(self._errors)

    @property
    def kp(self) -> float:
        return self.config.kp

    @property
    def ki(self) -> float:
        return self.config.ki

    @property
    def kd(self) -> float:
        return self.config.kd

    @property
    def setpoint(self) -> float:
        return self.config.setpoint

    @property
    def error_window_size(self) -> int:
        return self.config.error_window_size

    def set_gains(self, kp: Optional[float] = None, ki: Optional[float] = None, kd: Optional[float] = None):
        self.config.set_gains(kp=kp, ki=ki, kd=kd)

    def set_setpoint(self, setpoint: float):
        self.config.set_setpoint(setpoint)

    def set_error_window_size(self, size: int):
        self.config.set_error_window_size(size)

    def reset(self, initial_output: Optional[float] = None):
        self._errors.clear()
        self._output = self.initial_output if initial_output is None else initial_output

    def update(self, process_variable: float) -> float:
        error = self.config.setpoint - process_variable
        previous_error = self._errors.last()
        if previous_error is None:
            previous_error = 0.0
        self._errors.push(error)

        p = self.config.kp * error
        i = self.config.ki * self.error_sum
        d = self.config.kd * (error - previous_error)

        # output accumulates every term, not only the integral
        self._output = self._output + (p + i + d)
        return self._output
