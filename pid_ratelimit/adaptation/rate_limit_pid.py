# pid_ratelimit/adaptation/rate_limit_pid.py
import warnings
import numpy as np
from typing import Optional, Tuple

from pid_ratelimit.core.history import BoundedHistory
from pid_ratelimit.core.outcome import Outcome
from pid_ratelimit.feedback.pid import PIDController


class RateLimitPIDController:
    """PID-driven rate limiter.

    The success rate over the last ``outcome_window_size`` outcomes is the
    process variable and ``target_success_rate`` is the setpoint. The owned
    PID's output is the rate limit, starting at ``initial_rate_limit``.

    Args:
        kp: proportional gain, reacts to the current success-rate error.
        ki: integral gain, weighs the errors kept in the error window.
        kd: derivative gain, reacts to the change in error between ticks.
        error_window_size: number of past errors summed by the integral term.
        target_success_rate: success rate the controller steers towards.
        initial_rate_limit: starting value of the rate limit.
        outcome_window_size: number of recent outcomes in the success rate.
    """

    def __init__(self,
                 kp: float = 0.2,
                 ki: float = 0.1,
                 kd: float = 0.05,
                 *,
                 error_window_size: int,
                 target_success_rate: float,
                 initial_rate_limit: float,
                 outcome_window_size: int):
        self.pid = PIDController(kp=kp, ki=ki, kd=kd, error_window_size=error_window_size,
                                 setpoint=target_success_rate, initial_output=initial_rate_limit)
        self._outcomes = BoundedHistory(outcome_window_size)
        self._success_rate: Optional[float] = None

        if outcome_window_size <= 0:
            warnings.warn(f"Outcome window size {outcome_window_size} keeps no outcomes; "
                          f"the success rate will be NaN", RuntimeWarning)

    @property
    def target_success_rate(self) -> float:
        return self.pid.setpoint

    @property
    def outcome_window_size(self) -> int:
        return self._outcomes.capacity

    @property
    def rate_limit(self) -> float:
        return self.pid.output

    @property
    def success_rate(self) -> Optional[float]:
        return self._success_rate

    @property
    def outcomes(self) -> Tuple[Outcome, ...]:
        return tuple(Outcome.SUCCESS if w == Outcome.SUCCESS.weight else Outcome.FAILURE for w in self._outcomes)

    def _compute_success_rate(self) -> float:
        successes = np.float64(self._outcomes.count(Outcome.SUCCESS.weight))
        total = np.float64(len(self._outcomes))
        # an empty window divides 0 by 0
        with np.errstate(invalid='ignore', divide='ignore'):
            return float(successes / total)

    def record(self, outcome: Outcome) -> float:
        self._outcomes.push(outcome.weight)
        self._success_rate = self._compute_success_rate()
        return self.pid.update(self._success_rate)

    def reset(self):
        self._outcomes.clear()
        self._success_rate = None
        self.pid.reset()
