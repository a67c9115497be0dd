# pid_ratelimit/adaptation/rate_limit_ema.py
from pid_ratelimit.core.outcome import Outcome


class RateLimitEMAController:
    def __init__(self, initial_rate_limit: float, alpha: float = 0.1, increase_factor: float = 1.2, decrease_factor: float = 0.9):
        self.initial_rate_limit = initial_rate_limit
        self._alpha = alpha
        self._increase_factor = increase_factor
        self._decrease_factor = decrease_factor

        self._ema_duration = initial_rate_limit
        self._throttle_duration = initial_rate_limit

    @property
    def alpha(self) -> float:
        return self._alpha

    @property
    def increase_factor(self) -> float:
        return self._increase_factor

    @property
    def decrease_factor(self) -> float:
        return self._decrease_factor

    @property
    def throttle_duration(self) -> float:
        return self._throttle_duration

    @property
    def rate_limit(self) -> float:
        return self._throttle_duration

    def record(self, outcome: Outcome) -> float:
        if outcome is Outcome.FAILURE:
            self._throttle_duration *= self._increase_factor
        else:
            self._throttle_duration *= self._decrease_factor

        self._ema_duration = self._alpha * self._throttle_duration + (1 - self._alpha) * self._ema_duration
        # only the smoothed value is kept, so smoothing compounds across ticks
        self._throttle_duration = self._ema_duration
        return self._throttle_duration

    def reset(self):
        self._ema_duration = self.initial_rate_limit
        self._throttle_duration = self.initial_rate_limit
