from pid_ratelimit.adaptation.rate_limit_ema import RateLimitEMAController
from pid_ratelimit.adaptation.rate_limit_pid import RateLimitPIDController

__all__ = ["RateLimitEMAController", "RateLimitPIDController"]
