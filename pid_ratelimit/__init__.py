from pid_ratelimit.core import BoundedHistory, Outcome
from pid_ratelimit.feedback import PIDConfig, PIDController
from pid_ratelimit.adaptation import RateLimitEMAController, RateLimitPIDController

__version__ = "0.1.0"

__all__ = [
    "BoundedHistory",
    "Outcome",
    "PIDConfig",
    "PIDController",
    "RateLimitEMAController",
    "RateLimitPIDController",
]
