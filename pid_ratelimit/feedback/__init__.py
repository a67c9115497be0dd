from pid_ratelimit.feedback.pid import PIDConfig, PIDController

__all__ = ["PIDConfig", "PIDController"]
