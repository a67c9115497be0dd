from pid_ratelimit.core.history import BoundedHistory
from pid_ratelimit.core.outcome import Outcome

__all__ = ["BoundedHistory", "Outcome"]
