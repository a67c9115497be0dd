# pid_ratelimit/core/outcome.py
from enum import Enum


class Outcome(Enum):
    SUCCESS = "success"
    FAILURE = "failure"

    @property
    def weight(self) -> float:
        return 1.0 if self is Outcome.SUCCESS else 0.0

    @classmethod
    def from_bool(cls, ok: bool) -> "Outcome":
        return cls.SUCCESS if ok else cls.FAILURE
