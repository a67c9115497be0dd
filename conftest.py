import pytest
from pid_ratelimit.core.outcome import Outcome


@pytest.fixture
def outcome_sequence():
    return [Outcome.SUCCESS, Outcome.SUCCESS, Outcome.FAILURE, Outcome.SUCCESS,
            Outcome.FAILURE, Outcome.FAILURE, Outcome.SUCCESS, Outcome.FAILURE]


@pytest.fixture
def artifacts_dir(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    return tmp_path
