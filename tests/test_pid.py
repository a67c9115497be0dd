import math

import pytest

from pid_ratelimit.feedback.pid import PIDConfig, PIDController


def test_proportional_term_accumulates_into_output():
    pid = PIDController(kp=1.0, ki=0.0, kd=0.0, error_window_size=5, setpoint=10.0, initial_output=0.0)

    assert pid.update(4.0) == 6.0
    assert pid.update(7.0) == 9.0
    assert pid.output == 9.0


def test_derivative_uses_error_before_append():
    pid = PIDController(kp=0.0, ki=0.0, kd=1.0, error_window_size=5, setpoint=10.0, initial_output=0.0)

    pid.update(4.0)
    assert pid.output == 6.0

    # error drops from 6 to 3
    pid.update(7.0)
    assert pid.output == 3.0


def test_integral_sums_error_window():
    pid = PIDController(kp=0.0, ki=1.0, kd=0.0, error_window_size=2, setpoint=10.0, initial_output=0.0)

    pid.update(4.0)
    assert pid.output == 6.0
    pid.update(7.0)
    assert pid.output == 15.0
    pid.update(10.0)
    assert pid.errors == [3.0, 0.0]
    assert pid.output == 18.0


def test_error_sum_matches_retained_errors():
    pid = PIDController(kp=0.0, ki=0.0, kd=0.0, error_window_size=3, setpoint=0.0, initial_output=0.0)
    for pv in [-1.0, 2.0, -3.0]:
        pid.update(pv)

    assert pid.errors == [1.0, -2.0, 3.0]
    assert pid.error_sum == 2.0


def test_initial_output_is_starting_point():
    pid = PIDController(error_window_size=10, setpoint=1.0, initial_output=42.0)
    assert pid.output == 42.0
    assert pid.error_sum == 0.0


def test_zero_error_window_keeps_history_empty():
    pid = PIDController(kp=0.0, ki=1.0, kd=1.0, error_window_size=0, setpoint=0.0, initial_output=0.0)
    for pv in [-5.0, -5.0, 3.0, 1.5]:
        pid.update(pv)
        assert pid.error_sum == 0.0
        assert pid.errors == []


def test_zero_error_window_derivative_sees_no_previous_error():
    no_window = PIDController(kp=0.0, ki=0.0, kd=1.0, error_window_size=0, setpoint=0.0, initial_output=0.0)
    one_window = PIDController(kp=0.0, ki=0.0, kd=1.0, error_window_size=1, setpoint=0.0, initial_output=0.0)

    for pid in (no_window, one_window):
        pid.update(-5.0)
        pid.update(-5.0)

    assert no_window.output == 10.0
    assert one_window.output == 5.0


def test_identical_controllers_are_deterministic():
    params = dict(kp=0.3, ki=0.07, kd=0.11, error_window_size=4, setpoint=0.75, initial_output=1.0)
    a = PIDController(**params)
    b = PIDController(**params)

    readings = [0.1, 0.9, 0.333, 0.5, 1.7, -0.2, 0.75, 0.6]
    trace_a = [a.update(pv) for pv in readings]
    trace_b = [b.update(pv) for pv in readings]
    assert trace_a == trace_b


def test_gain_changes_apply_from_next_update():
    pid = PIDController(kp=1.0, ki=0.0, kd=0.0, error_window_size=5, setpoint=10.0, initial_output=0.0)
    pid.update(8.0)
    assert pid.output == 2.0

    pid.set_gains(kp=2.0)
    assert pid.output == 2.0
    assert pid.kp == 2.0

    pid.update(8.0)
    assert pid.output == 6.0


def test_setpoint_change_applies_from_next_update():
    pid = PIDController(kp=1.0, ki=0.0, kd=0.0, error_window_size=5, setpoint=0.0, initial_output=0.0)
    pid.update(0.0)
    pid.set_setpoint(3.0)
    assert pid.errors == [0.0]

    pid.update(0.0)
    assert pid.output == 3.0
    assert pid.setpoint == 3.0


def test_shrinking_error_window_trims_on_next_update():
    pid = PIDController(kp=0.0, ki=0.0, kd=0.0, error_window_size=3, setpoint=0.0, initial_output=0.0)
    for pv in [-1.0, -2.0, -3.0]:
        pid.update(pv)

    pid.config.set_error_window_size(1)
    assert pid.error_window_size == 1
    assert pid.error_sum == 6.0

    pid.update(-4.0)
    assert pid.errors == [4.0]


def test_non_finite_input_propagates():
    pid = PIDController(error_window_size=3, setpoint=0.5, initial_output=1.0)
    pid.update(float('nan'))
    assert math.isnan(pid.output)


def test_reset_restores_initial_output():
    pid = PIDController(kp=1.0, error_window_size=3, setpoint=1.0, initial_output=2.0)
    pid.update(0.0)
    pid.reset()
    assert pid.output == 2.0
    assert pid.errors == []

    pid.reset(initial_output=7.5)
    assert pid.output == 7.5


def test_config_setters_leave_unset_gains_alone():
    config = PIDConfig(kp=1.0, ki=2.0, kd=3.0, setpoint=0.5, error_window_size=8)
    config.set_gains(ki=0.25)

    assert config.as_dict() == pytest.approx({
        'kp': 1.0, 'ki': 0.25, 'kd': 3.0, 'setpoint': 0.5, 'error_window_size': 8
    })


def test_config_cannot_be_replaced():
    pid = PIDController(kp=0.0, ki=0.0, kd=0.0, error_window_size=3, setpoint=0.0, initial_output=0.0)
    with pytest.raises(AttributeError):
        pid.config = PIDConfig(error_window_size=10)

    for pv in [-1.0, -2.0, -3.0]:
        pid.update(pv)
    pid.set_error_window_size(2)
    pid.update(-4.0)
    assert pid.errors == [3.0, 4.0]
