import numpy as np
import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
from pid_ratelimit.adaptation.rate_limit_ema import RateLimitEMAController
from pid_ratelimit.adaptation.rate_limit_pid import RateLimitPIDController
from pid_ratelimit.core.outcome import Outcome
from pid_ratelimit.feedback.pid import PIDController
from benchmarks.metrics.convergence import compute_convergence_rate, plot_rate_limit_trace
from benchmarks.metrics.error_analysis import compute_error_rate, plot_error_distribution
from benchmarks.metrics.statistical_tests import StatisticalValidator
import os
import json
from scipy import stats
from typing import List, Dict, Optional

FIGURES_DIR = "docs/figures"
RESULTS_DIR = "benchmarks/results"

DEFAULT_PID_CONFIG = {
    'kp': 2.0,
    'ki': 0.05,
    'kd': 0.01,
    'error_window_size': 20,
    'outcome_window_size': 2,
    'initial_rate_limit': 5.0,
    'target_success_rate': 0.98,
    'server_rate_limit': 15.0
}

DEFAULT_EMA_CONFIG = {
    'alpha': 0.1,
    'increase_factor': 1.2,
    'decrease_factor': 0.9,
    'initial_rate_limit': 2.0,
    'server_rate_limit': 15.0
}

DEFAULT_TRACKING_CONFIG = {
    'kp': 0.1,
    'ki': 0.05,
    'kd': 0.01,
    'error_window_size': 30,
    'setpoint': 0.0,
    'initial_output': 0.0
}

CONTROLLER_KINDS = ("pid", "ema")


class ServerSimulator:
    """Server that accepts a request only when the client's throttle interval is above its limit."""

    def __init__(self, server_rate_limit: float, jitter: float = 0.0):
        self.server_rate_limit = server_rate_limit
        self.jitter = jitter

    def respond(self, current_rate_limit: float) -> Outcome:
        if not np.isscalar(current_rate_limit):
            raise ValueError(f"Rate limit must be scalar, got shape {np.shape(current_rate_limit)}")
        threshold = self.server_rate_limit
        if self.jitter > 0:
            threshold += np.random.normal(0, self.jitter)
        return Outcome.from_bool(current_rate_limit > threshold)


def build_controller(config: Dict, controller_kind: str):
    if controller_kind not in CONTROLLER_KINDS:
        raise ValueError(f"Unknown controller kind '{controller_kind}', expected one of {CONTROLLER_KINDS}")

    required = DEFAULT_PID_CONFIG if controller_kind == "pid" else DEFAULT_EMA_CONFIG
    missing = sorted(set(required) - set(config))
    if missing:
        raise ValueError(f"Config for '{controller_kind}' is missing keys: {missing}")

    if controller_kind == "pid":
        return RateLimitPIDController(
            kp=config['kp'],
            ki=config['ki'],
            kd=config['kd'],
            error_window_size=config['error_window_size'],
            target_success_rate=config['target_success_rate'],
            initial_rate_limit=config['initial_rate_limit'],
            outcome_window_size=config['outcome_window_size']
        )
    return RateLimitEMAController(
        initial_rate_limit=config['initial_rate_limit'],
        alpha=config['alpha'],
        increase_factor=config['increase_factor'],
        decrease_factor=config['decrease_factor']
    )


class RateLimitBenchmark:
    def __init__(self, n_trials: int = 15, n_ticks: int = 500, jitter: float = 0.5, save_artifacts: bool = True):
        self.n_trials = n_trials
        self.n_ticks = n_ticks
        self.jitter = jitter
        self.save_artifacts = save_artifacts

    def run_single_trial(self, trial_id: int, config: Dict, controller_kind: str = "pid") -> Dict:
        np.random.seed(42 + trial_id)
        controller = build_controller(config, controller_kind)
        server = ServerSimulator(config['server_rate_limit'], jitter=self.jitter)
        validator = StatisticalValidator()

        current_rate_limit = controller.rate_limit
        samples = []
        outcomes = []
        distance_history = []

        for clock in range(1, self.n_ticks + 1):
            outcome = server.respond(current_rate_limit)
            controller.record(outcome)
            samples.append({'clock': clock, 'outcome': outcome.value, 'rate_limit': float(current_rate_limit)})
            outcomes.append(outcome)
            distance_history.append(float(abs(current_rate_limit - server.server_rate_limit)))
            current_rate_limit = controller.rate_limit

        rate_limits = [s['rate_limit'] for s in samples]

        if self.save_artifacts and trial_id % 5 == 0:
            self._plot_trial(trial_id, controller_kind, samples, server.server_rate_limit)

        stats_out = validator.validate_performance(distance_history)
        convergence = compute_convergence_rate(distance_history, window=100)
        result = {
            'trial_id': trial_id,
            'controller': controller_kind,
            'final_rate_limit': rate_limits[-1],
            'error_rate': compute_error_rate(outcomes),
            'final_distance': distance_history[-1],
            'mean_distance': float(np.mean(distance_history)),
            'convergence_rate': convergence['convergence_slope'],
            'stability': convergence['stability'],
            'distance_history': distance_history,
            'diagnostics': stats_out,
            'samples': samples
        }

        if self.save_artifacts:
            os.makedirs(RESULTS_DIR, exist_ok=True)
            with open(f"{RESULTS_DIR}/ratelimit_trial_{controller_kind}_{trial_id}_samples.json", "w") as f:
                json.dump(samples, f, indent=2)
        return result

    def _plot_trial(self, trial_id: int, controller_kind: str, samples: List[Dict], server_rate_limit: float):
        os.makedirs(FIGURES_DIR, exist_ok=True)
        clocks = np.array([s['clock'] for s in samples])
        limits = np.array([s['rate_limit'] for s in samples])
        ok = np.array([s['outcome'] == Outcome.SUCCESS.value for s in samples])

        plt.figure(figsize=(10, 4))
        plt.scatter(clocks[ok], limits[ok], s=6, color="green", label="Success")
        plt.scatter(clocks[~ok], limits[~ok], s=6, color="red", label="Failure")
        plt.axhline(server_rate_limit, color='k', linestyle='--', label="Server limit")
        plt.xlabel("Tick")
        plt.ylabel("Rate Limit")
        plt.title(f"{controller_kind.upper()} rate limiter, trial {trial_id}")
        plt.legend()
        plt.grid(True)
        plt.savefig(f"{FIGURES_DIR}/ratelimit_trial_{controller_kind}_{trial_id}.png", dpi=300, bbox_inches="tight")
        plt.close()

    def run_benchmark(self, config: Dict, controller_kind: str = "pid") -> Dict:
        print(f"Running {controller_kind.upper()} rate limit benchmark with {self.n_trials} trials...")
        results = [self.run_single_trial(trial, config, controller_kind) for trial in range(self.n_trials)]
        return self._analyze_results(results)

    def _analyze_results(self, results: List[Dict]) -> Dict:
        final_distances = [r['final_distance'] for r in results]
        error_rates = [r['error_rate'] for r in results]
        stabilities = [r['stability'] for r in results]

        def confidence_interval(data, confidence=0.95):
            n = len(data)
            mean = np.mean(data)
            se = stats.sem(data)
            h = se * stats.t.ppf((1 + confidence) / 2., n - 1)
            return mean - h, mean + h

        def summarize(data):
            spread = np.std(data) > 0 and len(data) > 1
            return {
                'mean': float(np.mean(data)),
                'std': float(np.std(data)),
                'median': float(np.median(data)),
                'min': float(np.min(data)),
                'max': float(np.max(data)),
                'ci_95': confidence_interval(data) if spread else (0, 0)
            }

        return {
            'summary_statistics': {
                'final_distance': summarize(final_distances),
                'error_rate': summarize(error_rates),
                'stability': summarize(stabilities)
            },
            'raw_results': results
        }

    def compare_controllers(self, pid_config: Optional[Dict] = None, ema_config: Optional[Dict] = None) -> Dict:
        pid_config = pid_config or DEFAULT_PID_CONFIG
        ema_config = ema_config or DEFAULT_EMA_CONFIG
        print("Comparing PID and EMA rate limiters")
        results_pid = self.run_benchmark(pid_config, "pid")
        results_ema = self.run_benchmark(ema_config, "ema")

        dist_pid = [r['final_distance'] for r in results_pid['raw_results']]
        dist_ema = [r['final_distance'] for r in results_ema['raw_results']]
        err_pid = [r['error_rate'] for r in results_pid['raw_results']]
        err_ema = [r['error_rate'] for r in results_ema['raw_results']]

        validator = StatisticalValidator()
        return {
            'PID': results_pid,
            'EMA': results_ema,
            'statistical_tests': {
                'final_distance': validator.compare_samples(dist_pid, dist_ema),
                'error_rate': validator.compare_samples(err_pid, err_ema)
            }
        }


def run_setpoint_tracking(config: Optional[Dict] = None, n_ticks: int = 200, setpoint_schedule: Optional[Dict[int, float]] = None) -> Dict[str, List[float]]:
    """Closed loop where each tick's process variable is the previous one plus the previous output."""
    config = config or DEFAULT_TRACKING_CONFIG
    missing = sorted(set(DEFAULT_TRACKING_CONFIG) - set(config))
    if missing:
        raise ValueError(f"Tracking config is missing keys: {missing}")

    pid = PIDController(**{k: config[k] for k in DEFAULT_TRACKING_CONFIG})
    setpoint_schedule = setpoint_schedule or {}

    setpoints, process_variables, outputs = [], [], []
    last_pv, last_output = 0.0, 0.0
    for clock in range(1, n_ticks + 1):
        if clock in setpoint_schedule:
            pid.set_setpoint(setpoint_schedule[clock])
        process_variable = last_pv + last_output
        pid.update(process_variable)

        setpoints.append(pid.setpoint)
        process_variables.append(process_variable)
        outputs.append(pid.output)
        last_pv, last_output = process_variable, pid.output

    return {
        'setpoint': setpoints,
        'process_variable': process_variables,
        'output': outputs
    }


def run_statistical_benchmark(n_trials: int = 15, n_ticks: int = 500) -> Dict:
    benchmark = RateLimitBenchmark(n_trials=n_trials, n_ticks=n_ticks)
    comparison = benchmark.compare_controllers(DEFAULT_PID_CONFIG, DEFAULT_EMA_CONFIG)
    os.makedirs(RESULTS_DIR, exist_ok=True)
    with open(f"{RESULTS_DIR}/ratelimit_statistical_benchmark.json", "w") as f:
        json.dump(comparison, f, indent=2, default=str)

    os.makedirs(FIGURES_DIR, exist_ok=True)
    for name, config in (("PID", DEFAULT_PID_CONFIG), ("EMA", DEFAULT_EMA_CONFIG)):
        first_trial = comparison[name]['raw_results'][0]
        rate_limits = [s['rate_limit'] for s in first_trial['samples']]
        plot_rate_limit_trace(rate_limits, reference=[config['server_rate_limit']] * len(rate_limits),
                              save_path=f"{FIGURES_DIR}/ratelimit_trace_{name.lower()}.png", config_label=name)
        plot_error_distribution(first_trial['distance_history'],
                                save_path=f"{FIGURES_DIR}/ratelimit_distance_{name.lower()}.png", config_label=name)

    tests = comparison['statistical_tests']
    print("Statistical benchmark completed")
    print(f"PID vs EMA final distance significant difference: {tests['final_distance'].get('significant', False)}")
    print(f"PID vs EMA error rate significant difference: {tests['error_rate'].get('significant', False)}")
    return comparison


def run_tracking_benchmark(n_ticks: int = 200) -> Dict[str, List[float]]:
    trace = run_setpoint_tracking(n_ticks=n_ticks, setpoint_schedule={1: 10.0, 100: -5.0})
    os.makedirs(FIGURES_DIR, exist_ok=True)
    plot_rate_limit_trace(trace['output'], reference=trace['setpoint'],
                          save_path=f"{FIGURES_DIR}/pid_setpoint_tracking.png",
                          extra_series={'Process Variable': trace['process_variable']},
                          title="PID Setpoint Tracking")
    print("Setpoint tracking trace saved")
    return trace


if __name__ == "__main__":
    run_statistical_benchmark()
