# benchmarks/metrics/convergence.py
import numpy as np
import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
from typing import List, Dict, Optional


def compute_convergence_rate(series: List[float], window: int = 50) -> Dict[str, float]:
    if not series:
        raise ValueError("Cannot compute convergence of an empty series")
    window_data = series if len(series) < window else series[-window:]

    if len(window_data) > 1:
        x = np.arange(len(window_data))
        slope = float(np.polyfit(x, window_data, 1)[0])
    else:
        slope = 0.0

    return {
        "convergence_slope": -slope,
        "stability": float(np.std(window_data)),
        "min_value": float(np.min(series))
    }


def plot_rate_limit_trace(rate_limits: List[float], reference: Optional[List[float]] = None, save_path: str = None,
                          config_label: str = "", extra_series: Optional[Dict[str, List[float]]] = None,
                          title: str = "Rate Limit Trajectory"):
    ticks = np.arange(1, len(rate_limits) + 1)
    plt.figure(figsize=(10, 4))
    if reference is not None:
        plt.plot(ticks, reference, 'k--', label="Reference")
    for name, values in (extra_series or {}).items():
        plt.plot(ticks, values, label=name)
    plt.plot(ticks, rate_limits, label=f"Output {config_label}".strip())
    plt.xlabel("Tick")
    plt.ylabel("Value")
    plt.title(title)
    plt.grid(True)
    plt.legend()

    if save_path:
        plt.savefig(save_path, dpi=300, bbox_inches="tight")
    else:
        plt.show()
    plt.close()
