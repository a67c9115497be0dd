import os
from benchmarks.systems.server import run_statistical_benchmark, run_tracking_benchmark

def main():
    print("Starting Rate Limit Controller Experiments")
    os.makedirs("docs/figures", exist_ok=True)
    os.makedirs("benchmarks/results", exist_ok=True)

    print("\nRunning PID vs EMA Rate Limit Benchmark...")
    run_statistical_benchmark()

    print("\nRunning PID Setpoint Tracking...")
    run_tracking_benchmark()

    print("\nExperiments completed. Results saved in benchmarks/results/ and plots in docs/figures/.")

if __name__ == "__main__":
    main()
