"""Command-line interface for the Gaussian mixture cluster count."""

import argparse

import jax.random as jrand

from examples.mixture.core import make_mixture
from tinyppl import posterior


def main():
    parser = argparse.ArgumentParser(description="Posterior mean number of clusters")
    parser.add_argument(
        "--num-particles",
        type=int,
        default=10_000,
        help="Number of particles (default: 10000)",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=None,
        help="Run particles on a thread pool with this many workers",
    )
    parser.add_argument("--seed", type=int, default=1, help="PRNG seed (default: 1)")
    args = parser.parse_args()

    strategy = "sequential" if args.workers is None else "threads"
    estimate = posterior(
        jrand.key(args.seed),
        make_mixture(),
        args.num_particles,
        strategy=strategy,
        max_workers=args.workers,
    )
    print("Mean number of clusters:", float(estimate))


if __name__ == "__main__":
    main()
