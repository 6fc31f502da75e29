"""Command-line interface for the three-coin model."""

import argparse

import jax.random as jrand

from examples.coins.core import analytic_fair_coin_posterior, make_three_coins
from tinyppl import posterior


def main():
    """Main CLI entry point comparing analytic and Monte Carlo answers."""
    parser = argparse.ArgumentParser(description="Three-coin posterior")
    parser.add_argument(
        "--num-heads", type=int, default=3, help="Observed heads (default: 3)"
    )
    parser.add_argument(
        "--num-particles",
        type=int,
        default=1_000_000,
        help="Number of particles (default: 1000000)",
    )
    parser.add_argument("--seed", type=int, default=1, help="PRNG seed (default: 1)")
    args = parser.parse_args()

    program = make_three_coins(args.num_heads)
    estimate = posterior(
        jrand.key(args.seed), program, args.num_particles, strategy="vmap"
    )
    print("Analytical:", analytic_fair_coin_posterior(args.num_heads))
    print("        MC:", float(estimate))


if __name__ == "__main__":
    main()
