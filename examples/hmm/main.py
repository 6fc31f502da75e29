"""Command-line interface comparing SNIS against exact HMM filtering."""

import argparse

import jax.numpy as jnp
import jax.random as jrand

from examples.hmm.core import create_simple_hmm_params, forward_filter, make_hmm
from tinyppl import importance_sample


def main():
    parser = argparse.ArgumentParser(description="Discrete HMM final-state posterior")
    parser.add_argument(
        "--observations",
        type=int,
        nargs="+",
        default=[0, 0, 1, 1, 1],
        help="Observed symbols (default: 0 0 1 1 1)",
    )
    parser.add_argument(
        "--num-particles",
        type=int,
        default=100_000,
        help="Number of particles (default: 100000)",
    )
    parser.add_argument("--seed", type=int, default=1, help="PRNG seed (default: 1)")
    args = parser.parse_args()

    observations = jnp.array(args.observations)
    params = create_simple_hmm_params()
    filtered, log_marginal = forward_filter(observations, *params)

    particles = importance_sample(
        jrand.key(args.seed),
        make_hmm(observations, *params),
        args.num_particles,
        strategy="vmap",
    )
    print("Analytical E[x_T]:", float(filtered[1]))
    print("        MC E[x_T]:", float(particles.estimate()))
    print("Analytical log p(y):", float(log_marginal))
    print("        MC log p(y):", float(particles.log_marginal_likelihood()))


if __name__ == "__main__":
    main()
