"""Discrete hidden Markov model with exact forward filtering for comparison.

The program samples the latent state sequence from the prior and observes
each emission, returning the final latent state. Its posterior mean is
compared against the exact filtering distribution p(x_T | y_{1:T}).
"""

import jax
import jax.numpy as jnp
import jax.random as jrand

from tinyppl import categorical, observe


def create_simple_hmm_params():
    """Two states, two observation symbols."""
    initial_probs = jnp.array([0.6, 0.4])
    transition_matrix = jnp.array(
        [
            [0.7, 0.3],
            [0.4, 0.6],
        ]
    )
    emission_matrix = jnp.array(
        [
            [0.8, 0.2],  # state 0 -> obs 0 likely
            [0.3, 0.7],  # state 1 -> obs 1 likely
        ]
    )
    return initial_probs, transition_matrix, emission_matrix


def make_hmm(observations, initial_probs, transition_matrix, emission_matrix):
    """Build an HMM program conditioned on `observations`."""

    def hmm(key):
        key, sub = jrand.split(key)
        state = categorical(probs=initial_probs).sample(sub)
        observe(observations[0], categorical(probs=emission_matrix[state]))
        for t in range(1, len(observations)):
            key, sub = jrand.split(key)
            state = categorical(probs=transition_matrix[state]).sample(sub)
            observe(observations[t], categorical(probs=emission_matrix[state]))
        return state

    return hmm


def forward_filter(observations, initial_probs, transition_matrix, emission_matrix):
    """
    Forward filtering in log space.

    Returns:
        filtered: p(x_T | y_{1:T}) for the final time step, shape (K,)
        log_marginal: log p(y_{1:T})
    """
    log_transition = jnp.log(transition_matrix)
    log_emission = jnp.log(emission_matrix)

    alpha = jnp.log(initial_probs) + log_emission[:, observations[0]]
    for t in range(1, len(observations)):
        prediction = jax.scipy.special.logsumexp(
            alpha[:, None] + log_transition, axis=0
        )
        alpha = log_emission[:, observations[t]] + prediction

    log_marginal = jax.scipy.special.logsumexp(alpha)
    return jnp.exp(alpha - log_marginal), log_marginal
