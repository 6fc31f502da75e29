"""Three-coin model: which of three coins produced three heads in a row?

Coin `X` is drawn uniformly from {0, 1, 2} and lands heads with probability
`X / 2`. The posterior probability that the fair coin (`X = 1`) was drawn is
`(1/24) / (1/24 + 1/3)`.
"""

import jax.numpy as jnp

from tinyppl import bernoulli, observe, uniform_discrete


def analytic_fair_coin_posterior(num_heads=3):
    """Exact P(X = 1 | num_heads heads)."""
    # Coin 0 never lands heads, so only coins 1 and 2 contribute.
    fair = (1 / 3) * 0.5**num_heads
    double_headed = (1 / 3) * 1.0**num_heads
    return fair / (fair + double_headed)


def make_three_coins(num_heads=3):
    """Build the coin program observing `num_heads` heads."""

    def three_coins(key):
        coin = uniform_discrete(0, 2).sample(key)
        for _ in range(num_heads):
            observe(1, bernoulli(probs=coin / 2))
        return jnp.where(coin == 1, 1.0, 0.0)

    return three_coins
