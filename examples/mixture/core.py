"""Gaussian mixture with an unknown number of components.

The number of components is `1 + Poisson(1)`, so particles have different
shapes; the program runs with the "sequential" strategy.
"""

import jax.numpy as jnp
import jax.random as jrand

from tinyppl import categorical, dirichlet, normal, observe, poisson

ys = jnp.array([1.2, 1.1, 3.3])


def make_mixture(data=ys):
    def mixture(key):
        key, sub = jrand.split(key)
        n_mix_components = 1 + int(poisson(rate=1.0).sample(sub))

        key, sub = jrand.split(key)
        if n_mix_components == 1:
            mixture_proportions = jnp.ones(1)
        else:
            mixture_proportions = dirichlet(jnp.ones(n_mix_components)).sample(sub)

        key, sub = jrand.split(key)
        mean_parameters = normal(0.0, 1.0).sample(sub, sample_shape=(n_mix_components,))

        for y in data:
            key, sub = jrand.split(key)
            component = categorical(probs=mixture_proportions).sample(sub)
            observe(y, normal(mean_parameters[component], 1.0))
        return n_mix_components

    return mixture
